# medistore/domain/order_status.py
"""
Order status state machine and the authorization policy for transitions.

Pure rules only: nothing here touches the database. OrderService loads the
order, asks these functions, then persists.
"""
from enum import Enum

from medistore.domain.actor import Actor, UserRole
from medistore.domain.errors import ErrorKind, ServiceError


class OrderStatus(str, Enum):
    PLACED = "PLACED"
    CONFIRMS = "CONFIRMS"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


VALID_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PLACED: frozenset(
        {OrderStatus.PROCESSING, OrderStatus.CANCELLED, OrderStatus.CONFIRMS}
    ),
    OrderStatus.CONFIRMS: frozenset({OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

TERMINAL_STATUSES = frozenset(s for s, targets in VALID_TRANSITIONS.items() if not targets)

#no cancel once the parcel has left
NON_CANCELLABLE = frozenset({OrderStatus.SHIPPED, OrderStatus.DELIVERED})


def parse_status(value) -> OrderStatus:
    """Case-insensitive parse; unknown values are a validation error."""
    if isinstance(value, OrderStatus):
        return value
    normalized = str(value or "").strip().upper()
    try:
        return OrderStatus(normalized)
    except ValueError:
        raise ServiceError(ErrorKind.VALIDATION, f"Invalid status: {value!r}") from None


def is_allowed(current: OrderStatus, target: OrderStatus) -> bool:
    return target in VALID_TRANSITIONS[current]


def check_transition(current: OrderStatus, target: OrderStatus) -> None:
    """Raises ILLEGAL_TRANSITION unless current -> target is in the table."""
    if target == OrderStatus.CANCELLED and current in NON_CANCELLABLE:
        raise ServiceError(
            ErrorKind.ILLEGAL_TRANSITION,
            "Cannot cancel order after it has been shipped or delivered",
        )

    if not is_allowed(current, target):
        raise ServiceError(
            ErrorKind.ILLEGAL_TRANSITION,
            f"Invalid status transition from {current.value} to {target.value}",
        )


def seller_ids(order) -> set[int]:
    return {item.medicine.seller_id for item in order.items if item.medicine is not None}


def can_transition(actor: Actor, order, target: OrderStatus) -> bool:
    """
    Who may move this order to target:
    - ADMIN: any order
    - SELLER: orders with at least one item they sell
    - CUSTOMER: only cancelling their own order
    Whether the move itself is legal is check_transition's job.
    """
    if actor.role == UserRole.ADMIN:
        return True

    if actor.role == UserRole.SELLER:
        return actor.id in seller_ids(order)

    return target == OrderStatus.CANCELLED and order.user_id == actor.id
