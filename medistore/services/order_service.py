# medistore/services/order_service.py
from typing import Any, Dict
from uuid import uuid4

import redis
from sqlalchemy.orm import Session

from medistore.data.database import transaction
from medistore.data.models.order import OrderModel
from medistore.data.models.order_item import OrderItemModel
from medistore.domain.actor import Actor, UserRole
from medistore.domain.errors import ErrorKind, ServiceError
from medistore.domain.order_status import (
    OrderStatus,
    can_transition,
    check_transition,
    parse_status,
)
from medistore.repos.cart_repo import CartRepo
from medistore.repos.order_repo import OrderRepo
from medistore.services.cart_snapshot import CartSnapshot, CartSnapshotReader
from medistore.services.inventory_service import InventoryService
from medistore.services.lock_service import LockService
from medistore.services.notification_service import NotificationService
from medistore.utils.logging import get_logger
from medistore.utils.pagination import paginate
from medistore.utils.settings import CHECKOUT_LOCK_TTL_SECONDS

logger = get_logger(__name__)

ORDER_SORT_FIELDS = ("createdAt", "total", "status")


def serialize_order(order: OrderModel) -> Dict[str, Any]:
    return {
        "id": order.id,
        "user_id": order.user_id,
        "status": order.status,
        "total": order.total,
        "shipping_name": order.shipping_name,
        "shipping_phone": order.shipping_phone,
        "shipping_address": order.shipping_address,
        "created_at": order.created_at,
        "updated_at": order.updated_at,
        "items": [
            {
                "id": i.id,
                "medicine_id": i.medicine_id,
                "medicine_name": i.medicine.name if i.medicine else None,
                "seller_id": i.medicine.seller_id if i.medicine else None,
                "quantity": i.quantity,
                "unit_price": i.unit_price,
                "subtotal": i.subtotal,
            }
            for i in order.items
        ],
        "user": (
            {"id": order.user.id, "name": order.user.name, "email": order.user.email}
            if order.user
            else None
        ),
    }


def _required_text(value: str | None, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ServiceError(ErrorKind.VALIDATION, f"{field} is required")
    return value.strip()


class OrderService:
    """
    Order lifecycle: checkout (cart -> immutable order), status changes by
    seller/admin, customer self-cancel and role-scoped queries.

    Every mutation runs in one transaction together with the stock changes it
    implies. Notifications go out only after commit.
    """

    def __init__(
        self,
        db: Session,
        lock_service: LockService | None = None,
        notification_service: NotificationService | None = None,
    ):
        self.db = db
        self.repo = OrderRepo(db)
        self.cart_repo = CartRepo(db)
        self.snapshot_reader = CartSnapshotReader(db)
        self.inventory = InventoryService(db)
        self.lock_service = lock_service or LockService()
        self.notification_service = notification_service or NotificationService()

    # =====================================================
    # COMMANDS
    # =====================================================
    def create_order(
        self,
        user_id: int,
        shipping_phone: str | None,
        shipping_address: str | None,
        shipping_name: str | None = None,
    ) -> Dict[str, Any]:
        """
        Use Case: checkout, cash on delivery.

        1. Load cart snapshot (medicine rows locked)
        2. Validate every line: active, enough stock
        3. Total from current medicine prices
        4. Order PLACED + frozen OrderItems
        5. Reserve stock per line
        6. Clear cart items
        All in one transaction, any failure leaves no trace.
        """
        phone = _required_text(shipping_phone, "shippingPhone")
        address = _required_text(shipping_address, "shippingAddress")
        name = shipping_name.strip() if isinstance(shipping_name, str) and shipping_name.strip() else None

        token = uuid4().hex
        if not self.lock_service.acquire_checkout_lock(user_id, token, CHECKOUT_LOCK_TTL_SECONDS):
            raise ServiceError(ErrorKind.CONFLICT, "Checkout already in progress")

        try:
            with transaction(self.db):
                order = self._build_order(user_id, name, phone, address)
                result = serialize_order(self.repo.get_order(order.id))
        finally:
            self._release_lock(user_id, token)

        logger.info(
            f"Order {result['id']} created by user {user_id} total={result['total']}",
            extra={"order_id": result["id"], "user_id": user_id, "operation": "create_order"},
        )
        self.notification_service.order_placed(user_id, result["id"])
        return result

    def _release_lock(self, user_id: int, token: str) -> None:
        #best effort, an unreleased key expires with its TTL
        try:
            self.lock_service.release_checkout_lock(user_id, token)
        except redis.RedisError as e:
            logger.warning(
                f"Could not release checkout lock for user {user_id}: {e}",
                extra={"user_id": user_id, "operation": "create_order"},
            )

    def _build_order(self, user_id: int, name: str | None, phone: str, address: str) -> OrderModel:
        snapshot = self.snapshot_reader.load(user_id)
        self._validate_lines(snapshot)

        order = OrderModel(
            user_id=user_id,
            status=OrderStatus.PLACED.value,
            total=snapshot.total,
            shipping_name=name,
            shipping_phone=phone,
            shipping_address=address,
            items=[
                OrderItemModel(
                    medicine_id=line.medicine_id,
                    quantity=line.quantity,
                    unit_price=line.price,
                )
                for line in snapshot.lines
            ],
        )
        self.repo.add_order(order)

        for line in snapshot.lines:
            self.inventory.reserve(line.medicine_id, line.quantity)

        self.cart_repo.clear_items(snapshot.cart_id)
        return order

    @staticmethod
    def _validate_lines(snapshot: CartSnapshot) -> None:
        for line in snapshot.lines:
            if not line.is_active:
                raise ServiceError(
                    ErrorKind.MEDICINE_UNAVAILABLE,
                    f"Medicine {line.name} is not available",
                )
            if line.quantity > line.stock:
                raise ServiceError(
                    ErrorKind.INSUFFICIENT_STOCK,
                    f"Insufficient stock for {line.name}",
                )

    def update_status(self, actor: Actor, order_id: int, new_status) -> Dict[str, Any]:
        """
        Use Case: seller/admin moves an order along the state machine.
        Moving into CANCELLED restocks every line in the same transaction.
        """
        target = parse_status(new_status)

        with transaction(self.db):
            order = self._get_for_update(order_id)

            if actor.role == UserRole.CUSTOMER:
                raise ServiceError(ErrorKind.FORBIDDEN, "Customers can only cancel their own orders")
            if not can_transition(actor, order, target):
                raise ServiceError(ErrorKind.FORBIDDEN, "Unauthorized: you don't own items in this order")

            current = OrderStatus(order.status)
            if current == target:
                #no-op, checked after authorization so it never leaks other orders
                return serialize_order(order)

            check_transition(current, target)
            self._apply(order, current, target)
            result = serialize_order(self.repo.get_order(order_id))

        logger.info(
            f"Order {order_id} status changed {current.value} -> {target.value} by {actor.id} ({actor.role.value})",
            extra={"order_id": order_id, "user_id": actor.id, "operation": "update_status", "status": target.value},
        )
        self.notification_service.status_changed(result["user_id"], order_id, target.value)
        return result

    def cancel_by_customer(self, actor: Actor, order_id: int) -> Dict[str, Any]:
        """
        Use Case: the buyer cancels their own order, only while still PLACED.
        """
        with transaction(self.db):
            order = self._get_for_update(order_id)

            if order.user_id != actor.id or not can_transition(actor, order, OrderStatus.CANCELLED):
                raise ServiceError(ErrorKind.FORBIDDEN, "Unauthorized")

            current = OrderStatus(order.status)
            if current != OrderStatus.PLACED:
                raise ServiceError(
                    ErrorKind.CANCEL_NOT_ALLOWED,
                    "You can cancel the order only before it is confirmed or processed by seller",
                )

            self._apply(order, current, OrderStatus.CANCELLED)
            result = serialize_order(self.repo.get_order(order_id))

        logger.info(
            f"Order {order_id} cancelled by customer {actor.id}",
            extra={"order_id": order_id, "user_id": actor.id, "operation": "cancel_order"},
        )
        self.notification_service.order_cancelled(actor.id, order_id)
        return result

    def _get_for_update(self, order_id: int) -> OrderModel:
        order = self.repo.get_order(order_id, for_update=True)
        if not order:
            raise ServiceError(ErrorKind.NOT_FOUND, "Order not found")
        return order

    def _apply(self, order: OrderModel, current: OrderStatus, target: OrderStatus) -> None:
        #stock goes back on every path into CANCELLED, CANCELLED is terminal so this runs once per order
        if target == OrderStatus.CANCELLED:
            for item in order.items:
                self.inventory.restore(item.medicine_id, item.quantity)

        #compare-and-set, update status set 'X' where id 1 and status 'PLACED'
        rowcount = self.repo.update_status(order.id, expected=current.value, new=target.value)
        if rowcount == 0:
            raise ServiceError(
                ErrorKind.CONFLICT,
                "Order was modified by another operation, reload and retry",
            )

    # =====================================================
    # QUERY
    # =====================================================
    def list_orders(
        self,
        actor: Actor,
        page: int | None = None,
        limit: int | None = None,
        sort_by: str | None = None,
        sort_order: str | None = None,
    ) -> Dict[str, Any]:
        """
        ADMIN: all orders, SELLER: orders with their medicines, CUSTOMER: own orders.
        """
        p = paginate(page, limit, sort_by, sort_order, allowed_sort=ORDER_SORT_FIELDS)

        scope = {}
        if actor.role == UserRole.SELLER:
            scope["seller_id"] = actor.id
        elif actor.role != UserRole.ADMIN:
            scope["user_id"] = actor.id

        orders, total = self.repo.list_orders(
            skip=p.skip,
            limit=p.limit,
            sort_by=p.sort_by,
            sort_order=p.sort_order,
            **scope,
        )
        return {
            "orders": [serialize_order(o) for o in orders],
            "meta": p.meta(total),
        }

    def get_order(self, actor: Actor, order_id: int) -> Dict[str, Any]:
        return serialize_order(self._get_visible(actor, order_id))

    def track_order(self, actor: Actor, order_id: int) -> Dict[str, Any]:
        order = self._get_visible(actor, order_id)
        return {"status": order.status}

    def _get_visible(self, actor: Actor, order_id: int) -> OrderModel:
        #out of scope looks exactly like missing
        order = self.repo.get_order(order_id)
        if not order or not self._can_view(actor, order):
            raise ServiceError(ErrorKind.NOT_FOUND, "Order not found")
        return order

    @staticmethod
    def _can_view(actor: Actor, order: OrderModel) -> bool:
        if actor.role == UserRole.ADMIN:
            return True
        if actor.role == UserRole.SELLER:
            return any(i.medicine is not None and i.medicine.seller_id == actor.id for i in order.items)
        return order.user_id == actor.id
