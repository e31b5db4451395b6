# medistore/services/cart_snapshot.py
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.orm import Session

from medistore.domain.errors import ErrorKind, ServiceError
from medistore.repos.cart_repo import CartRepo
from medistore.repos.medicine_repo import MedicineRepo


@dataclass(frozen=True)
class CartLine:
    cart_item_id: int
    medicine_id: int
    name: str
    quantity: int
    cart_unit_price: Decimal
    #authoritative values from the locked medicine row
    price: Decimal
    stock: int
    is_active: bool
    seller_id: int

    @property
    def subtotal(self) -> Decimal:
        return self.price * self.quantity


@dataclass(frozen=True)
class CartSnapshot:
    cart_id: int
    user_id: int
    lines: tuple[CartLine, ...]

    @property
    def total(self) -> Decimal:
        return sum((line.subtotal for line in self.lines), Decimal("0.00"))


class CartSnapshotReader:
    """
    Reads the customer's cart joined with current medicine price/stock/status.
    Meant to be called inside the checkout transaction: medicine rows are
    read FOR UPDATE so the values stay valid until commit.
    """

    def __init__(self, db: Session):
        self.cart_repo = CartRepo(db)
        self.medicine_repo = MedicineRepo(db)

    def load(self, user_id: int) -> CartSnapshot:
        cart = self.cart_repo.get_cart_by_user(user_id)
        if not cart:
            raise ServiceError(ErrorKind.EMPTY_CART, "Cart is empty")

        items = self.cart_repo.get_cart_items(cart.id)
        if not items:
            raise ServiceError(ErrorKind.EMPTY_CART, "Cart is empty")

        medicines = self.medicine_repo.lock_medicines(i.medicine_id for i in items)

        lines = []
        for item in items:
            medicine = medicines.get(item.medicine_id)
            if medicine is None:
                raise ServiceError(
                    ErrorKind.NOT_FOUND,
                    f"Medicine not found for cart item {item.id}",
                )
            lines.append(
                CartLine(
                    cart_item_id=item.id,
                    medicine_id=medicine.id,
                    name=medicine.name,
                    quantity=item.quantity,
                    cart_unit_price=item.unit_price,
                    price=medicine.price,
                    stock=medicine.stock,
                    is_active=medicine.is_active,
                    seller_id=medicine.seller_id,
                )
            )

        return CartSnapshot(cart_id=cart.id, user_id=user_id, lines=tuple(lines))
