from decimal import Decimal
from typing import Dict, Any

from sqlalchemy.orm import Session

from medistore.data.database import transaction
from medistore.data.models.cart import CartModel
from medistore.data.models.cart_item import CartItemModel
from medistore.domain.errors import ErrorKind, ServiceError
from medistore.repos.cart_repo import CartRepo
from medistore.repos.medicine_repo import MedicineRepo
from medistore.utils.logging import get_logger

logger = get_logger(__name__)


def _serialize_item(item: CartItemModel) -> Dict[str, Any]:
    medicine = item.medicine
    return {
        "id": item.id,
        "medicine_id": item.medicine_id,
        "quantity": item.quantity,
        "unit_price": item.unit_price,
        "medicine": {
            "id": medicine.id,
            "name": medicine.name,
            "generic_name": medicine.generic_name,
            "manufacturer": medicine.manufacturer,
            "is_active": medicine.is_active,
            "stock": medicine.stock,
        },
    }


def _check_quantity(quantity, allow_zero: bool = False) -> int:
    minimum = 0 if allow_zero else 1
    if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity < minimum:
        kind = "non-negative" if allow_zero else "positive"
        raise ServiceError(ErrorKind.VALIDATION, f"quantity must be a {kind} integer")
    return quantity


class CartService:
    """
    Cart use cases for customers.
    commands (add, update, remove) refresh unit_price to the current medicine price,
    query (get) only reads
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = CartRepo(db)
        self.medicine_repo = MedicineRepo(db)

    #query
    def get_cart(self, user_id: int) -> Dict[str, Any]:
        cart = self.repo.get_cart_by_user(user_id, with_items=True)

        if not cart:
            return {"cart_id": None, "items": [], "subtotal": Decimal("0.00")}

        items = [_serialize_item(i) for i in cart.items]
        subtotal = sum((i.unit_price * i.quantity for i in cart.items), Decimal("0.00"))

        return {"cart_id": cart.id, "items": items, "subtotal": subtotal}

    #commands
    def add_item(self, user_id: int, medicine_id: int, quantity: int = 1) -> Dict[str, Any]:
        _check_quantity(quantity)

        with transaction(self.db):
            medicine = self.medicine_repo.get_medicine(medicine_id)
            if not medicine:
                raise ServiceError(ErrorKind.NOT_FOUND, "Medicine not found")
            if not medicine.is_active:
                raise ServiceError(ErrorKind.MEDICINE_UNAVAILABLE, "Medicine is not available")

            #cart created lazily on first add
            cart = self.repo.get_cart_by_user(user_id)
            if not cart:
                cart = self.repo.create_cart(CartModel(user_id=user_id))
                logger.info(f"Created cart {cart.id} for user {user_id}")

            item = self.repo.get_cart_item(cart.id, medicine_id)
            new_quantity = quantity + (item.quantity if item else 0)
            if new_quantity > medicine.stock:
                raise ServiceError(ErrorKind.INSUFFICIENT_STOCK, "Requested quantity exceeds stock")

            if item:
                item.quantity = new_quantity
                item.unit_price = medicine.price
            else:
                item = CartItemModel(
                    cart_id=cart.id,
                    medicine=medicine,
                    quantity=new_quantity,
                    unit_price=medicine.price,
                )
            self.repo.add_cart_item(item)
            result = _serialize_item(item)

        logger.info(f"Medicine {medicine_id} x{new_quantity} in cart {cart.id}")
        return result

    def update_item(self, user_id: int, item_id: int, quantity: int) -> Dict[str, Any]:
        """quantity 0 removes the line."""
        _check_quantity(quantity, allow_zero=True)

        with transaction(self.db):
            item = self._owned_item(user_id, item_id)

            if not item.medicine.is_active:
                raise ServiceError(ErrorKind.MEDICINE_UNAVAILABLE, "Medicine is not available")

            if quantity == 0:
                self.repo.delete_cart_item(item)
                return {"deleted": True}

            if quantity > item.medicine.stock:
                raise ServiceError(ErrorKind.INSUFFICIENT_STOCK, "Requested quantity exceeds stock")

            item.quantity = quantity
            item.unit_price = item.medicine.price
            self.repo.add_cart_item(item)
            return _serialize_item(item)

    def remove_item(self, user_id: int, item_id: int) -> None:
        with transaction(self.db):
            item = self._owned_item(user_id, item_id)
            self.repo.delete_cart_item(item)

        logger.info(f"Removed cart item {item_id} for user {user_id}")

    def _owned_item(self, user_id: int, item_id: int) -> CartItemModel:
        item = self.repo.get_item(item_id)
        if not item:
            raise ServiceError(ErrorKind.NOT_FOUND, "Cart item not found")
        if item.cart.user_id != user_id:
            raise ServiceError(ErrorKind.FORBIDDEN, "Unauthorized")
        return item
