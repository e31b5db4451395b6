#import all models so SQLAlchemy registers them in Base.metadata

from medistore.data.models.user import UserModel
from medistore.data.models.category import CategoryModel
from medistore.data.models.medicine import MedicineModel
from medistore.data.models.cart import CartModel
from medistore.data.models.cart_item import CartItemModel
from medistore.data.models.order import OrderModel
from medistore.data.models.order_item import OrderItemModel
from medistore.data.models.review import ReviewModel

__all__ = [
    "UserModel",
    "CategoryModel",
    "MedicineModel",
    "CartModel",
    "CartItemModel",
    "OrderModel",
    "OrderItemModel",
    "ReviewModel",
]
