# medistore/domain/schemas.py
from datetime import datetime
from decimal import Decimal
from typing import Generic, List, Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DataT = TypeVar("DataT")
MetaT = TypeVar("MetaT")


class CamelModel(BaseModel):
    """Base schema: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ---------- envelopes ----------

class Envelope(CamelModel, Generic[DataT]):
    message: str
    data: DataT


class MetaEnvelope(Envelope[DataT], Generic[DataT, MetaT]):
    meta: MetaT


class PageMeta(CamelModel):
    page: int
    limit: int
    total: int


class RatingMeta(CamelModel):
    average_rating: Optional[float] = None
    review_count: int


class ReviewPageMeta(PageMeta, RatingMeta):
    pass


# ---------- users ----------

class UserCreate(CamelModel):
    """Schema for self-registration."""

    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    role: Literal["CUSTOMER", "SELLER", "ADMIN"] = "CUSTOMER"


class UserRead(CamelModel):
    id: int
    name: str
    email: str
    role: str
    status: str
    created_at: datetime


class ProfileUpdate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)


class UserStatusUpdate(CamelModel):
    status: Literal["UNBAN", "BAN"]


class UserSummary(CamelModel):
    id: int
    name: str
    email: str


# ---------- categories ----------

class CategoryCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    slug: Optional[str] = Field(None, max_length=120)
    description: Optional[str] = None


class CategoryUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    slug: Optional[str] = Field(None, min_length=1, max_length=120)
    description: Optional[str] = None


class CategoryOut(CamelModel):
    id: int
    name: str
    slug: Optional[str] = None
    description: Optional[str] = None


# ---------- medicines ----------

class MedicineCreate(CamelModel):
    """Schema for a seller adding a medicine to the catalog."""

    name: str = Field(..., min_length=1, max_length=200)
    generic_name: Optional[str] = None
    manufacturer: Optional[str] = None
    description: Optional[str] = None
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    stock: int = Field(0, ge=0)
    is_active: bool = True
    category_id: Optional[int] = Field(None, gt=0)


class MedicineUpdate(CamelModel):
    """Only the fields sent are changed, stock is an absolute value."""

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    generic_name: Optional[str] = None
    manufacturer: Optional[str] = None
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    stock: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None
    category_id: Optional[int] = Field(None, gt=0)


class StockUpdate(CamelModel):
    stock: int = Field(..., ge=0)


class MedicineOut(CamelModel):
    id: int
    name: str
    generic_name: Optional[str] = None
    manufacturer: Optional[str] = None
    description: Optional[str] = None
    price: Decimal
    stock: int
    is_active: bool
    seller_id: int
    category_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime


# ---------- cart ----------

class CartItemIn(CamelModel):
    medicine_id: int = Field(..., gt=0)
    quantity: int = Field(1, gt=0)


class CartItemUpdate(CamelModel):
    quantity: int = Field(..., ge=0)


class CartMedicine(CamelModel):
    id: int
    name: str
    generic_name: Optional[str] = None
    manufacturer: Optional[str] = None
    is_active: bool
    stock: int


class CartItemOut(CamelModel):
    id: int
    medicine_id: int
    quantity: int
    unit_price: Decimal
    medicine: CartMedicine


class CartOut(CamelModel):
    cart_id: Optional[int] = None
    items: List[CartItemOut]
    subtotal: Decimal


# ---------- orders ----------

class OrderCreateIn(CamelModel):
    """Checkout body, phone and address are checked for blanks by the service."""

    shipping_name: Optional[str] = None
    shipping_phone: Optional[str] = None
    shipping_address: Optional[str] = None


class StatusUpdateIn(CamelModel):
    status: str


class OrderItemOut(CamelModel):
    id: int
    medicine_id: int
    medicine_name: Optional[str] = None
    seller_id: Optional[int] = None
    quantity: int
    unit_price: Decimal
    subtotal: Decimal


class OrderOut(CamelModel):
    id: int
    user_id: int
    status: str
    total: Decimal
    shipping_name: Optional[str] = None
    shipping_phone: str
    shipping_address: str
    created_at: datetime
    updated_at: datetime
    items: List[OrderItemOut]
    user: Optional[UserSummary] = None


class TrackOut(CamelModel):
    status: str


# ---------- reviews ----------

class ReviewCreate(CamelModel):
    medicine_id: int = Field(..., gt=0)
    rating: int
    comment: Optional[str] = None


class ReviewUpdate(CamelModel):
    rating: Optional[int] = None
    comment: Optional[str] = None


class ReviewOut(CamelModel):
    id: int
    user_id: int
    medicine_id: int
    rating: int
    comment: Optional[str] = None
    created_at: datetime
    updated_at: datetime
