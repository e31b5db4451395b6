from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from medistore.data.database import Base
from medistore.domain.order_status import OrderStatus


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    #PLACED, CONFIRMS, PROCESSING, SHIPPED, DELIVERED, CANCELLED, the only mutable column
    status = Column(String(20), nullable=False, default=OrderStatus.PLACED.value, index=True)
    total = Column(Numeric(12, 2), nullable=False)

    shipping_name = Column(String(200), nullable=True)
    shipping_phone = Column(String(50), nullable=False)
    shipping_address = Column(Text, nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    items = relationship(
        "OrderItemModel",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItemModel.id",
    )
    user = relationship("UserModel")
