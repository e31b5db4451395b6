#medistore/data/models/medicine.py
from datetime import datetime, timezone

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from medistore.data.database import Base


class MedicineModel(Base):
    __tablename__ = "medicines"

    id = Column(Integer, primary_key=True)
    name = Column(String(200), nullable=False, index=True)
    generic_name = Column(String(200), nullable=True)
    manufacturer = Column(String(200), nullable=True)
    description = Column(Text, nullable=True)

    price = Column(Numeric(10, 2), nullable=False)
    #stock changes only through InventoryService (reserve / restore / set_level)
    stock = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)

    seller_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    seller = relationship("UserModel")
    category = relationship("CategoryModel")

    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_medicine_stock_non_negative"),
        CheckConstraint("price >= 0", name="ck_medicine_price_non_negative"),
    )
