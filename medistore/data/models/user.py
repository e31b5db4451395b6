from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String

from medistore.data.database import Base
from medistore.domain.actor import UserRole, UserStatus


class UserModel(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    role = Column(String(20), nullable=False, default=UserRole.CUSTOMER.value)
    status = Column(String(20), nullable=False, default=UserStatus.UNBAN.value)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
