# medistore/domain/actor.py
from dataclasses import dataclass
from enum import Enum


class UserRole(str, Enum):
    CUSTOMER = "CUSTOMER"
    SELLER = "SELLER"
    ADMIN = "ADMIN"


class UserStatus(str, Enum):
    UNBAN = "UNBAN"
    BAN = "BAN"


@dataclass(frozen=True)
class Actor:
    """Authenticated principal performing an operation."""

    id: int
    role: UserRole
    name: str = ""
    email: str = ""

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_seller(self) -> bool:
        return self.role == UserRole.SELLER

    @property
    def is_customer(self) -> bool:
        return self.role == UserRole.CUSTOMER
