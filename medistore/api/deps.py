# medistore/api/deps.py
from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from medistore.data.database import get_db
from medistore.domain.actor import Actor, UserRole
from medistore.domain.errors import ErrorKind, ServiceError
from medistore.services.lock_service import LockService
from medistore.services.notification_service import NotificationService
from medistore.services.order_service import OrderService
from medistore.services.user_service import UserService


def get_current_actor(
    request: Request,
    x_user_id: str | None = Header(None, alias="X-User-Id"),
    db: Session = Depends(get_db),
) -> Actor:
    """The X-User-Id header names the caller, the user row decides role and ban status."""
    user_id = int(x_user_id) if x_user_id and x_user_id.strip().isdigit() else None
    actor = UserService(db).resolve_actor(user_id)
    request.state.user_id = actor.id
    return actor


def require_roles(*roles: UserRole):
    def checker(actor: Actor = Depends(get_current_actor)) -> Actor:
        if actor.role not in roles:
            raise ServiceError(ErrorKind.FORBIDDEN, "Forbidden: insufficient role")
        return actor

    return checker


def get_lock_service() -> LockService:
    return LockService()


def get_notification_service() -> NotificationService:
    return NotificationService()


def get_order_service(
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
    notification_service: NotificationService = Depends(get_notification_service),
) -> OrderService:
    return OrderService(db, lock_service=lock_service, notification_service=notification_service)
