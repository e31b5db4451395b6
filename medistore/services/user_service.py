from typing import Any, Dict

from sqlalchemy.orm import Session

from medistore.data.database import transaction
from medistore.data.models.user import UserModel
from medistore.domain.actor import Actor, UserRole, UserStatus
from medistore.domain.errors import ErrorKind, ServiceError
from medistore.domain.schemas import ProfileUpdate, UserCreate, UserRead
from medistore.repos.user_repo import UserRepo
from medistore.utils.logging import get_logger
from medistore.utils.pagination import paginate

logger = get_logger(__name__)

SELF_REGISTER_ROLES = (UserRole.CUSTOMER, UserRole.SELLER)


class UserService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = UserRepo(db)

    def create_user(self, payload: UserCreate) -> UserRead:
        role = UserRole(payload.role)
        if role not in SELF_REGISTER_ROLES:
            raise ServiceError(ErrorKind.VALIDATION, "Only CUSTOMER or SELLER accounts can register")

        email = payload.email.strip().lower()
        with transaction(self.db):
            if self.repo.get_by_email(email):
                raise ServiceError(ErrorKind.CONFLICT, "Email already registered")

            created = self.repo.create_user(
                UserModel(name=payload.name.strip(), email=email, role=role.value)
            )
            result = UserRead.model_validate(created)

        logger.info(f"Registered {role.value} user {created.id}", extra={"user_id": created.id})
        return result

    def get_user(self, user_id: int) -> UserRead:
        user = self.repo.get_user(user_id)
        if not user:
            raise ServiceError(ErrorKind.NOT_FOUND, "User not found")
        return UserRead.model_validate(user)

    def resolve_actor(self, user_id: int | None) -> Actor:
        """Turns the authenticated user id into an Actor, or refuses."""
        if user_id is None:
            raise ServiceError(ErrorKind.UNAUTHORIZED, "Unauthorized")

        user = self.repo.get_user(user_id)
        if not user:
            raise ServiceError(ErrorKind.UNAUTHORIZED, "Unauthorized")
        if user.status == UserStatus.BAN.value:
            raise ServiceError(ErrorKind.FORBIDDEN, "Account is banned")

        return Actor(id=user.id, role=UserRole(user.role), name=user.name, email=user.email)

    def list_users(self, page: int | None = None, limit: int | None = None, role: str | None = None) -> Dict[str, Any]:
        if role is not None:
            try:
                role = UserRole(role.strip().upper()).value
            except ValueError:
                raise ServiceError(ErrorKind.VALIDATION, f"Invalid role: {role!r}") from None

        p = paginate(page, limit)
        users, total = self.repo.list_users(skip=p.skip, limit=p.limit, role=role)
        return {"users": [UserRead.model_validate(u) for u in users], "meta": p.meta(total)}

    def update_status(self, actor: Actor, user_id: int, status: str) -> UserRead:
        """Admin ban / unban. Banned users are refused at authentication."""
        new_status = UserStatus(status)
        if user_id == actor.id:
            raise ServiceError(ErrorKind.VALIDATION, "You cannot change your own status")

        with transaction(self.db):
            user = self.repo.get_user(user_id)
            if not user:
                raise ServiceError(ErrorKind.NOT_FOUND, "User not found")
            user.status = new_status.value
            self.db.flush()
            result = UserRead.model_validate(user)

        logger.info(
            f"User {user_id} status set to {new_status.value} by admin {actor.id}",
            extra={"user_id": user_id, "operation": "update_user_status", "status": new_status.value},
        )
        return result

    def update_profile(self, user_id: int, payload: ProfileUpdate) -> UserRead:
        with transaction(self.db):
            user = self.repo.get_user(user_id)
            if not user:
                raise ServiceError(ErrorKind.NOT_FOUND, "User not found")
            user.name = payload.name.strip()
            self.db.flush()
            return UserRead.model_validate(user)
