from sqlalchemy import func, select
from sqlalchemy.orm import Session

from medistore.data.models.user import UserModel


class UserRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: int) -> UserModel | None:
        return self.db.get(UserModel, user_id)

    def get_by_email(self, email: str) -> UserModel | None:
        return self.db.execute(
            select(UserModel).where(UserModel.email == email)
        ).scalar_one_or_none()

    def create_user(self, user: UserModel) -> UserModel:
        self.db.add(user)
        self.db.flush()
        return user

    def list_users(self, *, skip: int, limit: int, role: str | None = None) -> tuple[list[UserModel], int]:
        conditions = [UserModel.role == role] if role else []
        total = self.db.execute(
            select(func.count()).select_from(UserModel).where(*conditions)
        ).scalar_one()
        rows = self.db.execute(
            select(UserModel)
            .where(*conditions)
            .order_by(UserModel.created_at.desc(), UserModel.id.desc())
            .offset(skip)
            .limit(limit)
        ).scalars()
        return list(rows), total
