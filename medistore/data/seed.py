# medistore/data/seed.py
from medistore.data.database import Base, SessionLocal, engine, transaction
from medistore.data import models  # noqa: F401
from medistore.data.models.user import UserModel
from medistore.domain.actor import UserRole, UserStatus
from medistore.repos.user_repo import UserRepo
from medistore.utils.logging import get_logger
from medistore.utils.settings import ADMIN_EMAIL, ADMIN_NAME

logger = get_logger(__name__)


def seed_admin(db, name: str = ADMIN_NAME, email: str = ADMIN_EMAIL) -> UserModel:
    """Creates the admin account once, an existing email is left as it is."""
    repo = UserRepo(db)
    email = email.strip().lower()

    existing = repo.get_by_email(email)
    if existing:
        logger.info(f"Admin {email} already exists")
        return existing

    with transaction(db):
        admin = repo.create_user(
            UserModel(
                name=name,
                email=email,
                role=UserRole.ADMIN.value,
                status=UserStatus.UNBAN.value,
            )
        )
    logger.info(f"Admin {email} created", extra={"user_id": admin.id})
    return admin


def seed():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        seed_admin(db)
    finally:
        db.close()


if __name__ == "__main__":
    seed()
