import re

from sqlalchemy.orm import Session

from medistore.data.database import transaction
from medistore.data.models.category import CategoryModel
from medistore.domain.errors import ErrorKind, ServiceError
from medistore.domain.schemas import CategoryCreate, CategoryOut, CategoryUpdate
from medistore.repos.category_repo import CategoryRepo
from medistore.utils.logging import get_logger

logger = get_logger(__name__)


def slugify(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


class CategoryService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = CategoryRepo(db)

    def list_categories(self) -> list[CategoryOut]:
        return [CategoryOut.model_validate(c) for c in self.repo.list_categories()]

    def get_category(self, category_id: int) -> CategoryOut:
        return CategoryOut.model_validate(self._get(category_id))

    def create_category(self, payload: CategoryCreate) -> CategoryOut:
        name = payload.name.strip()
        with transaction(self.db):
            if self.repo.get_by_name(name):
                raise ServiceError(ErrorKind.CONFLICT, "Category already exists")
            created = self.repo.create_category(
                CategoryModel(
                    name=name,
                    slug=payload.slug or slugify(name),
                    description=payload.description,
                )
            )
            return CategoryOut.model_validate(created)

    def update_category(self, category_id: int, payload: CategoryUpdate) -> CategoryOut:
        """Slug changes only when one is sent."""
        with transaction(self.db):
            category = self._get(category_id)

            if payload.name is not None:
                name = payload.name.strip()
                other = self.repo.get_by_name(name)
                if other and other.id != category.id:
                    raise ServiceError(ErrorKind.CONFLICT, "Category already exists")
                category.name = name

            if payload.slug is not None:
                slug = slugify(payload.slug)
                other = self.repo.get_by_slug(slug)
                if other and other.id != category.id:
                    raise ServiceError(ErrorKind.CONFLICT, "Slug already in use")
                category.slug = slug

            if "description" in payload.model_fields_set:
                category.description = payload.description

            self.db.flush()
            return CategoryOut.model_validate(category)

    def delete_category(self, category_id: int) -> None:
        with transaction(self.db):
            self.repo.delete_category(self._get(category_id))

        logger.info(f"Category {category_id} deleted", extra={"operation": "delete_category"})

    def _get(self, category_id: int) -> CategoryModel:
        category = self.repo.get_category(category_id)
        if not category:
            raise ServiceError(ErrorKind.NOT_FOUND, "Category not found")
        return category
