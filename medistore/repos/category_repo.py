from sqlalchemy import select, update
from sqlalchemy.orm import Session

from medistore.data.models.category import CategoryModel
from medistore.data.models.medicine import MedicineModel


class CategoryRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_category(self, category_id: int) -> CategoryModel | None:
        return self.db.get(CategoryModel, category_id)

    def get_by_name(self, name: str) -> CategoryModel | None:
        return self.db.execute(
            select(CategoryModel).where(CategoryModel.name == name)
        ).scalar_one_or_none()

    def list_categories(self) -> list[CategoryModel]:
        return list(self.db.execute(select(CategoryModel).order_by(CategoryModel.name)).scalars())

    def create_category(self, category: CategoryModel) -> CategoryModel:
        self.db.add(category)
        self.db.flush()
        return category

    def get_by_slug(self, slug: str) -> CategoryModel | None:
        return self.db.execute(
            select(CategoryModel).where(CategoryModel.slug == slug)
        ).scalar_one_or_none()

    def delete_category(self, category: CategoryModel) -> None:
        #medicines stay in the catalog, uncategorized
        self.db.execute(
            update(MedicineModel)
            .where(MedicineModel.category_id == category.id)
            .values(category_id=None)
            .execution_options(synchronize_session="fetch")
        )
        self.db.delete(category)
        self.db.flush()
