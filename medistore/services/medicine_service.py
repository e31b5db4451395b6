# medistore/services/medicine_service.py
from typing import Any, Dict

from sqlalchemy.orm import Session

from medistore.data.database import transaction
from medistore.data.models.medicine import MedicineModel
from medistore.domain.actor import Actor, UserRole
from medistore.domain.errors import ErrorKind, ServiceError
from medistore.domain.schemas import MedicineCreate, MedicineOut, MedicineUpdate
from medistore.repos.category_repo import CategoryRepo
from medistore.repos.medicine_repo import MedicineRepo
from medistore.services.inventory_service import InventoryService
from medistore.utils.logging import get_logger
from medistore.utils.pagination import paginate

logger = get_logger(__name__)


class MedicineService:
    """
    Catalog plumbing: public browsing, sellers manage their own medicines.
    Stock edits are delegated to the inventory ledger.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = MedicineRepo(db)
        self.category_repo = CategoryRepo(db)
        self.inventory = InventoryService(db)

    #query
    def list_medicines(
        self,
        page: int | None = None,
        limit: int | None = None,
        seller_id: int | None = None,
        category_id: int | None = None,
        in_stock: bool | None = None,
    ) -> Dict[str, Any]:
        p = paginate(page, limit)
        rows, total = self.repo.list_medicines(
            skip=p.skip,
            limit=p.limit,
            seller_id=seller_id,
            category_id=category_id,
            in_stock=in_stock,
        )
        return {
            "medicines": [MedicineOut.model_validate(m) for m in rows],
            "meta": p.meta(total),
        }

    def get_medicine(self, medicine_id: int) -> MedicineOut:
        medicine = self.repo.get_medicine(medicine_id)
        if not medicine or not medicine.is_active:
            raise ServiceError(ErrorKind.NOT_FOUND, "Medicine not found")
        return MedicineOut.model_validate(medicine)

    #commands
    def create_medicine(self, actor: Actor, payload: MedicineCreate) -> MedicineOut:
        with transaction(self.db):
            self._check_category(payload.category_id)
            created = self.repo.add_medicine(
                MedicineModel(
                    name=payload.name.strip(),
                    generic_name=payload.generic_name,
                    manufacturer=payload.manufacturer,
                    description=payload.description,
                    price=payload.price,
                    stock=payload.stock,
                    is_active=payload.is_active,
                    seller_id=actor.id,
                    category_id=payload.category_id,
                )
            )
            result = MedicineOut.model_validate(created)

        logger.info(
            f"Medicine {created.id} created by seller {actor.id}",
            extra={"medicine_id": created.id, "user_id": actor.id},
        )
        return result

    def update_medicine(self, actor: Actor, medicine_id: int, payload: MedicineUpdate) -> MedicineOut:
        changes = payload.model_dump(exclude_unset=True)

        with transaction(self.db):
            medicine = self._owned_medicine(actor, medicine_id)

            if "category_id" in changes:
                self._check_category(changes["category_id"])

            stock = changes.pop("stock", None)
            for field, value in changes.items():
                setattr(medicine, field, value)
            self.db.flush()

            if stock is not None:
                self.inventory.set_level(medicine_id, stock)

            self.db.refresh(medicine)
            result = MedicineOut.model_validate(medicine)

        logger.info(
            f"Medicine {medicine_id} updated by {actor.id}: {sorted(payload.model_fields_set)}",
            extra={"medicine_id": medicine_id, "user_id": actor.id},
        )
        return result

    def update_stock(self, actor: Actor, medicine_id: int, stock: int) -> MedicineOut:
        with transaction(self.db):
            medicine = self._owned_medicine(actor, medicine_id)
            self.inventory.set_level(medicine_id, stock)
            self.db.refresh(medicine)
            return MedicineOut.model_validate(medicine)

    def delete_medicine(self, actor: Actor, medicine_id: int) -> None:
        """
        Soft delete: the medicine leaves the catalog, past order lines keep pointing at it.
        Carts holding it fail checkout with MEDICINE_UNAVAILABLE.
        """
        with transaction(self.db):
            medicine = self._owned_medicine(actor, medicine_id)
            medicine.is_active = False
            self.db.flush()

        logger.info(
            f"Medicine {medicine_id} removed from catalog by {actor.id}",
            extra={"medicine_id": medicine_id, "user_id": actor.id, "operation": "delete_medicine"},
        )

    def _owned_medicine(self, actor: Actor, medicine_id: int) -> MedicineModel:
        medicine = self.repo.get_medicine(medicine_id)
        if not medicine:
            raise ServiceError(ErrorKind.NOT_FOUND, "Medicine not found")
        if actor.role != UserRole.ADMIN and medicine.seller_id != actor.id:
            raise ServiceError(ErrorKind.FORBIDDEN, "Unauthorized")
        return medicine

    def _check_category(self, category_id: int | None) -> None:
        if category_id is not None and not self.category_repo.get_category(category_id):
            raise ServiceError(ErrorKind.NOT_FOUND, "Category not found")
