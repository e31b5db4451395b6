# medistore/repos/medicine_repo.py
from sqlalchemy import func, select, update
from sqlalchemy.orm import Session
from sqlalchemy.orm.util import identity_key

from medistore.data.models.medicine import MedicineModel


class MedicineRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_medicine(self, medicine_id: int) -> MedicineModel | None:
        return self.db.get(MedicineModel, medicine_id)

    def lock_medicines(self, medicine_ids) -> dict[int, MedicineModel]:
        """
        SELECT ... FOR UPDATE on the given rows, always in id order so two
        checkouts touching the same medicines lock them in the same sequence.
        populate_existing refreshes rows already sitting in the identity map.
        """
        ids = sorted(set(medicine_ids))
        if not ids:
            return {}
        rows = self.db.execute(
            select(MedicineModel)
            .where(MedicineModel.id.in_(ids))
            .order_by(MedicineModel.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalars()
        return {m.id: m for m in rows}

    def list_medicines(
        self,
        *,
        skip: int,
        limit: int,
        seller_id: int | None = None,
        category_id: int | None = None,
        in_stock: bool | None = None,
        only_active: bool = True,
    ) -> tuple[list[MedicineModel], int]:
        conditions = []
        if only_active:
            conditions.append(MedicineModel.is_active.is_(True))
        if seller_id is not None:
            conditions.append(MedicineModel.seller_id == seller_id)
        if category_id is not None:
            conditions.append(MedicineModel.category_id == category_id)
        if in_stock is True:
            conditions.append(MedicineModel.stock > 0)
        elif in_stock is False:
            conditions.append(MedicineModel.stock <= 0)

        total = self.db.execute(
            select(func.count()).select_from(MedicineModel).where(*conditions)
        ).scalar_one()

        rows = self.db.execute(
            select(MedicineModel)
            .where(*conditions)
            .order_by(MedicineModel.created_at.desc(), MedicineModel.id.desc())
            .offset(skip)
            .limit(limit)
        ).scalars()
        return list(rows), total

    def add_medicine(self, medicine: MedicineModel) -> MedicineModel:
        self.db.add(medicine)
        self.db.flush()
        return medicine

    #stock counters: single conditional UPDATE statements, the database does check + write atomically
    #UPDATE medicines SET stock = stock - 3 WHERE id = 1 AND stock >= 3

    def decrement_stock(self, medicine_id: int, quantity: int) -> int:
        result = self.db.execute(
            update(MedicineModel)
            .where(MedicineModel.id == medicine_id, MedicineModel.stock >= quantity)
            .values(stock=MedicineModel.stock - quantity)
            .execution_options(synchronize_session=False)
        )
        self._expire_stock(medicine_id)
        return result.rowcount

    def increment_stock(self, medicine_id: int, quantity: int) -> int:
        result = self.db.execute(
            update(MedicineModel)
            .where(MedicineModel.id == medicine_id)
            .values(stock=MedicineModel.stock + quantity)
            .execution_options(synchronize_session=False)
        )
        self._expire_stock(medicine_id)
        return result.rowcount

    def set_stock(self, medicine_id: int, stock: int) -> int:
        result = self.db.execute(
            update(MedicineModel)
            .where(MedicineModel.id == medicine_id)
            .values(stock=stock)
            .execution_options(synchronize_session=False)
        )
        self._expire_stock(medicine_id)
        return result.rowcount

    def current_stock(self, medicine_id: int) -> int | None:
        return self.db.execute(
            select(MedicineModel.stock).where(MedicineModel.id == medicine_id)
        ).scalar_one_or_none()

    def _expire_stock(self, medicine_id: int) -> None:
        #bulk UPDATE bypasses the identity map, drop the cached counter so the next read hits the db
        cached = self.db.identity_map.get(identity_key(MedicineModel, medicine_id))
        if cached is not None:
            self.db.expire(cached, ["stock"])
