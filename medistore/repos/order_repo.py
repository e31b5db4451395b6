# medistore/repos/order_repo.py
from sqlalchemy import exists, func, select, update
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.orm.util import identity_key

from medistore.data.models.medicine import MedicineModel
from medistore.data.models.order import OrderModel
from medistore.data.models.order_item import OrderItemModel
from medistore.domain.order_status import OrderStatus

SORT_COLUMNS = {
    "createdAt": OrderModel.created_at,
    "total": OrderModel.total,
    "status": OrderModel.status,
}


def _with_relations(stmt):
    return stmt.options(
        selectinload(OrderModel.items).selectinload(OrderItemModel.medicine),
        selectinload(OrderModel.user),
    )


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def add_order(self, order: OrderModel) -> OrderModel:
        self.db.add(order)
        self.db.flush()
        return order

    def get_order(self, order_id: int, for_update: bool = False) -> OrderModel | None:
        stmt = select(OrderModel).where(OrderModel.id == order_id)
        if for_update:
            #lock only the order row, items and medicines are loaded by separate selects
            stmt = stmt.with_for_update(of=OrderModel)
        stmt = _with_relations(stmt).execution_options(populate_existing=True)
        return self.db.execute(stmt).scalar_one_or_none()

    def update_status(self, order_id: int, expected: str, new: str) -> int:
        """
        Compare-and-set on status, zero rows means someone else moved the
        order between our read and this write.
        """
        result = self.db.execute(
            update(OrderModel)
            .where(OrderModel.id == order_id, OrderModel.status == expected)
            .values(status=new)
            .execution_options(synchronize_session=False)
        )
        cached = self.db.identity_map.get(identity_key(OrderModel, order_id))
        if cached is not None:
            self.db.expire(cached, ["status", "updated_at"])
        return result.rowcount

    def list_orders(
        self,
        *,
        skip: int,
        limit: int,
        sort_by: str = "createdAt",
        sort_order: str = "desc",
        user_id: int | None = None,
        seller_id: int | None = None,
    ) -> tuple[list[OrderModel], int]:
        conditions = []
        if user_id is not None:
            conditions.append(OrderModel.user_id == user_id)
        if seller_id is not None:
            conditions.append(self._has_seller_item(seller_id))

        total = self.db.execute(
            select(func.count()).select_from(OrderModel).where(*conditions)
        ).scalar_one()

        column = SORT_COLUMNS[sort_by]
        ordering = column.asc() if sort_order == "asc" else column.desc()

        rows = self.db.execute(
            _with_relations(
                select(OrderModel)
                .where(*conditions)
                .order_by(ordering, OrderModel.id.desc())
                .offset(skip)
                .limit(limit)
            )
        ).scalars()
        return list(rows), total

    def has_delivered_order_with(self, user_id: int, medicine_id: int) -> bool:
        stmt = select(
            exists().where(
                OrderItemModel.order_id == OrderModel.id,
                OrderModel.user_id == user_id,
                OrderModel.status == OrderStatus.DELIVERED.value,
                OrderItemModel.medicine_id == medicine_id,
            )
        )
        return bool(self.db.execute(stmt).scalar())

    @staticmethod
    def _has_seller_item(seller_id: int):
        return exists().where(
            OrderItemModel.order_id == OrderModel.id,
            OrderItemModel.medicine_id == MedicineModel.id,
            MedicineModel.seller_id == seller_id,
        )
