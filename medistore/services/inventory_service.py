# medistore/services/inventory_service.py
from sqlalchemy.orm import Session

from medistore.domain.errors import ErrorKind, ServiceError
from medistore.repos.medicine_repo import MedicineRepo
from medistore.utils.logging import get_logger

logger = get_logger(__name__)


class InventoryService:
    """
    Inventory ledger, the only code that writes medicines.stock.

    - reserve: check stock >= qty and decrement in one conditional UPDATE
    - restore: increment (cancellation)
    - set_level: absolute value set by the seller/admin

    Works on the caller's session and never commits: the order mutation
    that triggered it owns the transaction, so both land or neither does.
    """

    def __init__(self, db: Session):
        self.repo = MedicineRepo(db)

    def reserve(self, medicine_id: int, quantity: int) -> None:
        self._check_quantity(quantity)

        rowcount = self.repo.decrement_stock(medicine_id, quantity)
        if rowcount == 0:
            #nothing matched: row gone or stock < quantity (possibly taken by a concurrent buyer)
            if self.repo.current_stock(medicine_id) is None:
                raise ServiceError(ErrorKind.NOT_FOUND, f"Medicine {medicine_id} not found")
            raise ServiceError(
                ErrorKind.INSUFFICIENT_STOCK,
                f"Insufficient stock for medicine {medicine_id}",
            )

        logger.info(
            f"Reserved {quantity} of medicine {medicine_id}",
            extra={"medicine_id": medicine_id, "operation": "reserve"},
        )

    def restore(self, medicine_id: int, quantity: int) -> None:
        self._check_quantity(quantity)

        rowcount = self.repo.increment_stock(medicine_id, quantity)
        if rowcount == 0:
            raise ServiceError(ErrorKind.NOT_FOUND, f"Medicine {medicine_id} not found")

        logger.info(
            f"Restocked {quantity} of medicine {medicine_id}",
            extra={"medicine_id": medicine_id, "operation": "restore"},
        )

    def set_level(self, medicine_id: int, stock: int) -> None:
        if stock < 0:
            raise ServiceError(ErrorKind.VALIDATION, "stock must be a non-negative integer")

        if self.repo.set_stock(medicine_id, stock) == 0:
            raise ServiceError(ErrorKind.NOT_FOUND, f"Medicine {medicine_id} not found")

    def available(self, medicine_id: int) -> int:
        stock = self.repo.current_stock(medicine_id)
        if stock is None:
            raise ServiceError(ErrorKind.NOT_FOUND, f"Medicine {medicine_id} not found")
        return stock

    @staticmethod
    def _check_quantity(quantity: int) -> None:
        if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity <= 0:
            raise ServiceError(ErrorKind.VALIDATION, "quantity must be a positive integer")
