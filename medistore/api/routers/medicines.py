from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from medistore.api.deps import require_roles
from medistore.data.database import get_db
from medistore.domain.actor import Actor, UserRole
from medistore.domain.schemas import (
    Envelope,
    MedicineCreate,
    MedicineOut,
    MedicineUpdate,
    MetaEnvelope,
    PageMeta,
    StockUpdate,
)
from medistore.services.medicine_service import MedicineService

router = APIRouter(prefix="/medicines", tags=["medicines"])


def get_service(db: Session):
    return MedicineService(db)


@router.get("", response_model=MetaEnvelope[List[MedicineOut], PageMeta])
def list_medicines(
    page: int | None = Query(None),
    limit: int | None = Query(None),
    seller_id: int | None = Query(None, alias="sellerId"),
    category_id: int | None = Query(None, alias="categoryId"),
    in_stock: bool | None = Query(None, alias="inStock"),
    db: Session = Depends(get_db),
):
    result = get_service(db).list_medicines(
        page=page, limit=limit, seller_id=seller_id, category_id=category_id, in_stock=in_stock
    )
    return {"message": "Medicines retrieved successfully", "data": result["medicines"], "meta": result["meta"]}


@router.get("/{medicine_id}", response_model=Envelope[MedicineOut])
def get_medicine(medicine_id: int, db: Session = Depends(get_db)):
    return {"message": "Medicine retrieved successfully", "data": get_service(db).get_medicine(medicine_id)}


@router.post("", response_model=Envelope[MedicineOut], status_code=201)
def create_medicine(
    payload: MedicineCreate,
    actor: Actor = Depends(require_roles(UserRole.SELLER)),
    db: Session = Depends(get_db),
):
    return {"message": "Medicine created successfully", "data": get_service(db).create_medicine(actor, payload)}


@router.patch("/{medicine_id}", response_model=Envelope[MedicineOut])
def update_medicine(
    medicine_id: int,
    payload: MedicineUpdate,
    actor: Actor = Depends(require_roles(UserRole.SELLER, UserRole.ADMIN)),
    db: Session = Depends(get_db),
):
    medicine = get_service(db).update_medicine(actor, medicine_id, payload)
    return {"message": "Medicine updated successfully", "data": medicine}


@router.patch("/{medicine_id}/stock", response_model=Envelope[MedicineOut])
def update_stock(
    medicine_id: int,
    payload: StockUpdate,
    actor: Actor = Depends(require_roles(UserRole.SELLER, UserRole.ADMIN)),
    db: Session = Depends(get_db),
):
    medicine = get_service(db).update_stock(actor, medicine_id, payload.stock)
    return {"message": "Stock updated successfully", "data": medicine}


@router.delete("/{medicine_id}", response_model=Envelope[None])
def delete_medicine(
    medicine_id: int,
    actor: Actor = Depends(require_roles(UserRole.SELLER, UserRole.ADMIN)),
    db: Session = Depends(get_db),
):
    get_service(db).delete_medicine(actor, medicine_id)
    return {"message": "Medicine deleted successfully", "data": None}
