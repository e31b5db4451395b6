from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from medistore.api.deps import require_roles
from medistore.data.database import get_db
from medistore.domain.actor import UserRole
from medistore.domain.schemas import CategoryCreate, CategoryOut, CategoryUpdate, Envelope
from medistore.services.category_service import CategoryService

router = APIRouter(prefix="/categories", tags=["categories"])

admin_only = [Depends(require_roles(UserRole.ADMIN))]


@router.get("", response_model=Envelope[List[CategoryOut]])
def list_categories(db: Session = Depends(get_db)):
    return {"message": "Categories retrieved successfully", "data": CategoryService(db).list_categories()}


@router.get("/{category_id}", response_model=Envelope[CategoryOut])
def get_category(category_id: int, db: Session = Depends(get_db)):
    return {"message": "Category retrieved successfully", "data": CategoryService(db).get_category(category_id)}


@router.post("", response_model=Envelope[CategoryOut], status_code=201, dependencies=admin_only)
def create_category(payload: CategoryCreate, db: Session = Depends(get_db)):
    return {"message": "Category created successfully", "data": CategoryService(db).create_category(payload)}


@router.put("/{category_id}", response_model=Envelope[CategoryOut], dependencies=admin_only)
def update_category(category_id: int, payload: CategoryUpdate, db: Session = Depends(get_db)):
    category = CategoryService(db).update_category(category_id, payload)
    return {"message": "Category updated successfully", "data": category}


@router.delete("/{category_id}", response_model=Envelope[None], dependencies=admin_only)
def delete_category(category_id: int, db: Session = Depends(get_db)):
    CategoryService(db).delete_category(category_id)
    return {"message": "Category deleted successfully", "data": None}
