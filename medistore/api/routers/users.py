from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from medistore.api.deps import get_current_actor, require_roles
from medistore.data.database import get_db
from medistore.domain.actor import Actor, UserRole
from medistore.domain.schemas import (
    Envelope,
    MetaEnvelope,
    PageMeta,
    ProfileUpdate,
    UserCreate,
    UserRead,
    UserStatusUpdate,
)
from medistore.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=Envelope[UserRead], status_code=201)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    service = UserService(db)
    return {"message": "User registered successfully", "data": service.create_user(payload)}


@router.get("/me", response_model=Envelope[UserRead])
def get_me(actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    service = UserService(db)
    return {"message": "User retrieved successfully", "data": service.get_user(actor.id)}


@router.put("/me", response_model=Envelope[UserRead])
def update_me(
    payload: ProfileUpdate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    service = UserService(db)
    return {"message": "Profile updated successfully", "data": service.update_profile(actor.id, payload)}


#admin
@router.get(
    "",
    response_model=MetaEnvelope[List[UserRead], PageMeta],
    dependencies=[Depends(require_roles(UserRole.ADMIN))],
)
def list_users(
    page: int | None = Query(None),
    limit: int | None = Query(None),
    role: str | None = Query(None),
    db: Session = Depends(get_db),
):
    result = UserService(db).list_users(page=page, limit=limit, role=role)
    return {"message": "Users retrieved successfully", "data": result["users"], "meta": result["meta"]}


@router.patch("/{user_id}/status", response_model=Envelope[UserRead])
def update_user_status(
    user_id: int,
    payload: UserStatusUpdate,
    actor: Actor = Depends(require_roles(UserRole.ADMIN)),
    db: Session = Depends(get_db),
):
    user = UserService(db).update_status(actor, user_id, payload.status)
    return {"message": "User status updated successfully", "data": user}
