# medistore/api/routers/carts.py
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from medistore.api.deps import require_roles
from medistore.data.database import get_db
from medistore.domain.actor import Actor, UserRole
from medistore.domain.schemas import CartItemIn, CartItemOut, CartItemUpdate, CartOut, Envelope
from medistore.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["cart"])

customer_only = require_roles(UserRole.CUSTOMER)


def get_service(db: Session):
    return CartService(db)


@router.get("", response_model=Envelope[CartOut])
def get_cart(actor: Actor = Depends(customer_only), db: Session = Depends(get_db)):
    return {"message": "Cart retrieved successfully", "data": get_service(db).get_cart(actor.id)}


@router.post("/items", response_model=Envelope[CartItemOut], status_code=201)
def add_item(
    payload: CartItemIn,
    actor: Actor = Depends(customer_only),
    db: Session = Depends(get_db),
):
    item = get_service(db).add_item(actor.id, payload.medicine_id, payload.quantity)
    return {"message": "Item added to cart", "data": item}


@router.patch("/items/{item_id}", response_model=Envelope[Optional[CartItemOut]])
def update_item(
    item_id: int,
    payload: CartItemUpdate,
    actor: Actor = Depends(customer_only),
    db: Session = Depends(get_db),
):
    result = get_service(db).update_item(actor.id, item_id, payload.quantity)
    if result.get("deleted"):
        return {"message": "Item removed from cart", "data": None}
    return {"message": "Cart item updated", "data": result}


@router.delete("/items/{item_id}", response_model=Envelope[None])
def remove_item(
    item_id: int,
    actor: Actor = Depends(customer_only),
    db: Session = Depends(get_db),
):
    get_service(db).remove_item(actor.id, item_id)
    return {"message": "Item removed from cart", "data": None}
