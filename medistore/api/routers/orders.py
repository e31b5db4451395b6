# medistore/api/routers/orders.py
from typing import List

from fastapi import APIRouter, Depends, Query

from medistore.api.deps import get_current_actor, get_order_service, require_roles
from medistore.domain.actor import Actor, UserRole
from medistore.domain.schemas import (
    Envelope,
    MetaEnvelope,
    OrderCreateIn,
    OrderOut,
    PageMeta,
    StatusUpdateIn,
    TrackOut,
)
from medistore.services.order_service import OrderService

router = APIRouter(prefix="/order", tags=["orders"])


@router.post("", response_model=Envelope[OrderOut], status_code=201)
def create_order(
    payload: OrderCreateIn,
    actor: Actor = Depends(require_roles(UserRole.CUSTOMER)),
    svc: OrderService = Depends(get_order_service),
):
    """
    Checkout: turns the caller's cart into an order (cash on delivery).
    """
    order = svc.create_order(
        actor.id,
        shipping_phone=payload.shipping_phone,
        shipping_address=payload.shipping_address,
        shipping_name=payload.shipping_name,
    )
    return {"message": "Order created successfully", "data": order}


@router.get("", response_model=MetaEnvelope[List[OrderOut], PageMeta])
def list_orders(
    page: int | None = Query(None),
    limit: int | None = Query(None),
    sort_by: str | None = Query(None, alias="sortBy"),
    sort_order: str | None = Query(None, alias="sortOrder"),
    actor: Actor = Depends(get_current_actor),
    svc: OrderService = Depends(get_order_service),
):
    result = svc.list_orders(actor, page=page, limit=limit, sort_by=sort_by, sort_order=sort_order)
    return {"message": "Orders retrieved successfully", "data": result["orders"], "meta": result["meta"]}


@router.get("/{order_id}", response_model=Envelope[OrderOut])
def get_order(
    order_id: int,
    actor: Actor = Depends(get_current_actor),
    svc: OrderService = Depends(get_order_service),
):
    return {"message": "Order retrieved successfully", "data": svc.get_order(actor, order_id)}


@router.get("/{order_id}/track", response_model=Envelope[TrackOut])
def track_order(
    order_id: int,
    actor: Actor = Depends(get_current_actor),
    svc: OrderService = Depends(get_order_service),
):
    return {"message": "Order status retrieved successfully", "data": svc.track_order(actor, order_id)}


@router.patch("/{order_id}/cancel", response_model=Envelope[OrderOut])
def cancel_order(
    order_id: int,
    actor: Actor = Depends(get_current_actor),
    svc: OrderService = Depends(get_order_service),
):
    return {"message": "Order cancelled successfully", "data": svc.cancel_by_customer(actor, order_id)}


@router.patch("/seller/{order_id}/status", response_model=Envelope[OrderOut])
def update_status(
    order_id: int,
    payload: StatusUpdateIn,
    actor: Actor = Depends(require_roles(UserRole.SELLER, UserRole.ADMIN)),
    svc: OrderService = Depends(get_order_service),
):
    """
    Seller/admin moves the order along PLACED -> PROCESSING -> SHIPPED -> DELIVERED, or cancels it.
    """
    order = svc.update_status(actor, order_id, payload.status)
    return {"message": "Order status updated successfully", "data": order}
