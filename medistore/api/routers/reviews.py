from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from medistore.api.deps import get_current_actor
from medistore.data.database import get_db
from medistore.domain.actor import Actor
from medistore.domain.schemas import (
    Envelope,
    MetaEnvelope,
    PageMeta,
    RatingMeta,
    ReviewCreate,
    ReviewOut,
    ReviewPageMeta,
    ReviewUpdate,
)
from medistore.services.review_service import ReviewService

router = APIRouter(prefix="/reviews", tags=["reviews"])


@router.post("", response_model=MetaEnvelope[ReviewOut, RatingMeta], status_code=201)
def create_review(
    payload: ReviewCreate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    result = ReviewService(db).create_review(actor, payload.medicine_id, payload.rating, payload.comment)
    return {"message": "Review created successfully", "data": result["review"], "meta": result["meta"]}


@router.get("/medicine/{medicine_id}", response_model=MetaEnvelope[List[ReviewOut], ReviewPageMeta])
def list_reviews(
    medicine_id: int,
    page: int | None = Query(None),
    limit: int | None = Query(None),
    sort_by: str | None = Query(None, alias="sortBy"),
    sort_order: str | None = Query(None, alias="sortOrder"),
    db: Session = Depends(get_db),
):
    result = ReviewService(db).list_by_medicine(
        medicine_id, page=page, limit=limit, sort_by=sort_by, sort_order=sort_order
    )
    return {"message": "Reviews retrieved successfully", "data": result["reviews"], "meta": result["meta"]}


@router.get("/users/{user_id}", response_model=MetaEnvelope[List[ReviewOut], PageMeta])
def list_user_reviews(
    user_id: int,
    page: int | None = Query(None),
    limit: int | None = Query(None),
    db: Session = Depends(get_db),
):
    result = ReviewService(db).list_by_user(user_id, page=page, limit=limit)
    return {"message": "Reviews retrieved successfully", "data": result["reviews"], "meta": result["meta"]}


@router.get("/{review_id}", response_model=Envelope[ReviewOut])
def get_review(review_id: int, db: Session = Depends(get_db)):
    return {"message": "Review retrieved successfully", "data": ReviewService(db).get_review(review_id)}


@router.patch("/{review_id}", response_model=MetaEnvelope[ReviewOut, RatingMeta])
def update_review(
    review_id: int,
    payload: ReviewUpdate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    result = ReviewService(db).update_review(actor, review_id, payload.rating, payload.comment)
    return {"message": "Review updated successfully", "data": result["review"], "meta": result["meta"]}


@router.delete("/{review_id}", response_model=Envelope[None])
def delete_review(
    review_id: int,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    ReviewService(db).delete_review(actor, review_id)
    return {"message": "Review deleted successfully", "data": None}
