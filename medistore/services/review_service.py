from typing import Any, Dict

from sqlalchemy.orm import Session

from medistore.data.database import transaction
from medistore.data.models.review import ReviewModel
from medistore.domain.actor import Actor, UserRole
from medistore.domain.errors import ErrorKind, ServiceError
from medistore.domain.schemas import ReviewOut
from medistore.repos.medicine_repo import MedicineRepo
from medistore.repos.order_repo import OrderRepo
from medistore.repos.review_repo import ReviewRepo
from medistore.utils.logging import get_logger
from medistore.utils.pagination import paginate

logger = get_logger(__name__)

REVIEW_SORT_FIELDS = ("createdAt", "rating")


def validate_rating(rating) -> int:
    if not isinstance(rating, int) or isinstance(rating, bool) or not 1 <= rating <= 5:
        raise ServiceError(ErrorKind.VALIDATION, "rating must be an integer between 1 and 5")
    return rating


class ReviewService:
    """
    One review per (user, medicine), only after a DELIVERED order with that medicine.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = ReviewRepo(db)
        self.medicine_repo = MedicineRepo(db)
        self.order_repo = OrderRepo(db)

    def create_review(self, actor: Actor, medicine_id: int, rating, comment: str | None = None) -> Dict[str, Any]:
        rating = validate_rating(rating)

        with transaction(self.db):
            if not self.medicine_repo.get_medicine(medicine_id):
                raise ServiceError(ErrorKind.NOT_FOUND, "Medicine not found")

            if not self.order_repo.has_delivered_order_with(actor.id, medicine_id):
                raise ServiceError(
                    ErrorKind.FORBIDDEN,
                    "You can only review medicines you have received (DELIVERED)",
                )

            if self.repo.get_by_user_and_medicine(actor.id, medicine_id):
                raise ServiceError(ErrorKind.CONFLICT, "Review already exists. Use PUT to update.")

            review = self.repo.add_review(
                ReviewModel(user_id=actor.id, medicine_id=medicine_id, rating=rating, comment=comment)
            )
            result = self._with_meta(review)

        logger.info(
            f"Review {review.id} by user {actor.id} for medicine {medicine_id}",
            extra={"user_id": actor.id, "medicine_id": medicine_id},
        )
        return result

    def update_review(self, actor: Actor, review_id: int, rating=None, comment: str | None = None) -> Dict[str, Any]:
        if rating is not None:
            rating = validate_rating(rating)

        with transaction(self.db):
            review = self._owned_review(actor, review_id)
            if rating is not None:
                review.rating = rating
            if comment is not None:
                review.comment = comment
            self.db.flush()
            return self._with_meta(review)

    def delete_review(self, actor: Actor, review_id: int) -> None:
        with transaction(self.db):
            review = self._owned_review(actor, review_id)
            self.repo.delete_review(review)

    def list_by_medicine(
        self,
        medicine_id: int,
        page: int | None = None,
        limit: int | None = None,
        sort_by: str | None = None,
        sort_order: str | None = None,
    ) -> Dict[str, Any]:
        p = paginate(page, limit, sort_by, sort_order, allowed_sort=REVIEW_SORT_FIELDS)
        reviews = self.repo.list_by_medicine(
            medicine_id, skip=p.skip, limit=p.limit, sort_by=p.sort_by, sort_order=p.sort_order
        )
        average, count = self.repo.rating_summary(medicine_id)
        return {
            "reviews": [ReviewOut.model_validate(r) for r in reviews],
            "meta": {**p.meta(count), "average_rating": average, "review_count": count},
        }

    def get_review(self, review_id: int) -> ReviewOut:
        review = self.repo.get_review(review_id)
        if not review:
            raise ServiceError(ErrorKind.NOT_FOUND, "Review not found")
        return ReviewOut.model_validate(review)

    def list_by_user(self, user_id: int, page: int | None = None, limit: int | None = None) -> Dict[str, Any]:
        p = paginate(page, limit)
        reviews, total = self.repo.list_by_user(user_id, skip=p.skip, limit=p.limit)
        return {"reviews": [ReviewOut.model_validate(r) for r in reviews], "meta": p.meta(total)}

    def _owned_review(self, actor: Actor, review_id: int) -> ReviewModel:
        review = self.repo.get_review(review_id)
        if not review:
            raise ServiceError(ErrorKind.NOT_FOUND, "Review not found")
        if actor.role != UserRole.ADMIN and review.user_id != actor.id:
            raise ServiceError(ErrorKind.FORBIDDEN, "Unauthorized")
        return review

    def _with_meta(self, review: ReviewModel) -> Dict[str, Any]:
        average, count = self.repo.rating_summary(review.medicine_id)
        return {
            "review": ReviewOut.model_validate(review),
            "meta": {"average_rating": average, "review_count": count},
        }
