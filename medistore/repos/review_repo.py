from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from medistore.data.models.review import ReviewModel

SORT_COLUMNS = {
    "createdAt": ReviewModel.created_at,
    "rating": ReviewModel.rating,
}


class ReviewRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_review(self, review_id: int) -> ReviewModel | None:
        return self.db.get(ReviewModel, review_id)

    def get_by_user_and_medicine(self, user_id: int, medicine_id: int) -> ReviewModel | None:
        return self.db.execute(
            select(ReviewModel).where(
                ReviewModel.user_id == user_id,
                ReviewModel.medicine_id == medicine_id,
            )
        ).scalar_one_or_none()

    def add_review(self, review: ReviewModel) -> ReviewModel:
        self.db.add(review)
        self.db.flush()
        return review

    def delete_review(self, review: ReviewModel) -> None:
        self.db.delete(review)
        self.db.flush()

    def list_by_medicine(
        self, medicine_id: int, *, skip: int, limit: int, sort_by: str, sort_order: str
    ) -> list[ReviewModel]:
        column = SORT_COLUMNS[sort_by]
        ordering = column.asc() if sort_order == "asc" else column.desc()
        return list(
            self.db.execute(
                select(ReviewModel)
                .where(ReviewModel.medicine_id == medicine_id)
                .options(selectinload(ReviewModel.user))
                .order_by(ordering, ReviewModel.id.desc())
                .offset(skip)
                .limit(limit)
            ).scalars()
        )

    def list_by_user(self, user_id: int, *, skip: int, limit: int) -> tuple[list[ReviewModel], int]:
        total = self.db.execute(
            select(func.count()).select_from(ReviewModel).where(ReviewModel.user_id == user_id)
        ).scalar_one()
        rows = self.db.execute(
            select(ReviewModel)
            .where(ReviewModel.user_id == user_id)
            .order_by(ReviewModel.created_at.desc(), ReviewModel.id.desc())
            .offset(skip)
            .limit(limit)
        ).scalars()
        return list(rows), total

    def rating_summary(self, medicine_id: int) -> tuple[float | None, int]:
        avg, count = self.db.execute(
            select(func.avg(ReviewModel.rating), func.count(ReviewModel.id)).where(
                ReviewModel.medicine_id == medicine_id
            )
        ).one()
        return (float(avg) if avg is not None else None), count
