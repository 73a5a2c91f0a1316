"""Review service - Business logic for turf reviews"""

import logging
import math
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy.orm import Session

from ...errors import (
    DuplicateReviewError,
    ForbiddenError,
    NotFoundError,
    ReviewNotAllowedError,
)
from ...models import Review, Turf
from ...shared.actors import Actor
from ..bookings.repository import BookingRepository
from ..turfs.repository import TurfRepository
from .repository import ReviewRepository
from .schemas import ReviewCreate, ReviewUpdate

logger = logging.getLogger(__name__)


class ReviewService:
    """
    Service layer for review business logic.

    The repository only flushes; each operation commits the review change
    and the recomputed turf rating together.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = ReviewRepository()
        self.turf_repo = TurfRepository()

    def get_review(self, review_id: int) -> Review:
        review = self.repo.get_review_by_id(self.db, review_id)
        if not review:
            raise NotFoundError("Review not found")
        return review

    def list_turf_reviews(self, turf_id: int, page: int = 1, limit: int = 10) -> dict:
        if not self.turf_repo.get_turf_by_id(self.db, turf_id):
            raise NotFoundError("Turf not found")

        reviews, total = self.repo.list_turf_reviews(self.db, turf_id, page, limit)
        page, limit = BookingRepository.page_bounds(page, limit)
        return {
            "reviews": reviews,
            "pagination": {
                "current": page,
                "pages": math.ceil(total / limit),
                "total": total,
                "limit": limit,
            },
        }

    def add_review(self, turf_id: int, data: ReviewCreate, actor: Actor) -> Review:
        """Review a turf the actor has played on"""
        turf = self.turf_repo.get_turf_by_id(self.db, turf_id)
        if not turf:
            raise NotFoundError("Turf not found")

        completed = self.repo.get_completed_bookings(self.db, actor.user_id, turf.id)
        if data.bookingId is not None:
            completed = [b for b in completed if b.id == data.bookingId]
        if not completed:
            logger.warning(f"⚠️ User {actor.user_id} has no completed booking on turf {turf_id}")
            raise ReviewNotAllowedError()

        reviewed = self.repo.get_reviewed_booking_ids(
            self.db, actor.user_id, [b.id for b in completed]
        )
        booking = next((b for b in completed if b.id not in reviewed), None)
        if booking is None:
            raise DuplicateReviewError()

        review_data = {
            "user_id": actor.user_id,
            "turf_id": turf.id,
            "booking_id": booking.id,
            "rating": data.rating,
            "comment": data.comment,
        }
        if data.aspects:
            review_data.update(data.aspects.model_dump())

        review = self.repo.create_review(self.db, **review_data)
        self._refresh_rating(turf)
        self.db.commit()
        self.db.refresh(review)

        logger.info(f"⭐ Review {review.id} ({data.rating}/5) added to turf {turf_id} by user {actor.user_id}")
        return review

    def update_review(self, review_id: int, data: ReviewUpdate, actor: Actor) -> Review:
        """Edit a review; only its author may"""
        review = self.get_review(review_id)
        if review.user_id != actor.user_id:
            raise ForbiddenError("Not authorized to update this review")

        updates = {}
        if data.rating is not None:
            updates["rating"] = data.rating
        if data.comment is not None:
            updates["comment"] = data.comment
        if data.aspects is not None:
            updates.update(data.aspects.model_dump(exclude_unset=True))

        review = self.repo.update_review(self.db, review, **updates)
        self._refresh_rating(review.turf)
        self.db.commit()
        self.db.refresh(review)
        return review

    def delete_review(self, review_id: int, actor: Actor) -> dict:
        """Delete a review; its author and admins may"""
        review = self.get_review(review_id)
        if review.user_id != actor.user_id and not actor.is_admin:
            raise ForbiddenError("Not authorized to delete this review")

        turf = review.turf
        self.repo.delete_review(self.db, review)
        self._refresh_rating(turf)
        self.db.commit()

        logger.info(f"Review {review_id} deleted from turf {turf.id}")
        return {"message": "Review deleted successfully"}

    def _refresh_rating(self, turf: Turf) -> None:
        average, count = self.repo.get_rating_summary(self.db, turf.id)
        turf.rating_count = count
        turf.rating_average = (
            Decimal(str(average)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
            if count
            else Decimal("0")
        )
