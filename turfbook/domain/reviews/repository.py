"""Review repository - Database operations for reviews"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import Booking, Review
from ..bookings.repository import BookingRepository


class ReviewRepository:
    """Repository for review database operations"""

    @staticmethod
    def get_review_by_id(db: Session, review_id: int) -> Optional[Review]:
        return db.query(Review).filter(Review.id == review_id).first()

    @staticmethod
    def get_completed_bookings(db: Session, user_id: int, turf_id: int) -> list[Booking]:
        """Completed bookings of a user on a turf, oldest first"""
        return (
            db.query(Booking)
            .filter(
                Booking.user_id == user_id,
                Booking.turf_id == turf_id,
                Booking.status == "completed",
            )
            .order_by(Booking.date, Booking.start_time, Booking.id)
            .all()
        )

    @staticmethod
    def get_reviewed_booking_ids(db: Session, user_id: int, booking_ids: list[int]) -> set[int]:
        if not booking_ids:
            return set()
        rows = (
            db.query(Review.booking_id)
            .filter(Review.user_id == user_id, Review.booking_id.in_(booking_ids))
            .all()
        )
        return {booking_id for (booking_id,) in rows}

    @staticmethod
    def list_turf_reviews(
        db: Session, turf_id: int, page: int = 1, limit: int = 10
    ) -> tuple[list[Review], int]:
        """Newest reviews of a turf first. Returns (reviews, total)"""
        page, limit = BookingRepository.page_bounds(page, limit)
        query = db.query(Review).filter(Review.turf_id == turf_id)
        total = query.count()
        reviews = (
            query.order_by(Review.created_at.desc(), Review.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return reviews, total

    @staticmethod
    def create_review(db: Session, **review_data) -> Review:
        review = Review(**review_data)
        db.add(review)
        db.flush()
        return review

    @staticmethod
    def update_review(db: Session, review: Review, **updates) -> Review:
        for key, value in updates.items():
            if hasattr(review, key):
                setattr(review, key, value)
        db.flush()
        return review

    @staticmethod
    def delete_review(db: Session, review: Review) -> None:
        db.delete(review)
        db.flush()

    @staticmethod
    def get_rating_summary(db: Session, turf_id: int) -> tuple[Optional[float], int]:
        """(average rating, review count) of a turf"""
        average, count = (
            db.query(func.avg(Review.rating), func.count(Review.id))
            .filter(Review.turf_id == turf_id)
            .one()
        )
        return average, count
