"""Booking repository - Database operations for bookings"""

import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import Booking
from ..availability.schemas import ACTIVE_STATUSES


class BookingRepository:
    """Repository for booking database operations"""

    @staticmethod
    def get_booking_by_id(db: Session, booking_id: int) -> Optional[Booking]:
        """Get a specific booking by ID"""
        return db.query(Booking).filter(Booking.id == booking_id).first()

    @staticmethod
    def get_active_bookings(
        db: Session,
        turf_id: int,
        on_date: datetime.date,
        exclude_booking_id: Optional[int] = None,
    ) -> list[Booking]:
        """Pending and confirmed bookings of a turf on one day, by start time"""
        query = db.query(Booking).filter(
            Booking.turf_id == turf_id,
            Booking.date == on_date,
            Booking.status.in_(sorted(ACTIVE_STATUSES)),
        )

        if exclude_booking_id:
            query = query.filter(Booking.id != exclude_booking_id)

        return query.order_by(Booking.start_time).all()

    @staticmethod
    def create_booking(db: Session, **booking_data) -> Booking:
        """Create a new booking and commit the surrounding transaction"""
        booking = Booking(**booking_data)
        db.add(booking)
        db.commit()
        db.refresh(booking)
        return booking

    @staticmethod
    def update_booking(db: Session, booking: Booking, **updates) -> Booking:
        """Update a booking with provided fields"""
        for key, value in updates.items():
            if hasattr(booking, key):
                setattr(booking, key, value)

        db.commit()
        db.refresh(booking)
        return booking

    @staticmethod
    def page_bounds(page: int, limit: int) -> tuple[int, int]:
        """Clamp page and limit to at least 1"""
        return max(page, 1), max(limit, 1)

    @staticmethod
    def list_bookings(
        db: Session,
        turf_id: Optional[int] = None,
        user_id: Optional[int] = None,
        status: Optional[str] = None,
        on_date: Optional[datetime.date] = None,
        page: int = 1,
        limit: int = 10,
        newest_created_first: bool = False,
    ) -> tuple[list[Booking], int]:
        """
        Filtered page of bookings.
        Ordered by play date (latest first), or by creation time when
        ``newest_created_first`` is set.
        Returns (bookings, total_matching)
        """
        page, limit = BookingRepository.page_bounds(page, limit)
        query = db.query(Booking)

        if turf_id is not None:
            query = query.filter(Booking.turf_id == turf_id)
        if user_id is not None:
            query = query.filter(Booking.user_id == user_id)
        if status:
            query = query.filter(Booking.status == status)
        if on_date:
            query = query.filter(Booking.date == on_date)

        if newest_created_first:
            ordering = (Booking.created_at.desc(), Booking.id.desc())
        else:
            ordering = (Booking.date.desc(), Booking.start_time, Booking.id.desc())

        total = query.count()
        bookings = query.order_by(*ordering).offset((page - 1) * limit).limit(limit).all()
        return bookings, total

    @staticmethod
    def get_status_counts(db: Session) -> dict[str, int]:
        """Number of bookings per status"""
        rows = db.query(Booking.status, func.count(Booking.id)).group_by(Booking.status).all()
        return {status: count for status, count in rows}

    @staticmethod
    def get_completed_revenue(db: Session) -> Decimal:
        total = (
            db.query(func.sum(Booking.total_amount)).filter(Booking.status == "completed").scalar()
        )
        return Decimal(str(total)) if total is not None else Decimal("0")
