"""Booking service - Business logic for booking operations"""

import logging
import math
from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from ... import config
from ...errors import (
    BookingContentionError,
    BookingError,
    ForbiddenError,
    InvalidStatusTransitionError,
    NotFoundError,
    PaymentError,
    TurfInactiveError,
)
from ...models import Booking
from ...shared.actors import Actor
from ..availability.engine import booking_duration_hours, validate_booking_request
from ..availability.mappers import (
    build_pricing_rule,
    build_weekly_schedule,
    closure_dates,
    to_reservation,
)
from ..turfs.repository import TurfRepository
from .repository import BookingRepository
from .schemas import BookingCreate, CancelRequest, PaymentRequest

logger = logging.getLogger(__name__)

# Statuses a booking may move out of, keyed by target status
ALLOWED_TRANSITIONS = {
    "confirmed": {"pending"},
    "completed": {"pending", "confirmed"},
    "no_show": {"pending", "confirmed"},
    "cancelled": {"pending", "confirmed"},
}

CANCEL_REJECTIONS = {
    "cancelled": "Booking is already cancelled",
    "completed": "Cannot cancel a completed booking",
    "no_show": "Cannot cancel a no-show booking",
}


class BookingService:
    """Service layer for booking business logic"""

    def __init__(self, db: Session, max_retries: Optional[int] = None):
        self.db = db
        self.repo = BookingRepository()
        self.turf_repo = TurfRepository()
        self.max_retries = config.BOOKING_MAX_RETRIES if max_retries is None else max_retries
        if self.max_retries < 1:
            raise ValueError("max_retries must be at least 1")

    def get_booking(self, booking_id: int) -> Booking:
        """Get a specific booking"""
        booking = self.repo.get_booking_by_id(self.db, booking_id)
        if not booking:
            raise NotFoundError("Booking not found")
        return booking

    def create_booking(
        self, data: BookingCreate, user_id: int, today: Optional[date] = None
    ) -> Booking:
        """
        Validate and store a booking.

        The conflict check and the insert share one transaction that also
        advances the turf's booking version. If another booking for the same
        turf commits between the check and the insert, the version claim
        fails, the transaction is rolled back and the whole check runs again.
        """
        today = today or date.today()
        interval = data.timeSlot

        for attempt in range(1, self.max_retries + 1):
            turf = self.turf_repo.get_turf_by_id(self.db, data.turfId)
            if not turf:
                raise NotFoundError("Turf not found")
            if not turf.is_active:
                raise TurfInactiveError()

            version = turf.booking_version
            existing = [
                to_reservation(b)
                for b in self.repo.get_active_bookings(self.db, turf.id, data.date)
            ]
            holidays, maintenance_dates = closure_dates(turf)

            try:
                price = validate_booking_request(
                    schedule=build_weekly_schedule(turf),
                    pricing=build_pricing_rule(turf),
                    on_date=data.date,
                    interval=interval,
                    players=data.players.count,
                    max_players=turf.max_players,
                    existing=existing,
                    today=today,
                    holidays=holidays,
                    maintenance_dates=maintenance_dates,
                    turf_id=turf.id,
                )
            except BookingError as e:
                logger.warning(
                    f"⚠️ Booking rejected for user {user_id} on turf {turf.id} "
                    f"{data.date} {interval.start}-{interval.end}: {e.message}"
                )
                raise

            if not self.turf_repo.claim_booking_version(self.db, turf.id, version):
                self.db.rollback()
                logger.warning(
                    f"🔁 Turf {data.turfId} received a concurrent booking, "
                    f"re-checking (attempt {attempt}/{self.max_retries})"
                )
                continue

            booking = self.repo.create_booking(
                self.db,
                user_id=user_id,
                turf_id=turf.id,
                date=data.date,
                start_time=interval.start,
                end_time=interval.end,
                duration_hours=booking_duration_hours(interval),
                players_count=data.players.count,
                players_details=[p.model_dump() for p in data.players.details],
                base_amount=price.base_amount,
                taxes=price.taxes,
                total_amount=price.total_amount,
                payment_method=data.payment.method,
                payment_status="pending",
                status="pending",
                special_requests=data.specialRequests,
            )
            logger.info(
                f"✅ Booking {booking.id} created for user {user_id} on turf {turf.id} "
                f"{data.date} {interval.start}-{interval.end} (total {price.total_amount})"
            )
            return booking

        logger.error(f"❌ Gave up booking turf {data.turfId} after {self.max_retries} attempts")
        raise BookingContentionError()

    def _require_turf_manager(self, booking: Booking, actor: Actor) -> None:
        if not actor.can_manage_turf(booking.turf):
            logger.warning(f"⚠️ User {actor.user_id} may not manage booking {booking.id}")
            raise ForbiddenError()

    def _transition(self, booking: Booking, target: str, **updates) -> Booking:
        if booking.status not in ALLOWED_TRANSITIONS[target]:
            logger.warning(
                f"⚠️ Booking {booking.id} cannot move from {booking.status} to {target}"
            )
            raise InvalidStatusTransitionError(
                f"Cannot mark a {booking.status} booking as {target}"
            )

        booking = self.repo.update_booking(self.db, booking, status=target, **updates)
        logger.info(f"Booking {booking.id} is now {target}")
        return booking

    def confirm_booking(self, booking_id: int, actor: Actor) -> Booking:
        """Turf owner or admin confirms a pending booking"""
        booking = self.get_booking(booking_id)
        self._require_turf_manager(booking, actor)
        return self._transition(booking, "confirmed")

    def complete_booking(self, booking_id: int, actor: Actor) -> Booking:
        booking = self.get_booking(booking_id)
        self._require_turf_manager(booking, actor)
        return self._transition(booking, "completed")

    def mark_no_show(self, booking_id: int, actor: Actor) -> Booking:
        booking = self.get_booking(booking_id)
        self._require_turf_manager(booking, actor)
        return self._transition(booking, "no_show")

    def cancel_booking(
        self, booking_id: int, actor: Actor, data: Optional[CancelRequest] = None
    ) -> Booking:
        """
        Cancel a booking, marking a completed payment for refund.

        The player who booked, the turf's owner and admins may cancel.
        ``cancelled_by`` records which of them did.
        """
        data = data or CancelRequest()
        booking = self.get_booking(booking_id)

        is_player = booking.user_id == actor.user_id
        if not is_player and not actor.can_manage_turf(booking.turf):
            logger.warning(f"⚠️ User {actor.user_id} may not cancel booking {booking_id}")
            raise ForbiddenError("Not authorized to cancel this booking")

        if booking.status in CANCEL_REJECTIONS:
            raise InvalidStatusTransitionError(CANCEL_REJECTIONS[booking.status])

        if actor.is_admin:
            cancelled_by = "admin"
        elif is_player:
            cancelled_by = "user"
        else:
            cancelled_by = "owner"

        now = datetime.now(timezone.utc)
        updates = {
            "cancelled_by": cancelled_by,
            "cancelled_at": now,
            "cancellation_reason": data.reason or "Cancelled by user",
        }

        if booking.payment_status == "completed":
            updates["payment_status"] = "refunded"
            updates["refunded_at"] = now
            updates["refund_amount"] = booking.total_amount

        return self._transition(booking, "cancelled", **updates)

    def process_payment(self, booking_id: int, data: PaymentRequest, actor: Actor) -> Booking:
        """Record the player's completed payment and confirm the booking"""
        booking = self.get_booking(booking_id)

        if booking.user_id != actor.user_id:
            raise ForbiddenError("Not authorized to pay for this booking")
        if booking.status == "cancelled":
            raise PaymentError("Cannot process payment for cancelled booking")
        if booking.status in ("completed", "no_show"):
            raise PaymentError(f"Cannot process payment for a {booking.status} booking")
        if booking.payment_status == "completed":
            raise PaymentError("Payment already completed for this booking")

        booking = self.repo.update_booking(
            self.db,
            booking,
            payment_status="completed",
            transaction_id=data.transactionId,
            paid_at=datetime.now(timezone.utc),
            status="confirmed",
        )
        logger.info(f"💳 Payment {data.transactionId} recorded for booking {booking_id}")
        return booking

    def list_turf_bookings(
        self,
        turf_id: int,
        actor: Actor,
        status: Optional[str] = None,
        on_date: Optional[date] = None,
        page: int = 1,
        limit: int = 10,
    ) -> dict:
        """Bookings of one turf, for its owner or an admin"""
        turf = self.turf_repo.get_turf_by_id(self.db, turf_id)
        if not turf:
            raise NotFoundError("Turf not found")
        if not actor.can_manage_turf(turf):
            raise ForbiddenError()

        bookings, total = self.repo.list_bookings(
            self.db, turf_id=turf_id, status=status, on_date=on_date, page=page, limit=limit
        )
        return self._paginate(bookings, total, page, limit)

    def list_user_bookings(
        self, user_id: int, status: Optional[str] = None, page: int = 1, limit: int = 10
    ) -> dict:
        bookings, total = self.repo.list_bookings(
            self.db, user_id=user_id, status=status, page=page, limit=limit
        )
        return self._paginate(bookings, total, page, limit)

    def list_all_bookings(
        self,
        actor: Actor,
        status: Optional[str] = None,
        on_date: Optional[date] = None,
        page: int = 1,
        limit: int = 10,
    ) -> dict:
        """Bookings across every turf, for admins"""
        if not actor.is_admin:
            raise ForbiddenError()

        bookings, total = self.repo.list_bookings(
            self.db,
            status=status,
            on_date=on_date,
            page=page,
            limit=limit,
            newest_created_first=True,
        )
        return self._paginate(bookings, total, page, limit)

    @staticmethod
    def _paginate(bookings: list[Booking], total: int, page: int, limit: int) -> dict:
        page, limit = BookingRepository.page_bounds(page, limit)
        return {
            "bookings": bookings,
            "pagination": {
                "current": page,
                "pages": math.ceil(total / limit),
                "total": total,
                "limit": limit,
            },
        }

    def get_analytics(self) -> dict:
        """Booking counts and completed revenue"""
        counts = self.repo.get_status_counts(self.db)
        return {
            "totalBookings": sum(counts.values()),
            "confirmedBookings": counts.get("confirmed", 0),
            "cancelledBookings": counts.get("cancelled", 0),
            "completedBookings": counts.get("completed", 0),
            "totalRevenue": float(self.repo.get_completed_revenue(self.db)),
        }
