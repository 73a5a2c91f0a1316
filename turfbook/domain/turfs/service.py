"""Turf service - Business logic for turf setup and availability"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ... import config
from ...errors import DuplicateClosureError, ForbiddenError, NotFoundError
from ...models import Turf, TurfClosure
from ...shared.actors import Actor
from ..availability.engine import compute_daily_slots
from ..availability.mappers import (
    build_pricing_rule,
    build_weekly_schedule,
    closure_dates,
    to_reservation,
)
from ..availability.schemas import PEAK_RATE_MULTIPLIER, DailyAvailability, DaySchedule
from ..bookings.repository import BookingRepository
from .repository import TurfRepository
from .schemas import AvailabilityUpdate, ClosureCreate, TurfCreate

logger = logging.getLogger(__name__)


def _schedule_rows(days: list[DaySchedule]) -> list[dict]:
    return [
        {
            "day": entry.day,
            "is_open": entry.is_open,
            "open_time": entry.open_time,
            "close_time": entry.close_time,
            "peak_start": entry.peak_window.start if entry.peak_window else None,
            "peak_end": entry.peak_window.end if entry.peak_window else None,
        }
        for entry in days
    ]


def _closure_rows(data: AvailabilityUpdate) -> Optional[list[dict]]:
    if data.holidays is None and data.maintenanceDates is None:
        return None

    rows = [{"date": d, "kind": "holiday"} for d in sorted(set(data.holidays or []))]
    seen = set()
    for entry in data.maintenanceDates or []:
        if entry.date in seen:
            continue
        seen.add(entry.date)
        rows.append({"date": entry.date, "kind": "maintenance", "reason": entry.reason})
    return rows


class TurfService:
    """Service layer for turf business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = TurfRepository()
        self.booking_repo = BookingRepository()

    def get_turf(self, turf_id: int) -> Turf:
        """Get a specific turf"""
        turf = self.repo.get_turf_by_id(self.db, turf_id)
        if not turf:
            raise NotFoundError("Turf not found")
        return turf

    def create_turf(self, data: TurfCreate) -> Turf:
        """Create a turf with its weekly hours"""
        logger.info(f"📥 Creating turf '{data.name}' for owner_id: {data.ownerId}")

        peak_rate = data.peakHourRate
        if peak_rate is None:
            peak_rate = data.hourlyRate * PEAK_RATE_MULTIPLIER

        turf_data = {
            "owner_id": data.ownerId,
            "name": data.name,
            "description": data.description,
            "address": data.address,
            "city": data.city,
            "hourly_rate": data.hourlyRate,
            "peak_hour_rate": peak_rate,
            "currency": data.currency or config.DEFAULT_CURRENCY,
            "max_players": data.maxPlayers,
            "recommended_players": data.recommendedPlayers,
            "is_active": data.isActive,
            "is_verified": data.isVerified,
        }

        schedule_days, closures = [], []
        if data.availability:
            schedule_days = _schedule_rows(data.availability.days)
            closures = _closure_rows(data.availability) or []

        turf = self.repo.create_turf(self.db, schedule_days, closures, **turf_data)
        logger.info(f"✅ Turf {turf.id} created with {len(schedule_days)} schedule day(s)")
        return turf

    def _get_managed_turf(self, turf_id: int, actor: Actor) -> Turf:
        turf = self.get_turf(turf_id)
        if not actor.can_manage_turf(turf):
            logger.warning(f"⚠️ User {actor.user_id} may not manage turf {turf_id}")
            raise ForbiddenError("Not authorized to manage this turf")
        return turf

    def update_availability(self, turf_id: int, data: AvailabilityUpdate, actor: Actor) -> Turf:
        """
        Replace the weekly hours of a turf.

        Holidays and maintenance dates are replaced too when either list is
        given; otherwise the stored closure dates are kept.
        """
        turf = self._get_managed_turf(turf_id, actor)
        turf = self.repo.replace_schedule(
            self.db, turf, _schedule_rows(data.days), _closure_rows(data)
        )
        logger.info(f"Turf {turf_id} availability updated")
        return turf

    def add_closure(self, turf_id: int, data: ClosureCreate, actor: Actor) -> TurfClosure:
        """Mark a single date as a holiday or maintenance day"""
        turf = self._get_managed_turf(turf_id, actor)

        if self.repo.get_closure(self.db, turf.id, data.date, data.kind):
            logger.warning(f"⚠️ Turf {turf_id} already has a {data.kind} on {data.date}")
            raise DuplicateClosureError(
                f"Turf already has a {data.kind} on {data.date.isoformat()}"
            )

        closure = self.repo.add_closure(
            self.db, turf, date=data.date, kind=data.kind, reason=data.reason
        )
        logger.info(f"Turf {turf_id} closed on {data.date} ({data.kind})")
        return closure

    def get_availability(
        self, turf_id: int, on_date: date, slot_minutes: Optional[int] = None
    ) -> DailyAvailability:
        """Slots of one day with their availability, peak flag and price"""
        turf = self.get_turf(turf_id)
        reservations = [
            to_reservation(b) for b in self.booking_repo.get_active_bookings(self.db, turf.id, on_date)
        ]
        holidays, maintenance_dates = closure_dates(turf)

        return compute_daily_slots(
            build_weekly_schedule(turf),
            on_date,
            reservations,
            build_pricing_rule(turf),
            holidays=holidays,
            maintenance_dates=maintenance_dates,
            slot_minutes=config.SLOT_MINUTES if slot_minutes is None else slot_minutes,
        )
