"""
Availability engine.

Pure functions over already-fetched turf and reservation data: interval
conflict detection, per-day slot generation with peak pricing, and booking
price computation. Nothing here touches the database or the clock; callers
pass ``today`` explicitly.

All times are zero-padded "HH:MM" strings, so string comparison is
chronological comparison.
"""

import datetime
import logging
from decimal import Decimal
from typing import Iterable, Iterator, Optional, Union

from ...errors import (
    CapacityExceededError,
    InvalidIntervalError,
    PastDateError,
    SlotConflictError,
    TurfClosedError,
)
from ...shared.validators import WEEKDAYS, minutes_to_time, time_to_minutes
from .schemas import (
    ACTIVE_STATUSES,
    DailyAvailability,
    PriceBreakdown,
    PricingRule,
    Reservation,
    Slot,
    TimeInterval,
    WeeklySchedule,
)

logger = logging.getLogger(__name__)

# Goods and services tax applied on top of the base amount
TAX_RATE = Decimal("0.18")

DEFAULT_SLOT_MINUTES = 60


def weekday_name(on_date: datetime.date) -> str:
    """Lowercase weekday name of the calendar date"""
    return WEEKDAYS[on_date.weekday()]


def intervals_overlap(a: TimeInterval, b: TimeInterval) -> bool:
    """Half-open overlap test; touching endpoints do not overlap"""
    return a.start < b.end and a.end > b.start


def _active_reservations(
    existing: Iterable[Reservation],
    turf_id: Optional[int] = None,
    on_date: Optional[datetime.date] = None,
    exclude_id: Optional[int] = None,
) -> Iterator[Reservation]:
    for reservation in existing:
        if reservation.status not in ACTIVE_STATUSES:
            continue
        if turf_id is not None and reservation.turf_id != turf_id:
            continue
        if on_date is not None and reservation.date != on_date:
            continue
        if exclude_id is not None and reservation.id == exclude_id:
            continue
        yield reservation


def find_conflicts(
    existing: Iterable[Reservation],
    candidate: TimeInterval,
    *,
    turf_id: Optional[int] = None,
    on_date: Optional[datetime.date] = None,
    exclude_id: Optional[int] = None,
) -> list[Reservation]:
    """
    Every pending or confirmed reservation overlapping the candidate interval.

    ``turf_id`` and ``on_date`` restrict the check to one turf and day when
    the caller passes a wider list; ``exclude_id`` skips a reservation that
    is being re-validated against the others.
    """
    return [
        reservation
        for reservation in _active_reservations(existing, turf_id, on_date, exclude_id)
        if intervals_overlap(reservation.interval, candidate)
    ]


def check_overlap(
    existing: Iterable[Reservation],
    candidate: TimeInterval,
    *,
    turf_id: Optional[int] = None,
    on_date: Optional[datetime.date] = None,
) -> bool:
    return any(
        intervals_overlap(reservation.interval, candidate)
        for reservation in _active_reservations(existing, turf_id, on_date)
    )


def closure_reason(
    on_date: datetime.date,
    holidays: Iterable[datetime.date] = (),
    maintenance_dates: Iterable[datetime.date] = (),
) -> Optional[str]:
    """Why the turf is shut on this date regardless of its weekly hours, if it is"""
    if on_date in set(holidays):
        return "holiday"
    if on_date in set(maintenance_dates):
        return "maintenance"
    return None


def compute_daily_slots(
    schedule: WeeklySchedule,
    on_date: datetime.date,
    reservations: Iterable[Reservation],
    pricing: PricingRule,
    *,
    holidays: Iterable[datetime.date] = (),
    maintenance_dates: Iterable[datetime.date] = (),
    slot_minutes: int = DEFAULT_SLOT_MINUTES,
) -> DailyAvailability:
    """
    Split the day's open hours into fixed-width slots.

    A slot is unavailable when any pending or confirmed reservation overlaps
    it, using the same half-open test as booking creation. Slot price is the
    hourly rate in force at the slot start (peak or regular).
    """
    if slot_minutes <= 0:
        raise ValueError("slot_minutes must be positive")

    reason = closure_reason(on_date, holidays, maintenance_dates)
    if reason:
        return DailyAvailability(is_open=False, closed_reason=reason)

    day = schedule.for_day(weekday_name(on_date))
    if day is None or not day.is_open:
        return DailyAvailability(is_open=False, closed_reason="closed")

    active = list(_active_reservations(reservations, on_date=on_date))
    peak = day.peak_window

    slots = []
    start = time_to_minutes(day.open_time)
    close = time_to_minutes(day.close_time)
    while start + slot_minutes <= close:
        bucket = TimeInterval(start=minutes_to_time(start), end=minutes_to_time(start + slot_minutes))
        is_booked = any(intervals_overlap(r.interval, bucket) for r in active)
        is_peak_hour = peak is not None and peak.start <= bucket.start < peak.end
        slots.append(
            Slot(
                start_time=bucket.start,
                end_time=bucket.end,
                is_available=not is_booked,
                is_peak_hour=is_peak_hour,
                price=pricing.peak_hourly_rate if is_peak_hour else pricing.hourly_rate,
            )
        )
        start += slot_minutes

    return DailyAvailability(
        is_open=True,
        open_time=day.open_time,
        close_time=day.close_time,
        slots=slots,
        booked_slots=sorted((r.interval for r in active), key=lambda interval: interval.start),
    )


def booking_duration_hours(interval: TimeInterval) -> Decimal:
    """Exact length of the interval in hours (fractional, never rounded)"""
    minutes = time_to_minutes(interval.end) - time_to_minutes(interval.start)
    return Decimal(minutes) / Decimal(60)


def compute_pricing(duration_hours: Union[Decimal, float, int], pricing: PricingRule) -> PriceBreakdown:
    """
    Price a booking of the given length at the regular hourly rate.

    No peak surcharge is added here; peak rates only show up in the
    per-slot availability view.
    """
    duration = duration_hours if isinstance(duration_hours, Decimal) else Decimal(str(duration_hours))
    if duration < 0:
        raise ValueError("Duration cannot be negative")

    base_amount = pricing.hourly_rate * duration
    taxes = base_amount * TAX_RATE
    return PriceBreakdown(base_amount=base_amount, taxes=taxes, total_amount=base_amount + taxes)


def validate_booking_request(
    *,
    schedule: WeeklySchedule,
    pricing: PricingRule,
    on_date: datetime.date,
    interval: TimeInterval,
    players: int,
    max_players: Optional[int],
    existing: Iterable[Reservation],
    today: datetime.date,
    holidays: Iterable[datetime.date] = (),
    maintenance_dates: Iterable[datetime.date] = (),
    turf_id: Optional[int] = None,
    exclude_id: Optional[int] = None,
) -> PriceBreakdown:
    """
    Check a prospective booking and price it.

    Raises the first failing check, in order: InvalidIntervalError,
    PastDateError, TurfClosedError, SlotConflictError, CapacityExceededError.
    """
    if interval.end <= interval.start:
        raise InvalidIntervalError()

    if on_date < today:
        raise PastDateError()

    reason = closure_reason(on_date, holidays, maintenance_dates)
    if reason:
        raise TurfClosedError(f"Turf is closed on {on_date.isoformat()} ({reason})")

    day_name = weekday_name(on_date)
    day = schedule.for_day(day_name)
    if day is None or not day.is_open:
        raise TurfClosedError(f"Turf is closed on {day_name}")

    if interval.start < day.open_time or interval.end > day.close_time:
        raise TurfClosedError(
            f"Turf is open from {day.open_time} to {day.close_time} on {day_name}"
        )

    conflicts = find_conflicts(
        existing, interval, turf_id=turf_id, on_date=on_date, exclude_id=exclude_id
    )
    if conflicts:
        logger.debug(
            f"Interval {interval.start}-{interval.end} on {on_date} overlaps {len(conflicts)} reservation(s)"
        )
        raise SlotConflictError(conflicts)

    if max_players and players > max_players:
        raise CapacityExceededError(max_players, players)

    return compute_pricing(booking_duration_hours(interval), pricing)
