"""Conversions from stored records to engine value types"""

import datetime

from ...models import Booking, Turf
from .schemas import DaySchedule, PeakWindow, PricingRule, Reservation, TimeInterval, WeeklySchedule


def build_weekly_schedule(turf: Turf) -> WeeklySchedule:
    days = []
    for entry in turf.schedule_days:
        peak_window = None
        if entry.peak_start and entry.peak_end:
            peak_window = PeakWindow(start=entry.peak_start, end=entry.peak_end)
        days.append(
            DaySchedule(
                day=entry.day,
                is_open=entry.is_open,
                open_time=entry.open_time,
                close_time=entry.close_time,
                peak_window=peak_window,
            )
        )
    return WeeklySchedule(days=days)


def build_pricing_rule(turf: Turf) -> PricingRule:
    return PricingRule(hourly_rate=turf.hourly_rate, peak_hourly_rate=turf.peak_hour_rate)


def closure_dates(turf: Turf) -> tuple[list[datetime.date], list[datetime.date]]:
    """(holidays, maintenance dates) of the turf"""
    holidays = [c.date for c in turf.closures if c.kind == "holiday"]
    maintenance = [c.date for c in turf.closures if c.kind == "maintenance"]
    return holidays, maintenance


def to_reservation(booking: Booking) -> Reservation:
    return Reservation(
        id=booking.id,
        turf_id=booking.turf_id,
        date=booking.date,
        interval=TimeInterval(start=booking.start_time, end=booking.end_time),
        status=booking.status,
        user_id=booking.user_id,
    )
