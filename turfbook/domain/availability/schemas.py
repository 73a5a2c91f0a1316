"""Availability domain schemas - value types consumed and produced by the engine"""

import datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from ...shared.validators import validate_time, validate_weekday

BookingStatus = Literal["pending", "confirmed", "cancelled", "completed", "no_show"]

# Only these statuses hold a time slot; the rest never block a new booking
ACTIVE_STATUSES = frozenset({"pending", "confirmed"})

# Peak rate applied when a turf does not set one explicitly
PEAK_RATE_MULTIPLIER = Decimal("1.5")


class EngineModel(BaseModel):
    """Base model: snake_case in Python, camelCase on the wire"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_response(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class TimeInterval(EngineModel):
    """Half-open [start, end) range of zero-padded HH:MM times"""

    start: str = Field(alias="startTime")
    end: str = Field(alias="endTime")

    @field_validator("start", "end")
    @classmethod
    def normalize_time(cls, v):
        return validate_time(v)


class PeakWindow(EngineModel):
    start: str
    end: str

    @field_validator("start", "end")
    @classmethod
    def normalize_time(cls, v):
        return validate_time(v)

    @model_validator(mode="after")
    def check_order(self):
        if self.start >= self.end:
            raise ValueError("Peak window start must be before its end")
        return self


class DaySchedule(EngineModel):
    """Opening hours for one day of the week"""

    day: str
    is_open: bool = True
    open_time: str
    close_time: str
    peak_window: Optional[PeakWindow] = None

    @field_validator("day")
    @classmethod
    def check_day(cls, v):
        return validate_weekday(v)

    @field_validator("open_time", "close_time")
    @classmethod
    def normalize_time(cls, v):
        return validate_time(v)

    @model_validator(mode="after")
    def check_hours(self):
        if self.open_time >= self.close_time:
            raise ValueError(f"{self.day}: open time must be before close time")
        return self


def ensure_unique_days(days: list[DaySchedule]) -> list[DaySchedule]:
    seen = set()
    for entry in days:
        if entry.day in seen:
            raise ValueError(f"Duplicate schedule entry for {entry.day}")
        seen.add(entry.day)
    return days


class WeeklySchedule(EngineModel):
    days: list[DaySchedule] = Field(default_factory=list)

    @field_validator("days")
    @classmethod
    def one_entry_per_day(cls, v):
        return ensure_unique_days(v)

    def for_day(self, day: str) -> Optional[DaySchedule]:
        return next((entry for entry in self.days if entry.day == day), None)


class Reservation(EngineModel):
    """An existing booking as seen by the engine"""

    id: Optional[int] = None
    turf_id: int
    date: datetime.date
    interval: TimeInterval
    status: BookingStatus = "pending"
    user_id: Optional[int] = None

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES


class PricingRule(EngineModel):
    hourly_rate: Decimal = Field(ge=0)
    peak_hourly_rate: Optional[Decimal] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def default_peak_rate(self):
        if self.peak_hourly_rate is None:
            self.peak_hourly_rate = self.hourly_rate * PEAK_RATE_MULTIPLIER
        return self


class Slot(EngineModel):
    start_time: str
    end_time: str
    is_available: bool
    is_peak_hour: bool
    price: Decimal


class DailyAvailability(EngineModel):
    is_open: bool
    open_time: Optional[str] = None
    close_time: Optional[str] = None
    slots: list[Slot] = Field(default_factory=list)
    booked_slots: list[TimeInterval] = Field(default_factory=list)
    # "holiday", "maintenance" or "closed" when is_open is false
    closed_reason: Optional[str] = None


class PriceBreakdown(EngineModel):
    base_amount: Decimal
    taxes: Decimal
    total_amount: Decimal
