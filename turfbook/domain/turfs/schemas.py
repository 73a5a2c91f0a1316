"""Turf domain schemas - Pydantic models for validation"""

import datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ..availability.schemas import DaySchedule, ensure_unique_days

ClosureKind = Literal["holiday", "maintenance"]


class MaintenanceDate(BaseModel):
    date: datetime.date
    reason: Optional[str] = Field(None, max_length=255)


class AvailabilityUpdate(BaseModel):
    """Schema for replacing a turf's weekly hours and closure dates"""

    days: list[DaySchedule]
    holidays: Optional[list[datetime.date]] = None
    maintenanceDates: Optional[list[MaintenanceDate]] = None

    @field_validator("days")
    @classmethod
    def validate_days(cls, v):
        return ensure_unique_days(v)


class TurfCreate(BaseModel):
    """Schema for creating a new turf"""

    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)
    ownerId: Optional[int] = None
    address: Optional[str] = None
    city: Optional[str] = None
    hourlyRate: Decimal = Field(..., ge=0)
    peakHourRate: Optional[Decimal] = Field(None, ge=0)
    currency: Optional[str] = None
    maxPlayers: int = Field(..., ge=1)
    recommendedPlayers: Optional[int] = Field(None, ge=1)
    isActive: bool = True
    isVerified: bool = False
    availability: Optional[AvailabilityUpdate] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Turf name is required")
        return v


class ClosureCreate(BaseModel):
    """Schema for adding a holiday or maintenance date"""

    date: datetime.date
    kind: ClosureKind = "holiday"
    reason: Optional[str] = Field(None, max_length=255)
