"""Booking domain schemas - Pydantic models for validation"""

import datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..availability.schemas import BookingStatus, TimeInterval

PaymentMethod = Literal["card", "upi", "netbanking", "wallet", "cash"]


class PlayerDetail(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None


class PlayersInfo(BaseModel):
    count: int = Field(..., ge=1)
    details: list[PlayerDetail] = Field(default_factory=list)


class PaymentInfo(BaseModel):
    method: PaymentMethod


class BookingCreate(BaseModel):
    """Schema for a booking request"""

    turfId: int
    date: datetime.date
    timeSlot: TimeInterval
    players: PlayersInfo
    payment: PaymentInfo
    specialRequests: Optional[str] = Field(None, max_length=500)


class CancelRequest(BaseModel):
    """Schema for cancelling a booking"""

    reason: Optional[str] = Field(None, max_length=500)

    @field_validator("reason")
    @classmethod
    def strip_reason(cls, v):
        if v is not None:
            v = v.strip() or None
        return v


class PaymentRequest(BaseModel):
    """Schema for recording a completed payment"""

    transactionId: str

    @field_validator("transactionId")
    @classmethod
    def validate_transaction_id(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Transaction ID is required")
        return v


class BookingResponse(BaseModel):
    """Schema for booking response"""

    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    id: int
    public_id: str
    user_id: int
    turf_id: int
    date: datetime.date
    start_time: str
    end_time: str
    duration_hours: Decimal
    players_count: int
    base_amount: Decimal
    peak_hour_charges: Decimal
    taxes: Decimal
    discount: Decimal
    total_amount: Decimal
    payment_method: str
    payment_status: str
    transaction_id: Optional[str] = None
    status: BookingStatus
    cancelled_by: Optional[str] = None
    cancellation_reason: Optional[str] = None
    refund_amount: Optional[Decimal] = None
    special_requests: Optional[str] = None
    created_at: Optional[datetime.datetime] = None
