import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


def generate_public_id():
    """Generate a unique public ID for secure public access"""
    return str(uuid.uuid4())


class Turf(Base):
    __tablename__ = "turfs"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, nullable=True, index=True)  # Owning user, managed outside this package
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    address = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True, index=True)

    # Pricing
    hourly_rate = Column(Numeric(10, 2), nullable=False)
    peak_hour_rate = Column(Numeric(10, 2), nullable=True)  # Defaults to 1.5x hourly on create
    currency = Column(String(10), default="TK", nullable=False)

    # Capacity
    max_players = Column(Integer, nullable=False)
    recommended_players = Column(Integer, nullable=True)

    is_active = Column(Boolean, default=True, nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)

    # Recomputed from reviews on every add, update and delete
    rating_average = Column(Numeric(3, 2), default=0, nullable=False)
    rating_count = Column(Integer, default=0, nullable=False)

    # Bumped by every booking insert; a stale value means a concurrent booking won
    booking_version = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    schedule_days = relationship(
        "TurfScheduleDay", back_populates="turf", cascade="all, delete-orphan", lazy="selectin"
    )
    closures = relationship(
        "TurfClosure", back_populates="turf", cascade="all, delete-orphan", lazy="selectin"
    )
    bookings = relationship("Booking", back_populates="turf")
    reviews = relationship("Review", back_populates="turf", cascade="all, delete-orphan")


class TurfScheduleDay(Base):
    """Weekly opening hours, one row per turf and weekday"""

    __tablename__ = "turf_schedule_days"
    __table_args__ = (UniqueConstraint("turf_id", "day", name="uq_turf_schedule_day"),)

    id = Column(Integer, primary_key=True, index=True)
    turf_id = Column(Integer, ForeignKey("turfs.id"), nullable=False, index=True)
    day = Column(String(10), nullable=False)  # monday .. sunday
    is_open = Column(Boolean, default=True, nullable=False)
    open_time = Column(String(5), nullable=False)  # HH:MM format
    close_time = Column(String(5), nullable=False)
    peak_start = Column(String(5), nullable=True)
    peak_end = Column(String(5), nullable=True)

    turf = relationship("Turf", back_populates="schedule_days")


class TurfClosure(Base):
    """A date the turf is shut regardless of its weekly hours"""

    __tablename__ = "turf_closures"
    __table_args__ = (UniqueConstraint("turf_id", "date", "kind", name="uq_turf_closure"),)

    id = Column(Integer, primary_key=True, index=True)
    turf_id = Column(Integer, ForeignKey("turfs.id"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    kind = Column(String(20), nullable=False)  # holiday, maintenance
    reason = Column(String(255), nullable=True)

    turf = relationship("Turf", back_populates="closures")


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        Index("ix_bookings_turf_date", "turf_id", "date"),
        Index("ix_bookings_user_date", "user_id", "date"),
        Index("ix_bookings_date_status", "date", "status"),
    )

    id = Column(Integer, primary_key=True, index=True)
    public_id = Column(
        String(36), unique=True, nullable=False, index=True, default=generate_public_id
    )
    user_id = Column(Integer, nullable=False)
    turf_id = Column(Integer, ForeignKey("turfs.id"), nullable=False)

    # Scheduling
    date = Column(Date, nullable=False)  # Calendar day, no time of day
    start_time = Column(String(5), nullable=False)  # HH:MM format
    end_time = Column(String(5), nullable=False)
    duration_hours = Column(Numeric(8, 4), nullable=False)

    players_count = Column(Integer, nullable=False)
    players_details = Column(JSON, default=list, nullable=True)  # [{name, phone, email}]

    # Pricing
    base_amount = Column(Numeric(12, 2), nullable=False)
    peak_hour_charges = Column(Numeric(12, 2), default=0, nullable=False)
    taxes = Column(Numeric(12, 2), default=0, nullable=False)
    discount = Column(Numeric(12, 2), default=0, nullable=False)
    total_amount = Column(Numeric(12, 2), nullable=False)

    # Payment: card, upi, netbanking, wallet, cash
    payment_method = Column(String(20), nullable=False)
    # pending, completed, failed, refunded
    payment_status = Column(String(20), default="pending", nullable=False)
    transaction_id = Column(String(255), nullable=True)
    paid_at = Column(DateTime(timezone=True), nullable=True)
    refund_id = Column(String(255), nullable=True)
    refunded_at = Column(DateTime(timezone=True), nullable=True)

    # Status workflow: pending → confirmed → completed, or → cancelled / no_show
    status = Column(String(20), default="pending", nullable=False, index=True)

    # Cancellation
    cancelled_by = Column(String(10), nullable=True)  # user, owner, admin
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    cancellation_reason = Column(String(500), nullable=True)
    refund_amount = Column(Numeric(12, 2), nullable=True)

    special_requests = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    turf = relationship("Turf", back_populates="bookings")

    def calculate_total(self):
        return self.base_amount + self.peak_hour_charges + self.taxes - self.discount


class Review(Base):
    """A rating left by a player after a completed booking"""

    __tablename__ = "reviews"
    __table_args__ = (
        UniqueConstraint("user_id", "booking_id", name="uq_review_user_booking"),
        Index("ix_reviews_turf_rating", "turf_id", "rating"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, nullable=False, index=True)
    turf_id = Column(Integer, ForeignKey("turfs.id"), nullable=False)
    booking_id = Column(Integer, ForeignKey("bookings.id"), nullable=False)

    rating = Column(Integer, nullable=False)  # 1-5
    comment = Column(String(500), nullable=True)

    # Optional 1-5 aspect scores
    cleanliness = Column(Integer, nullable=True)
    facilities = Column(Integer, nullable=True)
    staff = Column(Integer, nullable=True)
    value = Column(Integer, nullable=True)

    is_verified = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    turf = relationship("Turf", back_populates="reviews")
    booking = relationship("Booking")
