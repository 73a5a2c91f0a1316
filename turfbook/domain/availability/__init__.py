"""
Availability Domain

Slot generation, peak pricing and booking conflict detection for turfs.

- schemas.py: engine value types (schedule, reservation, pricing, slots)
- engine.py: pure functions, no database access
- mappers.py: stored records -> engine value types
"""

from .engine import (
    DEFAULT_SLOT_MINUTES,
    TAX_RATE,
    check_overlap,
    compute_daily_slots,
    compute_pricing,
    find_conflicts,
    validate_booking_request,
)

__all__ = [
    "DEFAULT_SLOT_MINUTES",
    "TAX_RATE",
    "check_overlap",
    "compute_daily_slots",
    "compute_pricing",
    "find_conflicts",
    "validate_booking_request",
]
