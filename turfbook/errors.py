"""
Booking error taxonomy.

Every failure the engine or the services can report is a ``BookingError``.
They are validation outcomes, not defects: the caller maps ``status_code``
and ``to_dict()`` onto whatever transport it serves.
"""

from typing import Any, Optional


class BookingError(Exception):
    """Base class for booking and availability failures"""

    status_code = 400
    default_message = "Booking request rejected"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {"success": False, "message": self.message}


class InvalidIntervalError(BookingError):
    """Raised when a requested interval does not end after it starts"""

    default_message = "End time must be after start time"


class PastDateError(BookingError):
    """Raised when the booking date is before today"""

    default_message = "Cannot book for past dates"


class TurfClosedError(BookingError):
    """Raised when the turf is closed on the requested day or hours"""

    default_message = "Turf is closed at the requested time"


class CapacityExceededError(BookingError):
    """Raised when more players are requested than the turf allows"""

    def __init__(self, max_players: int, requested: int):
        self.max_players = max_players
        self.requested = requested
        super().__init__(f"Maximum {max_players} players allowed for this turf")


class SlotConflictError(BookingError):
    """Raised when the requested interval overlaps active reservations"""

    status_code = 409
    default_message = "Time slot is already booked"

    def __init__(self, conflicts: list, message: Optional[str] = None):
        self.conflicts = list(conflicts)
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["conflict"] = {
            "bookings": [
                {
                    "id": reservation.id,
                    "date": reservation.date.isoformat(),
                    "timeSlot": {
                        "startTime": reservation.interval.start,
                        "endTime": reservation.interval.end,
                    },
                    "status": reservation.status,
                }
                for reservation in self.conflicts
            ]
        }
        return payload


class TurfInactiveError(BookingError):
    default_message = "Turf is currently inactive"


class NotFoundError(BookingError):
    status_code = 404
    default_message = "Resource not found"


class InvalidStatusTransitionError(BookingError):
    """Raised when a booking cannot move to the requested status"""

    default_message = "Booking status cannot be changed"


class PaymentError(BookingError):
    default_message = "Payment could not be processed"


class BookingContentionError(BookingError):
    """Raised when concurrent bookings kept winning the turf version race"""

    status_code = 409
    default_message = "Turf is receiving too many bookings right now, please retry"


class DuplicateClosureError(BookingError):
    status_code = 409
    default_message = "Turf is already closed on this date"


class ForbiddenError(BookingError):
    """Raised when the acting user may not perform the operation"""

    status_code = 403
    default_message = "Not authorized"


class ReviewNotAllowedError(BookingError):
    default_message = "You can only review turfs you have booked and used"


class DuplicateReviewError(BookingError):
    default_message = "You have already reviewed this booking"
