"""
Bookings Domain

Booking creation with conflict checking, the status lifecycle
(pending -> confirmed -> completed, or cancelled / no_show), payment
recording, listings and analytics.
"""
