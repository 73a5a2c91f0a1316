"""Shared validation utilities"""

import re
from typing import Optional

# Same pattern the booking form accepts: hour may be unpadded ("9:30")
TIME_PATTERN = re.compile(r"^([0-1]?[0-9]|2[0-3]):([0-5][0-9])$")

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


def validate_time(value: Optional[str]) -> Optional[str]:
    """
    Validate a 24h clock time and normalize it to zero-padded HH:MM.

    Zero padding makes plain string comparison match chronological order,
    which the availability engine relies on.

    Raises:
        ValueError: If the value is not a valid HH:MM time
    """
    if value is None:
        return value

    match = TIME_PATTERN.match(value.strip())
    if not match:
        raise ValueError("Time must be in HH:MM format")

    hours, minutes = match.groups()
    return f"{int(hours):02d}:{minutes}"


def validate_weekday(value: str) -> str:
    """Validate a lowercase weekday name"""
    day = value.strip().lower()
    if day not in WEEKDAYS:
        raise ValueError(f"Day must be one of: {', '.join(WEEKDAYS)}")
    return day


def time_to_minutes(value: str) -> int:
    """Minutes since midnight for a normalized HH:MM time"""
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def minutes_to_time(total: int) -> str:
    return f"{total // 60:02d}:{total % 60:02d}"
