"""
Duration calculation for activity start/end times.
Times are 24-hour "HH:MM" strings; an end time earlier than the start time
is treated as the following day (overnight shift).
"""
import re
from typing import Optional, Tuple

from activity_logs.exceptions import InvalidTimeFormatError

MINUTES_PER_DAY = 24 * 60

_TIME_PATTERN = re.compile(r"^([0-9]{2}):([0-9]{2})$")


def parse_time(value: str) -> Tuple[int, int]:
    """
    Parse a 24-hour "HH:MM" string.

    Args:
        value: Time string, e.g. "09:30"

    Returns:
        tuple: (hour, minute)

    Raises:
        InvalidTimeFormatError: If the string is not HH:MM with hour 0-23 and minute 0-59
    """
    match = _TIME_PATTERN.match(value.strip()) if isinstance(value, str) else None
    if not match:
        raise InvalidTimeFormatError(f"Invalid time format (expected HH:MM): {value!r}")

    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise InvalidTimeFormatError(f"Time out of range: {value!r}")
    return hour, minute


def elapsed(start_time: Optional[str], end_time: Optional[str]) -> int:
    """
    Calculate duration in minutes between start and end time.

    Args:
        start_time: Format "HH:MM"
        end_time: Format "HH:MM"

    Returns:
        int: Duration in minutes, 0 if either time is missing
    """
    if not start_time or not end_time:
        return 0

    start_hour, start_min = parse_time(start_time)
    end_hour, end_min = parse_time(end_time)

    minutes = (end_hour * 60 + end_min) - (start_hour * 60 + start_min)
    if minutes < 0:
        minutes += MINUTES_PER_DAY
    return minutes


def format_duration(minutes: Optional[int]) -> str:
    """
    Format minutes as "2h 30m", "2h" or "45m".

    Args:
        minutes: Total minutes

    Returns:
        str: Formatted duration, "0m" for zero or None
    """
    if not minutes:
        return "0m"
    if minutes < 0:
        raise ValueError(f"Duration cannot be negative: {minutes}")

    hours, mins = divmod(int(minutes), 60)
    if hours == 0:
        return f"{mins}m"
    if mins == 0:
        return f"{hours}h"
    return f"{hours}h {mins}m"


def minutes_to_hours(minutes: Optional[int]) -> float:
    """Convert minutes to decimal hours rounded to 2 places (90 -> 1.5)."""
    return round((minutes or 0) / 60, 2)
