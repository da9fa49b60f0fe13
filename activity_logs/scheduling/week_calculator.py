"""
Week calculations for activity logs.
Weeks run from Sunday to Saturday; the editable window is the current week
plus the two preceding weeks.
"""
import calendar
from datetime import date, datetime, time, timedelta
from typing import List, Optional, Tuple, Union

from activity_logs.exceptions import InvalidDateError

DateLike = Union[date, datetime, str]

EDITABLE_WEEKS_BACK = 2
WEEK_RANGE_SEPARATOR = " – "

# Locale-independent month abbreviations
_MONTH_ABBR = ("", "Jan", "Feb", "Mar", "Apr", "May", "Jun",
               "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def to_date(value: DateLike) -> date:
    """
    Normalize a date, datetime or ISO-8601 string to a calendar date.

    Args:
        value: Date input ("2024-01-15", "2024-01-15T10:30:00Z", date, datetime)

    Returns:
        date: Calendar date with the time component dropped

    Raises:
        InvalidDateError: If the value is missing or cannot be parsed
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise InvalidDateError(f"Unsupported date value: {value!r}")

    text = value.strip()
    if not text:
        raise InvalidDateError("Date is required")
    try:
        if len(text) == 10:
            return date.fromisoformat(text)
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError as e:
        raise InvalidDateError(f"Invalid date: {value!r}") from e


def week_start(value: DateLike) -> date:
    """Get the Sunday at or before the given date."""
    d = to_date(value)
    days_since_sunday = (d.weekday() + 1) % 7  # weekday(): Monday=0 .. Sunday=6
    return d - timedelta(days=days_since_sunday)


def week_end(value: DateLike) -> datetime:
    """Get the end of the Saturday at or after the given date."""
    saturday = week_start(value) + timedelta(days=6)
    return datetime.combine(saturday, time.max)


def editable_range(now: Optional[DateLike] = None,
                   weeks_back: int = EDITABLE_WEEKS_BACK) -> Tuple[date, date]:
    """
    Get the first and last editable day relative to now.

    Returns:
        tuple: (Sunday `weeks_back` weeks before the current week, Saturday of the current week)
    """
    current = week_start(now if now is not None else datetime.now())
    return current - timedelta(weeks=weeks_back), current + timedelta(days=6)


def is_editable(value: DateLike, now: Optional[DateLike] = None,
                weeks_back: int = EDITABLE_WEEKS_BACK) -> bool:
    """
    Check if a date falls in the editable window: the current week or one of
    the `weeks_back` weeks before it. Future weeks are never editable.

    Args:
        value: Activity date
        now: Reference point (defaults to the current wall-clock time)
        weeks_back: Number of previous weeks that stay editable

    Returns:
        bool: True if the date may still be created or modified
    """
    target = week_start(value)
    current = week_start(now if now is not None else datetime.now())
    earliest = current - timedelta(weeks=weeks_back)
    return earliest <= target <= current


def week_days(value: DateLike) -> List[date]:
    """Get all seven days (Sunday..Saturday) of the week starting at value."""
    start = to_date(value)
    return [start + timedelta(days=i) for i in range(7)]


def month_start(value: DateLike) -> date:
    """Get the first day of the month."""
    return to_date(value).replace(day=1)


def month_end(value: DateLike) -> date:
    """Get the last day of the month."""
    d = to_date(value)
    return d.replace(day=calendar.monthrange(d.year, d.month)[1])


def weeks_in_month(value: DateLike) -> List[date]:
    """
    Get the start of every week that overlaps the month containing value.

    The first entry is the Sunday of the week holding the 1st, the last the
    Sunday of the week holding the final day, so the range may spill into
    adjacent months.
    """
    last_day = month_end(value)
    current = week_start(month_start(value))

    weeks = []
    while current <= last_day:
        weeks.append(current)
        current += timedelta(days=7)
    return weeks


def week_number(value: DateLike) -> int:
    """Get the week number in the year (1-53); week 1 is the week holding Jan 1."""
    d = to_date(value)
    first_week = week_start(date(d.year, 1, 1))
    return (d - first_week).days // 7 + 1


def format_week_range(value: DateLike) -> str:
    """
    Format a week as a short human-readable range.

    Examples:
        "Jan 14 – 20" (same month), "Dec 31 – Jan 6" (spans months)
    """
    start = week_start(value)
    end = start + timedelta(days=6)

    start_month = _MONTH_ABBR[start.month]
    end_month = _MONTH_ABBR[end.month]
    if start.month == end.month:
        return f"{start_month} {start.day}{WEEK_RANGE_SEPARATOR}{end.day}"
    return f"{start_month} {start.day}{WEEK_RANGE_SEPARATOR}{end_month} {end.day}"


def is_same_week(first: DateLike, second: DateLike) -> bool:
    """Check if two dates fall in the same Sunday-start week."""
    return week_start(first) == week_start(second)


def is_current_week(value: DateLike, now: Optional[DateLike] = None) -> bool:
    """Check if a date falls in the current week."""
    return is_same_week(value, now if now is not None else datetime.now())
