"""Timestamp and calendar-date helpers.

All timestamps handled by the service are timezone-aware UTC. Calendar dates
(offer start/end, planning entries) are plain ``date`` objects.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Optional

STORAGE_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


def utc_today() -> date:
    """Get the current calendar date in UTC."""
    return utc_now().date()


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Ensure a datetime is timezone-aware and in UTC.

    Naive datetimes are treated as UTC; aware ones are converted.

    Args:
        dt: Datetime to convert (can be None)

    Returns:
        Timezone-aware datetime in UTC, or None if input is None
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(timezone.utc)


def format_timestamp(dt: Optional[datetime]) -> Optional[str]:
    """Format a datetime for database storage.

    The fixed-width format keeps lexical ordering identical to chronological
    ordering, which the repositories rely on for range queries.

    Example:
        >>> format_timestamp(datetime(2025, 11, 4, 12, 0, tzinfo=timezone.utc))
        '2025-11-04T12:00:00.000000Z'
    """
    dt_utc = ensure_utc(dt)
    if dt_utc is None:
        return None
    return dt_utc.strftime(STORAGE_FORMAT)


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a stored timestamp back into an aware UTC datetime.

    Accepts the storage format as well as second-precision ISO strings
    with or without the ``Z`` suffix.
    """
    if value is None or value == "":
        return None

    cleaned = value.strip().rstrip("Z")
    try:
        dt = datetime.strptime(cleaned, "%Y-%m-%dT%H:%M:%S.%f")
    except ValueError:
        dt = datetime.strptime(cleaned, "%Y-%m-%dT%H:%M:%S")

    return dt.replace(tzinfo=timezone.utc)


def format_date(value: Optional[date]) -> Optional[str]:
    """Format a calendar date as ``YYYY-MM-DD`` (None passes through)."""
    if value is None:
        return None
    return value.isoformat()


def parse_date(value: Optional[str]) -> Optional[date]:
    """Parse a ``YYYY-MM-DD`` string (None or empty passes through)."""
    if not value:
        return None
    return date.fromisoformat(value.strip())


def add_days(value: date, days: int) -> date:
    """Shift a calendar date by a number of days."""
    return value + timedelta(days=days)
