"""
Timezone utilities for the booking service.

All booking instants live in UTC. Naive inputs are interpreted as UTC;
aware inputs are converted.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Callable, Tuple, Union

Clock = Callable[[], datetime]

Instant = Union[datetime, str]


def utc_now() -> datetime:
    """Current instant as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """
    Return ``dt`` as an aware UTC datetime.

    Args:
        dt: Naive (assumed UTC) or aware datetime

    Returns:
        Aware datetime in UTC
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_instant(value: Instant) -> datetime:
    """
    Parse an ISO-8601 timestamp (or pass through a datetime) into aware UTC.

    Accepts a trailing ``Z`` for UTC.

    Raises:
        ValueError: If the value cannot be parsed or does not fit in UTC
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        candidate = value.strip()
        if not candidate:
            raise ValueError("Empty timestamp")
        if candidate.endswith(("Z", "z")):
            candidate = candidate[:-1] + "+00:00"
        parsed = datetime.fromisoformat(candidate)
    else:
        raise ValueError(f"Unsupported timestamp type: {type(value).__name__}")

    try:
        return ensure_utc(parsed)
    except OverflowError as exc:
        # an offset can push year 1 or year 9999 outside the datetime range
        raise ValueError(f"Timestamp out of range: {value}") from exc


def utc_day_bounds(day: date) -> Tuple[datetime, datetime]:
    """Return ``[00:00:00, 23:59:59]`` of a UTC calendar day."""
    start = datetime.combine(day, time(0, 0), tzinfo=timezone.utc)
    end = start + timedelta(days=1) - timedelta(seconds=1)
    return start, end
