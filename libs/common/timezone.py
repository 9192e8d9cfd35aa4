"""
UTC time helpers.
Every service computes expiry with the same clock so that stored and compared
timestamps agree regardless of the database driver's timezone handling.
"""
from datetime import datetime, timezone
from typing import Callable

UTC_TIMEZONE = timezone.utc

# Zero-argument callable returning an aware datetime. Services accept one so
# tests can freeze or advance time.
Clock = Callable[[], datetime]


def now_utc() -> datetime:
    """
    Returns the current time in UTC.

    Returns:
        timezone-aware datetime in UTC
    """
    return datetime.now(UTC_TIMEZONE)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """
    Makes sure a datetime carries the UTC timezone.
    Naive values (as returned by MySQL DATETIME or SQLite columns) are assumed
    to already be UTC; aware values in another zone are converted.

    Args:
        dt: datetime or None

    Returns:
        UTC datetime or None
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC_TIMEZONE)
    return dt.astimezone(UTC_TIMEZONE)
