from __future__ import annotations

from datetime import date, datetime, time, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def start_of_day(d: date) -> datetime:
    """Convert a date to start-of-day UTC datetime."""
    return datetime.combine(d, time.min, tzinfo=timezone.utc)


def end_of_day(d: date) -> datetime:
    """Last representable instant of *d* in UTC, for inclusive upper bounds."""
    return datetime.combine(d, time.max, tzinfo=timezone.utc)
