"""Time helpers with timezone-aware UTC defaults."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta


def utc_now() -> datetime:
    """Return timezone-aware current UTC datetime."""
    return datetime.now(UTC)


def utc_now_naive() -> datetime:
    """Current UTC time without tzinfo, the form stored in timestamp columns."""
    return utc_now().replace(tzinfo=None)


def to_naive_utc(value: datetime | None) -> datetime | None:
    """Convert an aware datetime to naive UTC; naive values are assumed UTC already."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)


def advance_timestamp(previous: datetime | None) -> datetime:
    """Return now, nudged past ``previous`` so update stamps always move forward."""
    now = utc_now_naive()
    if previous is not None and now <= previous:
        return previous + timedelta(microseconds=1)
    return now
