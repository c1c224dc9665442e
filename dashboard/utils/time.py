"""Clock helpers shared by services that reason about expiry."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def epoch_seconds(value: datetime) -> int:
    """Whole seconds since the Unix epoch, truncated."""
    return int(ensure_utc(value).timestamp())


__all__ = ["Clock", "ensure_utc", "epoch_seconds", "utcnow"]
