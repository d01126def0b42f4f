"""
Time helpers and the entry lock rule.

The lock is never stored as a flag: it is a pure function of the stored
`locked_until` timestamp and the time of the read.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive timestamps (SQLite drops the offset on read)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def is_locked(locked_until: Optional[datetime], now: Optional[datetime] = None) -> bool:
    if locked_until is None:
        return False
    return as_utc(locked_until) > as_utc(now or utcnow())
