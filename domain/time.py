"""
Domain time utilities (pure).

All persisted timestamps in the marketplace are UTC. Entities validate their
timestamps with `require_utc_timestamp`; inbound values from the API boundary
are normalized with `as_utc` before they reach an entity.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional


def require_utc_timestamp(name: str, value: datetime) -> None:
    """
    Enforce that a timestamp is timezone-aware with UTC offset 0.

    Raises ValueError naming the offending field otherwise.
    """

    if value.tzinfo is None or value.utcoffset() is None:
        raise ValueError(f"{name} must be timezone-aware (UTC)")
    if value.utcoffset() != timedelta(0):
        raise ValueError(f"{name} must be a UTC timestamp (offset 0)")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> datetime:
    """
    Normalize an inbound timestamp to UTC.

    - None means "now".
    - Naive datetimes are taken to already be in UTC.
    - Aware datetimes in another offset are converted.
    """

    if value is None:
        return utc_now()
    if value.tzinfo is None or value.utcoffset() is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
