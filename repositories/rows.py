"""
Row conversion helpers shared by the repository modules.

Supabase returns timestamps as ISO-8601 strings (sometimes with a trailing
'Z') and numeric columns as strings or floats; these helpers turn them into
the UTC datetimes and Decimals the domain entities expect.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Mapping, Optional
from uuid import UUID

from domain.time import require_utc_timestamp

UNIQUE_VIOLATION = "23505"


def to_iso_utc(dt: datetime, *, name: str) -> str:
    """Serialize a UTC datetime to ISO-8601 (timezone-aware, offset 0)."""

    require_utc_timestamp(name, dt)
    return dt.astimezone(timezone.utc).isoformat()


def parse_utc_datetime(value: Any) -> datetime:
    """Parse a Supabase timestamp into a timezone-aware UTC datetime."""

    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    else:
        raise TypeError(f"Unsupported timestamp type: {type(value)!r}")

    if dt.tzinfo is None or dt.utcoffset() is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def optional_utc(row: Mapping[str, Any], column: str) -> Optional[datetime]:
    value = row.get(column)
    return parse_utc_datetime(value) if value else None


def optional_uuid(row: Mapping[str, Any], column: str) -> Optional[UUID]:
    value = row.get(column)
    return UUID(str(value)) if value else None


def to_decimal(value: Any) -> Decimal:
    # str() first so floats from JSON don't carry binary noise into Decimal
    return Decimal(str(value)).quantize(Decimal("0.01"))


def is_unique_violation(error: Any) -> bool:
    """True when a PostgREST error (or APIError) reports a unique-index violation."""

    return str(getattr(error, "code", "")) == UNIQUE_VIOLATION
