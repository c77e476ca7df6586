"""Timestamp utilities for GEOConvergence.

All engine timestamps are timezone-aware UTC. Route snapshot timestamps
through parse_timestamp() and emit them through to_iso().
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from dateutil import parser as dateutil_parser


def utc_now() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Attach UTC to naive datetimes and convert aware ones to UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_iso(dt: datetime) -> str:
    """Format a datetime as ISO 8601 UTC with millisecond precision and a Z suffix.

    Example: ``2024-01-15T12:00:00.000Z``
    """
    return ensure_utc(dt).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def epoch_millis(dt: datetime) -> int:
    """Milliseconds since the Unix epoch."""
    return int(ensure_utc(dt).timestamp() * 1000)


def parse_timestamp(raw: Any) -> Optional[datetime]:
    """Parse a snapshot timestamp into an aware UTC datetime.

    Accepts datetimes, epoch seconds/milliseconds and any string dateutil
    understands. Returns None when the value cannot be interpreted.
    """
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        return ensure_utc(raw)
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        # Heuristic: values beyond year 2286 in seconds are milliseconds
        seconds = raw / 1000.0 if raw > 1e10 else float(raw)
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(raw, str):
        try:
            return ensure_utc(dateutil_parser.parse(raw.strip()))
        except (ValueError, OverflowError):
            return None
    return None
