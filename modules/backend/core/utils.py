"""
Core Utilities.

Shared utility functions used across the backend.
All modules should import utilities from this module.
"""

import json
from datetime import datetime, timezone
from typing import Any


def utc_now() -> datetime:
    """
    Return current UTC time as timezone-naive datetime.

    All datetime values in the application should be timezone-naive
    and assumed to be UTC. This ensures consistent behavior across
    the codebase and simplifies database storage.

    Returns:
        Current UTC time with tzinfo stripped
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def timestamp_ms() -> int:
    """Milliseconds since the epoch, used to make CDN object names unique."""
    return int(datetime.now(timezone.utc).timestamp() * 1000)


def blank_to_none(value: Any) -> Any:
    """
    Normalize form values that mean "no value".

    Empty strings and the literal "none" (sent by select inputs) become None;
    other values are returned unchanged.
    """
    if isinstance(value, str) and value.strip().lower() in ("", "none", "null"):
        return None
    return value


def dumps_json(value: Any) -> str | None:
    """Serialize a value for a JSON text column; empty collections become None."""
    if value is None or (isinstance(value, (list, dict)) and not value):
        return None
    return json.dumps(value, ensure_ascii=False, default=str)


def loads_json(text: str | None, default: Any = None) -> Any:
    """Parse a JSON text column, returning `default` when empty or malformed."""
    if not text:
        return default
    try:
        return json.loads(text)
    except (TypeError, ValueError):
        return default


def naive_utc(value: datetime | None) -> datetime | None:
    """Convert an aware datetime to naive UTC; naive values are assumed UTC already."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
