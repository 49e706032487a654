"""
CryptoPulse — Common Utility Functions
"""
from datetime import datetime, timezone
from typing import Any

from pydantic import TypeAdapter, ValidationError

_datetime_adapter = TypeAdapter(datetime)


def utc_now() -> datetime:
    """Return current UTC datetime."""
    return datetime.now(timezone.utc)


def utc_timestamp() -> str:
    """Return current UTC timestamp as ISO string."""
    return utc_now().isoformat()


def _year_start(year: int) -> datetime:
    if not 1 <= year <= 9999:
        return utc_now()
    return datetime(year, 1, 1, tzinfo=timezone.utc)


def coerce_timestamp(value: Any) -> datetime:
    """
    Parse a model-supplied timestamp into an aware datetime.
    Anything unparsable (None, garbage strings, hallucinated dates) becomes now.
    Naive values are taken as UTC. An all-digit string is a calendar year
    ("2025" is 2025-01-01T00:00Z), never epoch seconds.
    """
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return utc_now()
        if value.isascii() and value.isdigit():
            return _year_start(int(value))
    if value is None or isinstance(value, bool):
        return utc_now()
    try:
        parsed = _datetime_adapter.validate_python(value)
    except (ValidationError, ValueError, TypeError):
        return utc_now()
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def clamp(value: float, min_val: float = 0.0, max_val: float = 100.0) -> float:
    """Clamp a value between min and max."""
    return max(min_val, min(max_val, value))


def truncate(text: str, max_length: int, suffix: str = "...") -> str:
    """Cut text to max_length characters and append suffix when it was longer."""
    if len(text) <= max_length:
        return text
    return text[:max_length] + suffix


def mask_secret(value: str, visible: int = 4) -> str:
    """Mask a credential for display, keeping the last few characters."""
    if not value:
        return ""
    if len(value) <= visible:
        return "*" * len(value)
    return "*" * (len(value) - visible) + value[-visible:]
