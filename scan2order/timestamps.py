"""
Timestamp helpers.

The core only ever handles plain integer epoch milliseconds. Anything a
backend hands back (a ``datetime`` from SQLAlchemy, an ISO string from a JSON
file edited by hand, a ``{"seconds": ..., "nanoseconds": ...}`` record
exported from a document database) goes through ``to_epoch_ms`` once, at the
store boundary.

Bare numbers are epoch milliseconds, the unit this service writes. Callers
holding seconds say so with ``unit="s"``.
"""

import time
from datetime import datetime, timezone
from typing import Any, Optional

_UNIT_FACTORS = {"ms": 1, "s": 1000}


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def to_epoch_ms(value: Any, unit: str = "ms") -> Optional[int]:
    """
    Normalize a store-native timestamp to integer epoch milliseconds.

    Args:
        value: datetime, number, numeric or ISO-8601 string, or a mapping with
               ``seconds`` (and optional ``nanoseconds``) keys
        unit: unit of bare numbers and numeric strings, "ms" or "s"

    Naive datetimes are treated as UTC (SQLite drops the tzinfo on the way
    back). Returns None for None/empty input and raises ValueError for
    anything that cannot be read as a point in time.
    """
    if unit not in _UNIT_FACTORS:
        raise ValueError(f"Unknown timestamp unit: {unit!r}")
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValueError(f"Not a timestamp: {value!r}")
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return int(round(value.timestamp() * 1000))
    if isinstance(value, (int, float)):
        return int(round(value * _UNIT_FACTORS[unit]))
    if isinstance(value, dict):
        seconds = value.get("seconds", value.get("_seconds"))
        nanos = value.get("nanoseconds", value.get("_nanoseconds", 0))
        if not isinstance(seconds, (int, float)) or not isinstance(nanos, (int, float)):
            raise ValueError(f"Not a timestamp: {value!r}")
        return int(seconds) * 1000 + int(nanos) // 1_000_000
    if isinstance(value, str):
        text = value.strip()
        try:
            number = float(text)
        except ValueError:
            pass
        else:
            return to_epoch_ms(number, unit=unit)
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        return to_epoch_ms(datetime.fromisoformat(text))
    raise ValueError(f"Not a timestamp: {value!r}")


def from_epoch_ms(value: Optional[int]) -> Optional[datetime]:
    """Epoch milliseconds to an aware UTC datetime (for SQL columns)."""
    if value is None:
        return None
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


def local_year(epoch_ms: int) -> int:
    """Calendar year of the timestamp in the server's local time."""
    return datetime.fromtimestamp(epoch_ms / 1000).year
