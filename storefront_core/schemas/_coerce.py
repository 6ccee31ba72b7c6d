"""
Lenient value coercion used by the boundary schemas.

Product and store rows arrive from an external backend with loosely typed
fields (numbers as strings, empty strings for "unset", nulls everywhere).
These helpers turn such values into safe defaults instead of raising, so a
single malformed field never takes the whole pricing or scheduling
computation down.
"""

import math
from datetime import datetime
from typing import Any, Optional


def to_float(value: Any, default: Optional[float] = 0.0) -> Optional[float]:
    """Convert to a finite float, returning ``default`` when impossible."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, str):
        value = value.strip().replace(",", ".")
        if not value:
            return default
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(result) or math.isinf(result):
        return default
    return result


def to_int(value: Any, default: Optional[int] = 0) -> Optional[int]:
    """Convert to an int (truncating floats), returning ``default`` when impossible."""
    result = to_float(value, default=None)
    if result is None:
        return default
    return int(result)


def to_bool(value: Any, default: bool) -> bool:
    """Interpret common truthy/falsy encodings, ``default`` for None or unknown."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes", "y", "t", "on"):
            return True
        if lowered in ("false", "0", "no", "n", "f", "off"):
            return False
    return default


def to_local_datetime(value: Any) -> Optional[datetime]:
    """
    Parse a timestamp into a naive local datetime.

    Timezone-aware values (e.g. "2024-05-01T03:00:00Z") are converted to the
    host's local time first so calendar-day comparisons happen in local time.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            moment = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if moment.tzinfo is not None:
        moment = moment.astimezone().replace(tzinfo=None)
    return moment


def to_optional_str(value: Any) -> Optional[str]:
    """Stringify identifiers and names; blank strings become None."""
    if value is None:
        return None
    if isinstance(value, str):
        return value if value.strip() else None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None
