import math
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping, Optional
from util.constants import EPOCH_MS_THRESHOLD


def as_count(value: Any) -> int:
    """
    - Coerce a backend count cell to a non-negative int.
    - Anything non-numeric (None, "", "abc", nan) counts as 0.
    """
    if isinstance(value, bool):
        return int(value)
    try:
        n = float(value)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(n) or n < 0:
        return 0
    return int(n)


def pick(row: Mapping[str, Any], keys: Iterable[str], default: Any = None) -> Any:
    """First non-None value among `keys`, else `default`."""
    for key in keys:
        v = row.get(key)
        if v is not None:
            return v
    return default


def parse_timestamp(value: Any) -> Optional[float]:
    """
    - ISO-8601 strings (trailing 'Z' accepted), epoch seconds or epoch millis.
    - Returns POSIX seconds, or None when the value can't be read as a date.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        n = float(value)
        if not math.isfinite(n):
            return None
        return n / 1000.0 if abs(n) > EPOCH_MS_THRESHOLD else n
    text = str(value).strip()
    if not text:
        return None
    try:
        return parse_timestamp(float(text))
    except ValueError:
        pass
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.timestamp()


def contains_ci(haystack: Any, needle: Optional[str]) -> bool:
    if not needle:
        return True
    if haystack is None:
        return False
    return needle.strip().lower() in str(haystack).lower()
