"""
Value Coercion

Scalar and timestamp coercion shared by the record normalizer and the
in-memory document store. Nothing here raises on bad input.

Version: 1.0.0
"""

import math
from datetime import datetime, timezone
from typing import Any, Mapping, Optional


def is_number(value: Any) -> bool:
    """True for ints and finite floats; bools are not numbers."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and math.isfinite(value)


def finite_float(value: Any) -> Optional[float]:
    """``value`` as a finite float, or None (ints too large for a float included)."""
    if not is_number(value):
        return None
    try:
        number = float(value)
    except OverflowError:
        return None
    return number if math.isfinite(number) else None


def coerce_timestamp(value: Any) -> Optional[datetime]:
    """
    Coerce a store-native or plain date-like value to an aware UTC datetime.

    Accepts datetimes (including Firestore's DatetimeWithNanoseconds),
    objects exposing ``to_datetime()`` or ``ToDatetime()``, mappings with
    ``seconds``/``nanoseconds`` (or their ``_``-prefixed serialized form),
    ISO-8601 strings and epoch milliseconds. Anything else yields None.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        instant = value
    elif hasattr(value, "to_datetime"):
        try:
            instant = value.to_datetime()
        except (TypeError, ValueError, OverflowError):
            return None
    elif hasattr(value, "ToDatetime"):
        try:
            instant = value.ToDatetime()
        except (TypeError, ValueError, OverflowError):
            return None
    elif isinstance(value, Mapping):
        seconds = finite_float(value.get("seconds", value.get("_seconds")))
        nanos = finite_float(value.get("nanoseconds", value.get("_nanoseconds", 0))) or 0.0
        if seconds is None:
            return None
        try:
            instant = datetime.fromtimestamp(seconds + nanos / 1e9, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif is_number(value):
        millis = finite_float(value)
        if millis is None:
            return None
        try:
            instant = datetime.fromtimestamp(millis / 1000.0, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            instant = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if not isinstance(instant, datetime):
        return None
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    try:
        return instant.astimezone(timezone.utc)
    except (OverflowError, ValueError):
        return None
