"""
Best-effort coercion helpers shared by the ledger and the snapshot loader.

Optional numeric/date input is never rejected here: anything unusable falls
back to a safe default (0, None or "now").
"""

import math
import uuid
from datetime import date, datetime, time, timezone
from typing import Any, Optional
from uuid import UUID

# Namespace for mapping non-UUID legacy ids to stable UUIDs.
LEGACY_ID_NAMESPACE = uuid.UUID("6f1c52a4-3b0e-4d7a-9a51-2c0f8e3d9b17")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        x = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(x):
        return None
    return x


def stock_count(value: Any) -> int:
    """Non-finite or negative -> 0, fractions floored."""
    x = _as_float(value)
    if x is None or x < 0:
        return 0
    return int(math.floor(x))


def positive_quantity(value: Any) -> int:
    """Floored quantity, or 0 when the request is unusable (caller rejects)."""
    x = _as_float(value)
    if x is None:
        return 0
    q = int(math.floor(x))
    return q if q > 0 else 0


def price(value: Any) -> Optional[float]:
    x = _as_float(value)
    if x is None or x < 0:
        return None
    return x


def optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    v = str(value).strip()
    return v or None


def required_text(value: Any) -> str:
    """Trimmed text; empty string when nothing usable was given."""
    if value is None:
        return ""
    return str(value).strip()


def timestamp(value: Any, default: Optional[datetime] = None) -> datetime:
    """
    Coerce to an aware UTC datetime.

    Accepts datetimes (naive ones are taken as UTC), dates, ISO strings
    (including a trailing "Z") and epoch milliseconds. Anything else returns
    `default` or the current time.
    """
    fallback = default or utcnow()
    if value is None or isinstance(value, bool):
        return fallback

    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime.combine(value, time.min)
    elif isinstance(value, (int, float)):
        try:
            if not math.isfinite(value):
                return fallback
            # JS Date.getTime() style epoch milliseconds
            dt = datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return fallback
    elif isinstance(value, str):
        s = value.strip()
        if not s:
            return fallback
        if s.endswith("Z") or s.endswith("z"):
            s = s[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(s)
        except ValueError:
            return fallback
    else:
        return fallback

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    try:
        return dt.astimezone(timezone.utc)
    except (OverflowError, ValueError):
        # offset pushes the instant past year 1 or 9999
        return fallback


def entity_id(value: Any) -> Optional[UUID]:
    """UUIDs pass through; other non-empty ids map to a stable uuid5."""
    if isinstance(value, UUID):
        return value
    raw = optional_text(value)
    if raw is None:
        return None
    try:
        return UUID(raw)
    except ValueError:
        return uuid.uuid5(LEGACY_ID_NAMESPACE, raw)
