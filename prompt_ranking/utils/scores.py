"""
Score helpers — normalization, decay, and time utilities used by every stage.
"""

import logging
import math
from datetime import datetime, timezone
from typing import Any, Optional

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 60 * 60 * 24


def normalize_by_max(value: float, maximum: float) -> float:
    """
    value / maximum clamped to [0, 1].

    A non-positive maximum is treated as denominator 1; non-finite input scores 0.
    """
    try:
        value = float(value)
        maximum = float(maximum)
    except (TypeError, ValueError, OverflowError):
        return 0.0
    if not math.isfinite(value):
        return 0.0
    denominator = maximum if math.isfinite(maximum) and maximum > 0 else 1.0
    return min(1.0, max(0.0, value / denominator))


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(dt: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse a datetime or ISO string (``Z`` suffix allowed). Returns None when unusable."""
    if isinstance(value, datetime):
        return as_utc(value)
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return as_utc(datetime.fromisoformat(value.strip().replace("Z", "+00:00")))
    except ValueError:
        logger.debug("[scores] TIMESTAMP_UNPARSEABLE value=%r", value)
        return None


def age_in_days(value: Any, now: datetime) -> Optional[float]:
    """Days elapsed since value (never negative), or None if value is not a timestamp."""
    ts = parse_timestamp(value)
    if ts is None:
        return None
    delta = (as_utc(now) - ts).total_seconds() / SECONDS_PER_DAY
    return max(0.0, delta)


def exponential_decay(age: float, half_life: float) -> float:
    """exp(-age * ln2 / half_life): 1.0 at age 0, 0.5 at one half-life."""
    if half_life <= 0:
        return 0.0
    return math.exp(-max(0.0, age) * math.log(2) / half_life)
