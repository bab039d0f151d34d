"""
Time and Duration Utilities

Pure helpers shared by the timeline, machine board and progress calculations:
timestamp parsing, elapsed minutes, elapsed-time formatting and
percentage-of-target.
"""

import logging
import math
from datetime import datetime
from typing import Optional, Union

import pytz
from dateutil import parser as dateutil_parser

logger = logging.getLogger(__name__)


def now_utc() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(pytz.UTC)


def parse_timestamp(value: Union[str, datetime, None]) -> Optional[datetime]:
    """
    Parse an API timestamp into a timezone-aware datetime.

    Naive values are assumed to be UTC. Empty or unparseable values return
    None instead of raising, so a bad field never breaks a whole refresh.

    Args:
        value: ISO 8601 string, datetime object, or None

    Returns:
        Timezone-aware datetime or None
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        dt_obj = value
    else:
        try:
            dt_obj = dateutil_parser.isoparse(str(value))
        except (ValueError, TypeError, OverflowError):
            logger.warning(f"Unparseable timestamp ignored: {value!r}")
            return None

    if dt_obj.tzinfo is None:
        dt_obj = pytz.UTC.localize(dt_obj)
    return dt_obj


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer with halves going up (0.5 -> 1, 2.5 -> 3).

    Python's built-in round() uses banker's rounding, which would make
    percentages and minute totals disagree with the dashboard's published
    numbers on exact halves.
    """
    return int(math.floor(value + 0.5))


def diff_minutes(start: datetime, end: datetime) -> float:
    """Minutes between two instants, never negative."""
    return max(0.0, (end - start).total_seconds() / 60.0)


def minutes_since(timestamp: Optional[datetime], now: Optional[datetime] = None) -> int:
    """
    Whole minutes elapsed since timestamp (floored), 0 if there is no timestamp.

    Args:
        timestamp: Start instant, or None
        now: Reference instant (defaults to current UTC time)

    Returns:
        Elapsed whole minutes, never negative
    """
    if timestamp is None:
        return 0
    now = now or now_utc()
    return int(math.floor(diff_minutes(timestamp, now)))


def format_elapsed(minutes: int) -> str:
    """Format elapsed minutes as '45 min' or '2h 5m'."""
    minutes = max(0, int(minutes))
    hours, mins = divmod(minutes, 60)
    if hours <= 0:
        return f"{mins} min"
    return f"{hours}h {mins}m"


def percent_of_target(value: float, target: Optional[float]) -> int:
    """
    Percentage of value against target, clamped to 100.

    Returns 0 when target is missing or not positive.
    """
    if not target or target <= 0:
        return 0
    return min(100, round_half_up(value / target * 100))
