"""
Formatting Utilities

Functions for formatting timestamps and durations for display in the
shop's local time zone.
"""

import logging
import pytz
from datetime import date, datetime
from typing import Optional, Union

from config import Config
from core.calculations.durations import parse_timestamp

logger = logging.getLogger(__name__)


def to_local(timestamp: Union[str, datetime, None], timezone: Optional[str] = None) -> Optional[datetime]:
    """
    Convert a timestamp to the display time zone.

    Args:
        timestamp: ISO timestamp string, datetime object, or None
        timezone: Time zone name (defaults to Config.TIMEZONE)

    Returns:
        Localized datetime or None if the input is empty or invalid
    """
    dt_obj = parse_timestamp(timestamp)
    if dt_obj is None:
        return None
    try:
        tz = pytz.timezone(timezone or Config.TIMEZONE)
    except pytz.UnknownTimeZoneError:
        logger.warning(f"Unknown timezone {timezone!r}, showing UTC")
        tz = pytz.UTC
    return dt_obj.astimezone(tz)


def format_timestamp(timestamp, timezone: Optional[str] = None) -> str:
    """
    Format a timestamp as YYYY-MM-DD HH:MM:SS in the display time zone.

    Returns:
        Formatted timestamp string or empty string if invalid
    """
    local = to_local(timestamp, timezone)
    return local.strftime("%Y-%m-%d %H:%M:%S") if local else ""


def format_clock(timestamp, timezone: Optional[str] = None) -> str:
    """Format a timestamp as HH:MM in the display time zone, '' if invalid."""
    local = to_local(timestamp, timezone)
    return local.strftime("%H:%M") if local else ""


def format_hours(minutes: float) -> str:
    """Format a minute total as hours with two decimals, e.g. '7.25 h'."""
    return f"{minutes / 60.0:.2f} h"


def format_minutes(minutes: Optional[float]) -> str:
    """Format minutes as '42m'; '-' for missing or zero values."""
    if not minutes:
        return "-"
    return f"{minutes:.0f}m"


def format_day(day: Optional[date]) -> str:
    """Format a date as DD/MM/YYYY, '' if missing."""
    return day.strftime("%d/%m/%Y") if day else ""
