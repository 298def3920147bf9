"""
Timezone utilities for the HubContent platform.

Scheduled bookings are stored as a wall-clock date and time; these helpers
anchor them to the configured booking timezone and normalise the naive
datetimes some dialects (SQLite) hand back.
"""

from datetime import date, datetime, time, timezone
from typing import Optional

import pytz

from .config import settings


def get_booking_timezone(name: Optional[str] = None) -> pytz.BaseTzInfo:
    """
    Get the timezone used to interpret scheduled booking times.

    Args:
        name: Optional IANA zone name overriding the configured one

    Returns:
        pytz timezone object
    """
    return pytz.timezone(name or settings.booking_timezone)


def combine_local(day: date, at: time, tz_name: Optional[str] = None) -> datetime:
    """Combine a wall-clock date/time in the booking timezone into an aware UTC datetime."""
    tz = get_booking_timezone(tz_name)
    local = tz.localize(datetime.combine(day, at.replace(tzinfo=None)))
    return local.astimezone(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Return ``value`` as an aware UTC datetime.

    Naive values are assumed to already be UTC (SQLite drops tzinfo on read).
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
