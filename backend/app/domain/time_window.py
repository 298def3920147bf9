"""Time-window rules for live streaming bookings.

Shared by the booking and session services and by the schemas that expose
join flags. All comparisons use aware datetimes; boundaries are inclusive.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
import math
from typing import Optional

from app.core.config import settings
from app.core.timezone_utils import combine_local


def scheduled_instant(day: date, at: time, tz_name: Optional[str] = None) -> datetime:
    """Combine a booking's wall-clock date and time into an aware UTC instant."""
    return combine_local(day, at, tz_name)


def _minutes_until(scheduled: datetime, now: datetime) -> float:
    return (scheduled - now).total_seconds() / 60


def can_create_booking(scheduled: datetime, now: datetime) -> bool:
    """A booking needs at least the configured lead time before its start."""
    return _minutes_until(scheduled, now) >= settings.booking_min_lead_minutes


def can_influencer_join(scheduled: datetime, now: datetime) -> bool:
    """The influencer may open the session from a few minutes early until a late cutoff."""
    minutes = _minutes_until(scheduled, now)
    return (
        minutes <= settings.influencer_early_join_minutes
        and minutes >= -settings.influencer_late_join_minutes
    )


def can_subscriber_join(scheduled: datetime, duration_minutes: int, now: datetime) -> bool:
    """The subscriber may join from a few minutes early until the booked duration has elapsed."""
    minutes = _minutes_until(scheduled, now)
    return minutes <= settings.subscriber_early_join_minutes and -minutes <= duration_minutes


def session_ends_at(created_at: datetime, duration_minutes: int) -> datetime:
    return created_at + timedelta(minutes=duration_minutes)


def remaining_seconds(ends_at: datetime, now: datetime) -> int:
    """Whole seconds left before ``ends_at``, never negative."""
    return max(0, math.floor((ends_at - now).total_seconds()))


def influencer_join_window(scheduled: datetime) -> tuple[datetime, datetime]:
    return (
        scheduled - timedelta(minutes=settings.influencer_early_join_minutes),
        scheduled + timedelta(minutes=settings.influencer_late_join_minutes),
    )


def subscriber_join_window(scheduled: datetime, duration_minutes: int) -> tuple[datetime, datetime]:
    return (
        scheduled - timedelta(minutes=settings.subscriber_early_join_minutes),
        scheduled + timedelta(minutes=duration_minutes),
    )
