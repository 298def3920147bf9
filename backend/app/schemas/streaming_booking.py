# backend/app/schemas/streaming_booking.py
"""
Streaming booking schemas for the HubContent platform.

A booking carries its own schedule (wall-clock date and time in the booking
timezone plus a duration) and the commercial snapshot fixed at creation.
"""

from datetime import date, datetime, time
from typing import Dict, Optional

from pydantic import Field, field_validator

from ..core.constants import MAX_NOTES_LENGTH, MAX_REASON_LENGTH
from .base import Money, StandardizedModel, StrictRequestModel


class BookingCreate(StrictRequestModel):
    """Subscriber request for a private live session."""

    influencer_id: str = Field(..., description="Influencer to book")
    scheduled_date: date = Field(..., description="Date of the session (booking timezone)")
    scheduled_time: time = Field(..., description="Start time (booking timezone)")
    duration_minutes: int = Field(..., description="Session length in minutes")
    notes: Optional[str] = Field(None, max_length=MAX_NOTES_LENGTH)

    @field_validator("notes")
    @classmethod
    def _blank_notes_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            return None
        return value


class BookingReasonRequest(StrictRequestModel):
    """Reason attached to a rejection or cancellation."""

    reason: str = Field("", max_length=MAX_REASON_LENGTH)


class BookingResponse(StandardizedModel):
    id: str
    subscriber_id: str
    influencer_id: str
    scheduled_date: date
    scheduled_time: time
    duration_minutes: int
    price_paid: Money
    influencer_earnings: Money
    status: str
    rejection_reason: Optional[str] = None
    notes: Optional[str] = None
    live_started_at: Optional[datetime] = None
    created_at: datetime
    approved_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None


class BookingViewResponse(StandardizedModel):
    """A booking plus the join flags derived for the current instant."""

    booking: BookingResponse
    scheduled_at: datetime
    can_influencer_join: bool
    can_subscriber_join: bool
    time_until_start_seconds: int


class EarningsSummaryResponse(StandardizedModel):
    total_earnings: Money
    completed_count: int
    pending_count: int
    approved_count: int
    status_counts: Dict[str, int]
