# backend/app/models/booking.py
"""
Streaming booking model for the HubContent platform.

A booking is a subscriber's request for a paid, time-boxed, one-to-one live
session with an influencer. The schedule is stored as a wall-clock date and
time in the booking timezone plus a duration; the commercial snapshot
(price and influencer earnings) is fixed at creation time.

Status lifecycle:
    pending -> approved | rejected
    approved -> cancelled | completed
rejected, cancelled and completed are terminal.
"""

from datetime import datetime, timezone
from enum import Enum
import logging
from typing import Any

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Time,
)
from sqlalchemy.orm import relationship
import ulid

from ..core.timezone_utils import combine_local
from ..database import Base

logger = logging.getLogger(__name__)


class BookingStatus(str, Enum):
    """Booking lifecycle statuses."""

    PENDING = "pending"  # Awaiting influencer decision
    APPROVED = "approved"  # Scheduled
    REJECTED = "rejected"
    CANCELLED = "cancelled"  # Cancelled by the influencer after approval
    COMPLETED = "completed"  # Session ended


TERMINAL_BOOKING_STATUSES = frozenset(
    {BookingStatus.REJECTED.value, BookingStatus.CANCELLED.value, BookingStatus.COMPLETED.value}
)


class StreamingBooking(Base):
    """
    Booking of a private live session between a subscriber and an influencer.

    Rows are mutated only through the guarded transitions in BookingService;
    every status change is a conditional update on the expected status.
    """

    __tablename__ = "streaming_bookings"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))

    subscriber_id = Column(String(26), ForeignKey("profiles.id"), nullable=False, index=True)
    influencer_id = Column(String(26), ForeignKey("profiles.id"), nullable=False, index=True)

    # Schedule (wall-clock in the booking timezone)
    scheduled_date = Column(Date, nullable=False, index=True)
    scheduled_time = Column(Time, nullable=False)
    duration_minutes = Column(Integer, nullable=False)

    # Commercial snapshot
    price_paid = Column(Numeric(10, 2), nullable=False)
    influencer_earnings = Column(Numeric(10, 2), nullable=False)

    status = Column(String(20), nullable=False, default=BookingStatus.PENDING.value, index=True)
    rejection_reason = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    # Set when the influencer opens the live window
    live_started_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )
    updated_at = Column(DateTime(timezone=True), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    subscriber = relationship("Profile", foreign_keys=[subscriber_id])
    influencer = relationship("Profile", foreign_keys=[influencer_id])
    sessions = relationship(
        "StreamingSession", back_populates="booking", order_by="StreamingSession.created_at"
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected', 'cancelled', 'completed')",
            name="ck_streaming_bookings_status",
        ),
        CheckConstraint("subscriber_id <> influencer_id", name="ck_streaming_bookings_no_self"),
        CheckConstraint("duration_minutes > 0", name="ck_streaming_bookings_duration_positive"),
        CheckConstraint("price_paid >= 0", name="ck_streaming_bookings_price_non_negative"),
        Index("idx_streaming_bookings_influencer_date", "influencer_id", "scheduled_date"),
    )

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        if not self.status:
            self.status = BookingStatus.PENDING.value

    def __repr__(self) -> str:
        return (
            f"<StreamingBooking {self.id}: subscriber={self.subscriber_id}, "
            f"influencer={self.influencer_id}, at={self.scheduled_date} {self.scheduled_time}, "
            f"duration={self.duration_minutes}, status={self.status}>"
        )

    @property
    def scheduled_at(self) -> datetime:
        """Scheduled start as an aware UTC instant."""
        return combine_local(self.scheduled_date, self.scheduled_time)

    def is_participant(self, profile_id: str) -> bool:
        return profile_id in (self.subscriber_id, self.influencer_id)
