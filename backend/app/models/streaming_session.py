"""Live streaming session table (one active row per booking)."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, String, text
from sqlalchemy.orm import relationship
import ulid

from ..database import Base


class SessionEndReason(str, Enum):
    """Why a live session stopped."""

    TIMEOUT = "timeout"
    INFLUENCER_ENDED = "influencer_ended"
    CANCELLED = "cancelled"


class StreamingSession(Base):
    """
    Authorization window of a live session materialized from an approved booking.

    ``ends_at`` is authoritative: any client reconstructs the countdown from it.
    The partial unique index guarantees at most one active session per booking.
    """

    __tablename__ = "streaming_sessions"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    booking_id = Column(
        String(26),
        ForeignKey("streaming_bookings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    influencer_id = Column(String(26), ForeignKey("profiles.id"), nullable=False)
    subscriber_id = Column(String(26), ForeignKey("profiles.id"), nullable=False)
    session_token = Column(String(100), nullable=False, unique=True)

    ends_at = Column(DateTime(timezone=True), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    ended_at = Column(DateTime(timezone=True), nullable=True)
    end_reason = Column(String(30), nullable=True)

    created_at = Column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    booking = relationship("StreamingBooking", back_populates="sessions")

    __table_args__ = (
        Index(
            "uq_streaming_sessions_active_booking",
            "booking_id",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active = 1"),
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<StreamingSession {self.id} booking={self.booking_id} "
            f"active={self.is_active} ends_at={self.ends_at}>"
        )
