"""Live streaming session schemas."""

from datetime import datetime
from typing import Literal, Optional

from .base import StandardizedModel


class StreamingSessionResponse(StandardizedModel):
    id: str
    booking_id: str
    influencer_id: str
    subscriber_id: str
    session_token: str
    ends_at: datetime
    is_active: bool
    ended_at: Optional[datetime] = None
    end_reason: Optional[str] = None
    created_at: datetime


class SessionJoinResponse(StandardizedModel):
    """Outcome of asking for a booking's session.

    ``waiting`` means the influencer has not opened the session yet; the
    subscriber should poll again.
    """

    status: Literal["active", "waiting"]
    session: Optional[StreamingSessionResponse] = None
    remaining_seconds: Optional[int] = None


class SessionTickResponse(StandardizedModel):
    session_id: str
    is_active: bool
    remaining_seconds: int
    ended: bool
    end_reason: Optional[str] = None


class SessionStatusResponse(StandardizedModel):
    booking_id: str
    booking_status: str
    has_active_session: bool
    session: Optional[StreamingSessionResponse] = None
    remaining_seconds: int = 0
