"""
Streaming Session Repository for the HubContent platform.

Owns the at-most-one-active-session-per-booking guard: inserts race on the
partial unique index and finalization is a conditional update on
``is_active``.
"""

from datetime import datetime
import logging
from typing import List, Optional, Tuple, cast

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..models.streaming_session import SessionEndReason, StreamingSession
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class StreamingSessionRepository(BaseRepository[StreamingSession]):
    """Repository for live streaming session data access."""

    def __init__(self, db: Session):
        super().__init__(db, StreamingSession)
        self.logger = logging.getLogger(__name__)

    def get_active_for_booking(self, booking_id: str) -> Optional[StreamingSession]:
        """The active session for a booking, freshly read, or None."""
        query = (
            self.db.query(StreamingSession)
            .populate_existing()
            .filter(
                StreamingSession.booking_id == booking_id,
                StreamingSession.is_active.is_(True),
            )
        )
        result = self._execute_query(query.limit(1))
        return result[0] if result else None

    def create_active(
        self,
        booking_id: str,
        influencer_id: str,
        subscriber_id: str,
        session_token: str,
        ends_at: datetime,
        created_at: datetime,
    ) -> Tuple[Optional[StreamingSession], bool]:
        """
        Insert an active session unless one already exists.

        Returns ``(session, True)`` when our insert won. When a concurrent
        insert won the partial unique index, the savepoint is rolled back and
        the winner's row is returned as ``(winner, False)``; ``(None, False)``
        means the winner could not be re-read.
        """
        try:
            with self.savepoint():
                created = self.create(
                    booking_id=booking_id,
                    influencer_id=influencer_id,
                    subscriber_id=subscriber_id,
                    session_token=session_token,
                    ends_at=ends_at,
                    is_active=True,
                    created_at=created_at,
                )
            return cast(StreamingSession, created), True
        except IntegrityError:
            self.logger.info(f"Session insert for booking {booking_id} lost a race, re-reading")
            return self.get_active_for_booking(booking_id), False

    def finalize(self, session_id: str, reason: SessionEndReason, ended_at: datetime) -> bool:
        """
        Deactivate a session if it is still active.

        Returns True only for the caller that actually ended it; redundant
        calls return False and change nothing.
        """
        return self.update_where(
            session_id,
            {"is_active": True},
            is_active=False,
            ended_at=ended_at,
            end_reason=reason.value,
        )

    def list_overdue(self, now: datetime) -> List[StreamingSession]:
        """Active sessions whose end time has passed."""
        query = self.db.query(StreamingSession).filter(
            StreamingSession.is_active.is_(True),
            StreamingSession.ends_at <= now,
        )
        return self._execute_query(query)
