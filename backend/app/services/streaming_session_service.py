"""StreamingSessionService: lifecycle of the live session behind a booking.

The influencer opens the session inside their join window; the subscriber
only ever attaches to a session the influencer opened. ``ends_at`` stored on
the session row is the single source of truth for the countdown, so any
client can rebuild it after a reload.

Finalization is idempotent: the session is deactivated with a conditional
update on ``is_active`` and the booking moves approved -> completed only if
it is still approved.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import logging
from typing import Literal, Optional

from sqlalchemy.orm import Session

from ..core.exceptions import (
    ForbiddenException,
    InvalidTransitionException,
    JoinWindowClosedException,
    NotFoundException,
    SessionAlreadyActiveException,
    ValidationException,
)
from ..core.timezone_utils import ensure_utc
from ..core.ulid_helper import generate_session_token
from ..domain import time_window
from ..models.booking import BookingStatus, StreamingBooking
from ..models.streaming_session import SessionEndReason, StreamingSession
from ..principal import ActorContext
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)

CREATE_ATTEMPTS = 2


@dataclass(frozen=True)
class SessionJoinResult:
    """Result of ``ensure_session``; ``waiting`` is not an error."""

    status: Literal["active", "waiting"]
    session: Optional[StreamingSession] = None
    remaining_seconds: Optional[int] = None


@dataclass(frozen=True)
class SessionTick:
    session_id: str
    is_active: bool
    remaining_seconds: int
    ended: bool
    end_reason: Optional[str] = None


@dataclass(frozen=True)
class SessionStatus:
    booking_id: str
    booking_status: str
    has_active_session: bool
    session: Optional[StreamingSession]
    remaining_seconds: int


class StreamingSessionService(BaseService):
    """Service layer for live streaming sessions."""

    def __init__(self, db: Session) -> None:
        super().__init__(db)
        self.session_repository = RepositoryFactory.create_streaming_session_repository(db)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)
        self.payment_repository = RepositoryFactory.create_payment_repository(db)

    def _get_booking(self, booking_id: str) -> StreamingBooking:
        booking = self.booking_repository.get_fresh(booking_id)
        if booking is None:
            raise NotFoundException("Booking not found")
        return booking

    def _get_session(self, session_id: str) -> StreamingSession:
        session = self.session_repository.get_fresh(session_id)
        if session is None:
            raise NotFoundException("Session not found")
        return session

    def _remaining(self, session: StreamingSession, now: datetime) -> int:
        if not session.is_active:
            return 0
        return time_window.remaining_seconds(ensure_utc(session.ends_at), now)

    # ------------------------------------------------------------------
    # Opening / joining
    # ------------------------------------------------------------------

    @BaseService.measure_operation("ensure_session")
    def ensure_session(self, actor: ActorContext, booking_id: str) -> SessionJoinResult:
        """
        Return the booking's active session, opening it for the influencer.

        Subscriber: the active session, or ``waiting`` when the influencer
        has not opened it yet. Influencer: the existing active session or a
        newly created one (idempotent).

        Raises:
            ForbiddenException: Actor is not a participant of the booking
            ValidationException: Booking is not approved
            JoinWindowClosedException: Outside the actor's join window
            SessionAlreadyActiveException: A concurrent create could not be
                resolved to the winner's row
        """
        booking = self._get_booking(booking_id)
        now = datetime.now(timezone.utc)

        if actor.id == booking.subscriber_id:
            return self._attach_subscriber(booking, now)
        if actor.id == booking.influencer_id:
            return self._open_for_influencer(booking, now)
        raise ForbiddenException("You are not a participant of this booking")

    def _attach_subscriber(self, booking: StreamingBooking, now: datetime) -> SessionJoinResult:
        if booking.status != BookingStatus.APPROVED.value:
            raise ValidationException(
                "This booking is not scheduled to go live",
                code="BOOKING_NOT_APPROVED",
                details={"status": booking.status},
            )
        scheduled = booking.scheduled_at
        if not time_window.can_subscriber_join(scheduled, booking.duration_minutes, now):
            opens_at, closes_at = time_window.subscriber_join_window(
                scheduled, booking.duration_minutes
            )
            raise JoinWindowClosedException(booking.id, opens_at.isoformat(), closes_at.isoformat())

        active = self.session_repository.get_active_for_booking(booking.id)
        if active is None:
            return SessionJoinResult(status="waiting")
        return SessionJoinResult(
            status="active", session=active, remaining_seconds=self._remaining(active, now)
        )

    def _open_for_influencer(self, booking: StreamingBooking, now: datetime) -> SessionJoinResult:
        if booking.status != BookingStatus.APPROVED.value:
            raise ValidationException(
                "Only approved bookings can go live",
                code="BOOKING_NOT_APPROVED",
                details={"status": booking.status},
            )
        # A reload rejoins the running session even after the opening window closed
        existing = self.session_repository.get_active_for_booking(booking.id)
        if existing is not None:
            return SessionJoinResult(
                status="active", session=existing, remaining_seconds=self._remaining(existing, now)
            )

        scheduled = booking.scheduled_at
        if not time_window.can_influencer_join(scheduled, now):
            opens_at, closes_at = time_window.influencer_join_window(scheduled)
            raise JoinWindowClosedException(booking.id, opens_at.isoformat(), closes_at.isoformat())

        for attempt in range(CREATE_ATTEMPTS):
            if attempt:
                existing = self.session_repository.get_active_for_booking(booking.id)
                if existing is not None:
                    return SessionJoinResult(
                        status="active", session=existing, remaining_seconds=self._remaining(existing, now)
                    )

            with self.transaction():
                session, created = self.session_repository.create_active(
                    booking_id=booking.id,
                    influencer_id=booking.influencer_id,
                    subscriber_id=booking.subscriber_id,
                    session_token=generate_session_token(),
                    ends_at=time_window.session_ends_at(now, booking.duration_minutes),
                    created_at=now,
                )
                if created:
                    current = self.booking_repository.get_fresh(booking.id)
                    if current is None or current.status != BookingStatus.APPROVED.value:
                        # Cancelled while we were opening; the rollback drops our session
                        raise ValidationException(
                            "Only approved bookings can go live",
                            code="BOOKING_NOT_APPROVED",
                            details={"status": current.status if current else None},
                        )
                    self.booking_repository.update_where(
                        booking.id, {"live_started_at": None}, live_started_at=now, updated_at=now
                    )

            if session is not None:
                if created:
                    self.logger.info(
                        f"Opened session {session.id} for booking {booking.id} until {session.ends_at}"
                    )
                return SessionJoinResult(
                    status="active", session=session, remaining_seconds=self._remaining(session, now)
                )
            self.logger.warning(
                f"Session create for booking {booking.id} lost a race and found no winner "
                f"(attempt {attempt + 1})"
            )

        raise SessionAlreadyActiveException(booking.id)

    # ------------------------------------------------------------------
    # Countdown and termination
    # ------------------------------------------------------------------

    @BaseService.measure_operation("tick_session")
    def tick(self, actor: ActorContext, session_id: str) -> SessionTick:
        """
        Check the countdown against the stored ``ends_at``.

        On the influencer side a session past its end is finalized with
        reason ``timeout``; subscriber ticks only report the remaining time.
        """
        session = self._get_session(session_id)
        if actor.id not in (session.influencer_id, session.subscriber_id):
            raise ForbiddenException("You are not a participant of this session")

        now = datetime.now(timezone.utc)
        ended = False
        if (
            session.is_active
            and actor.id == session.influencer_id
            and now >= ensure_utc(session.ends_at)
        ):
            ended = self._finalize(session, SessionEndReason.TIMEOUT, now)
            session = self._get_session(session_id)

        return SessionTick(
            session_id=session.id,
            is_active=bool(session.is_active),
            remaining_seconds=self._remaining(session, now),
            ended=ended,
            end_reason=session.end_reason,
        )

    @BaseService.measure_operation("end_session")
    def end_session(self, actor: ActorContext, session_id: str) -> StreamingSession:
        """Influencer ends the session immediately (reason ``influencer_ended``)."""
        session = self._get_session(session_id)
        if actor.id != session.influencer_id:
            raise ForbiddenException("Only the influencer can end the session")
        if not session.is_active:
            raise InvalidTransitionException(
                entity="Session",
                entity_id=session.id,
                current_status="ended",
                target_status="ended",
            )
        self._finalize(session, SessionEndReason.INFLUENCER_ENDED, datetime.now(timezone.utc))
        return self._get_session(session_id)

    @BaseService.measure_operation("expire_overdue_sessions")
    def expire_overdue_sessions(self, now: Optional[datetime] = None) -> int:
        """Finalize every active session past its end. Returns how many this call ended."""
        moment = now or datetime.now(timezone.utc)
        ended = 0
        for session in self.session_repository.list_overdue(moment):
            if self._finalize(session, SessionEndReason.TIMEOUT, moment):
                ended += 1
        if ended:
            self.logger.info(f"Expired {ended} overdue streaming sessions")
        return ended

    def get_session_status(self, actor: ActorContext, booking_id: str) -> SessionStatus:
        booking = self._get_booking(booking_id)
        if not booking.is_participant(actor.id):
            raise ForbiddenException("You are not a participant of this booking")
        now = datetime.now(timezone.utc)
        active = self.session_repository.get_active_for_booking(booking_id)
        return SessionStatus(
            booking_id=booking.id,
            booking_status=booking.status,
            has_active_session=active is not None,
            session=active,
            remaining_seconds=self._remaining(active, now) if active is not None else 0,
        )

    def _finalize(self, session: StreamingSession, reason: SessionEndReason, now: datetime) -> bool:
        """
        End ``session`` and complete its booking.

        Returns True only when this call ended the session. The booking is
        completed only while still approved; a cancelled booking stays
        cancelled.
        """
        with self.transaction():
            if not self.session_repository.finalize(session.id, reason, now):
                return False
            try:
                booking = self.booking_repository.transition_status(
                    session.booking_id,
                    BookingStatus.APPROVED,
                    BookingStatus.COMPLETED,
                    completed_at=now,
                    updated_at=now,
                )
                self.payment_repository.record_for_booking(booking)
            except InvalidTransitionException as exc:
                self.logger.info(
                    f"Booking {session.booking_id} left approved before session {session.id} "
                    f"ended (now {exc.current_status}); not completing"
                )
        self.logger.info(f"Session {session.id} ended ({reason.value})")
        return True
