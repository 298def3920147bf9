# backend/app/services/booking_service.py
"""
Booking Service for the HubContent platform

Owns the streaming booking lifecycle:

    pending -> approved | rejected      (influencer decision)
    approved -> cancelled               (influencer, with reason)
    approved -> completed               (system, when the session ends)

Every transition is a conditional update on the expected status, so two
racing requests can never both apply; the loser gets an
InvalidTransitionException carrying the status it lost to. Notifications are
dispatched only after the transition has committed.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
import logging
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.enums import RoleName
from ..core.exceptions import (
    ForbiddenException,
    InsufficientLeadTimeException,
    NotFoundException,
    ValidationException,
)
from ..domain import time_window
from ..domain.pricing import quote_booking
from ..models.booking import BookingStatus, StreamingBooking
from ..models.streaming_session import SessionEndReason
from ..principal import ActorContext
from ..repositories.factory import RepositoryFactory
from ..schemas.streaming_booking import BookingCreate
from .base import BaseService
from .notification_service import NotificationKind, NotificationService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BookingView:
    """A booking with the join flags derived for one instant."""

    booking: StreamingBooking
    scheduled_at: datetime
    can_influencer_join: bool
    can_subscriber_join: bool
    time_until_start_seconds: int


@dataclass(frozen=True)
class EarningsSummary:
    total_earnings: Decimal
    completed_count: int
    pending_count: int
    approved_count: int
    status_counts: Dict[str, int]


def _require_reason(reason: Optional[str]) -> str:
    cleaned = (reason or "").strip()
    if not cleaned:
        raise ValidationException("A reason is required", code="REASON_REQUIRED")
    return cleaned


class BookingService(BaseService):
    """
    Service layer for streaming booking operations.

    All operations take an explicit ActorContext whose role came from the
    stored profile.
    """

    def __init__(self, db: Session, notification_service: Optional[NotificationService] = None):
        super().__init__(db)
        self.repository = RepositoryFactory.create_booking_repository(db)
        self.profile_repository = RepositoryFactory.create_profile_repository(db)
        self.settings_repository = RepositoryFactory.create_streaming_settings_repository(db)
        self.session_repository = RepositoryFactory.create_streaming_session_repository(db)
        self.payment_repository = RepositoryFactory.create_payment_repository(db)
        self.notification_service = notification_service or NotificationService(db)

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    @BaseService.measure_operation("create_booking")
    def create_booking(self, actor: ActorContext, data: BookingCreate) -> StreamingBooking:
        """
        Create a pending booking for the acting subscriber.

        Raises:
            ForbiddenException: Actor is not a subscriber
            ValidationException: Self-booking, disallowed duration, streaming
                disabled, daily limit reached or not enough lead time
            NotFoundException: Influencer does not exist
        """
        if not actor.is_subscriber:
            raise ForbiddenException("Only subscribers can book live sessions")
        if data.influencer_id == actor.id:
            raise ValidationException("You cannot book a session with yourself", code="SELF_BOOKING")
        if data.duration_minutes <= 0 or data.duration_minutes not in settings.allowed_durations:
            raise ValidationException(
                f"Duration must be one of {list(settings.allowed_durations)} minutes",
                code="INVALID_DURATION",
                details={"duration_minutes": data.duration_minutes},
            )

        influencer = self.profile_repository.get_by_id(data.influencer_id, load_relationships=False)
        if influencer is None or influencer.user_type != RoleName.INFLUENCER.value:
            raise NotFoundException("Influencer not found")

        streaming_settings = self.settings_repository.get_for_influencer(data.influencer_id)
        if streaming_settings is None or not streaming_settings.is_enabled:
            raise ValidationException(
                "This influencer is not accepting live sessions", code="STREAMING_DISABLED"
            )

        try:
            quote = quote_booking(streaming_settings, data.duration_minutes, settings.platform_fee_rate)
        except ValueError as exc:
            raise ValidationException(str(exc), code="INVALID_DURATION") from exc

        now = datetime.now(timezone.utc)
        scheduled = time_window.scheduled_instant(data.scheduled_date, data.scheduled_time)
        if not time_window.can_create_booking(scheduled, now):
            raise InsufficientLeadTimeException(
                required_minutes=settings.booking_min_lead_minutes,
                provided_minutes=(scheduled - now).total_seconds() / 60,
            )

        with self.transaction():
            # Concurrent requests for one influencer queue on the settings row
            locked = self.settings_repository.lock_for_influencer(data.influencer_id)
            daily_limit = (locked or streaming_settings).max_bookings_per_day
            open_count = self.repository.count_open_for_influencer_on_date(
                data.influencer_id, data.scheduled_date
            )
            if open_count >= daily_limit:
                raise ValidationException(
                    "This influencer has no more live sessions available on that day",
                    code="DAILY_LIMIT_REACHED",
                    details={"max_bookings_per_day": daily_limit},
                )

            booking = self.repository.create(
                subscriber_id=actor.id,
                influencer_id=data.influencer_id,
                scheduled_date=data.scheduled_date,
                scheduled_time=data.scheduled_time,
                duration_minutes=data.duration_minutes,
                price_paid=quote.price,
                influencer_earnings=quote.influencer_earnings,
                status=BookingStatus.PENDING.value,
                notes=data.notes,
                created_at=now,
            )

        self.logger.info(
            f"Booking {booking.id} created by {actor.id} with {data.influencer_id} "
            f"for {scheduled.isoformat()} ({data.duration_minutes} min)"
        )
        self.notification_service.notify_booking(
            booking,
            NotificationKind.BOOKING_REQUESTED,
            to_actor_id=booking.influencer_id,
            sender_id=booking.subscriber_id,
        )
        return booking

    # ------------------------------------------------------------------
    # Influencer decisions
    # ------------------------------------------------------------------

    def _get_for_influencer(self, actor: ActorContext, booking_id: str) -> StreamingBooking:
        booking = self.repository.get_by_id(booking_id, load_relationships=False)
        if booking is None:
            raise NotFoundException(f"Booking with id {booking_id} not found")
        if actor.id != booking.influencer_id:
            raise ForbiddenException("Only the booked influencer can manage this booking")
        return booking

    @BaseService.measure_operation("approve_booking")
    def approve_booking(self, actor: ActorContext, booking_id: str) -> StreamingBooking:
        """pending -> approved. Notifies the subscriber with a schedule recap."""
        self._get_for_influencer(actor, booking_id)
        now = datetime.now(timezone.utc)
        with self.transaction():
            booking = self.repository.transition_status(
                booking_id,
                BookingStatus.PENDING,
                BookingStatus.APPROVED,
                approved_at=now,
                updated_at=now,
            )

        self.notification_service.notify_booking(
            booking,
            NotificationKind.BOOKING_APPROVED,
            to_actor_id=booking.subscriber_id,
            sender_id=booking.influencer_id,
        )
        return booking

    @BaseService.measure_operation("reject_booking")
    def reject_booking(
        self, actor: ActorContext, booking_id: str, reason: Optional[str]
    ) -> StreamingBooking:
        """pending -> rejected, persisting the reason."""
        cleaned = _require_reason(reason)
        self._get_for_influencer(actor, booking_id)
        now = datetime.now(timezone.utc)
        with self.transaction():
            booking = self.repository.transition_status(
                booking_id,
                BookingStatus.PENDING,
                BookingStatus.REJECTED,
                rejection_reason=cleaned,
                updated_at=now,
            )

        self.notification_service.notify_booking(
            booking,
            NotificationKind.BOOKING_REJECTED,
            to_actor_id=booking.subscriber_id,
            sender_id=booking.influencer_id,
            reason=cleaned,
        )
        return booking

    @BaseService.measure_operation("cancel_booking")
    def cancel_booking(
        self, actor: ActorContext, booking_id: str, reason: Optional[str]
    ) -> StreamingBooking:
        """
        approved -> cancelled.

        Ends any active session for the booking in the same transaction and
        notifies the subscriber with the reason.
        """
        cleaned = _require_reason(reason)
        self._get_for_influencer(actor, booking_id)
        now = datetime.now(timezone.utc)
        with self.transaction():
            booking = self.repository.transition_status(
                booking_id,
                BookingStatus.APPROVED,
                BookingStatus.CANCELLED,
                rejection_reason=cleaned,
                cancelled_at=now,
                updated_at=now,
            )
            active = self.session_repository.get_active_for_booking(booking_id)
            if active is not None:
                self.session_repository.finalize(active.id, SessionEndReason.CANCELLED, now)
                self.logger.info(f"Ended session {active.id} because booking {booking_id} was cancelled")

        self.notification_service.notify_booking(
            booking,
            NotificationKind.BOOKING_CANCELLED,
            to_actor_id=booking.subscriber_id,
            sender_id=booking.influencer_id,
            reason=cleaned,
        )
        return booking

    @BaseService.measure_operation("complete_booking")
    def complete_booking(self, booking_id: str) -> StreamingBooking:
        """
        approved -> completed (system action).

        A second call raises InvalidTransitionException with code
        ALREADY_IN_STATE and changes nothing.
        """
        now = datetime.now(timezone.utc)
        with self.transaction():
            booking = self.repository.transition_status(
                booking_id,
                BookingStatus.APPROVED,
                BookingStatus.COMPLETED,
                completed_at=now,
                updated_at=now,
            )
            self.payment_repository.record_for_booking(booking)
        return booking

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_booking_for_actor(self, actor: ActorContext, booking_id: str) -> StreamingBooking:
        booking = self.repository.get_by_id(booking_id)
        if booking is None:
            raise NotFoundException(f"Booking with id {booking_id} not found")
        if not booking.is_participant(actor.id) and not actor.is_admin:
            raise ForbiddenException("You do not have access to this booking")
        return booking

    def list_bookings_for_influencer(
        self, actor: ActorContext, status: Optional[str] = None
    ) -> List[StreamingBooking]:
        if not actor.is_influencer:
            raise ForbiddenException("Only influencers have incoming bookings")
        return self.repository.list_for_influencer(actor.id, status=status)

    def list_bookings_for_subscriber(
        self, actor: ActorContext, status: Optional[str] = None
    ) -> List[StreamingBooking]:
        return self.repository.list_for_subscriber(actor.id, status=status)

    def get_booking_view(
        self, actor: ActorContext, booking_id: str, now: Optional[datetime] = None
    ) -> BookingView:
        """The booking plus join flags evaluated at ``now`` (defaults to the current instant)."""
        booking = self.get_booking_for_actor(actor, booking_id)
        moment = now or datetime.now(timezone.utc)
        scheduled = booking.scheduled_at
        approved = booking.status == BookingStatus.APPROVED.value
        return BookingView(
            booking=booking,
            scheduled_at=scheduled,
            can_influencer_join=approved and time_window.can_influencer_join(scheduled, moment),
            can_subscriber_join=approved
            and time_window.can_subscriber_join(scheduled, booking.duration_minutes, moment),
            time_until_start_seconds=time_window.remaining_seconds(scheduled, moment),
        )

    def earnings_summary(self, actor: ActorContext) -> EarningsSummary:
        """Completed-booking earnings and open booking counts for an influencer."""
        if not actor.is_influencer:
            raise ForbiddenException("Only influencers have earnings")
        counts = self.repository.count_by_status_for_influencer(actor.id)
        return EarningsSummary(
            total_earnings=self.repository.sum_completed_earnings(actor.id),
            completed_count=counts.get(BookingStatus.COMPLETED.value, 0),
            pending_count=counts.get(BookingStatus.PENDING.value, 0),
            approved_count=counts.get(BookingStatus.APPROVED.value, 0),
            status_counts=counts,
        )
