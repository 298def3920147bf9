# backend/app/services/notification_service.py
"""
Notification Service for the HubContent platform

Delivers booking notifications rendered from Jinja2 templates. Each
notification is posted as a chat message into the (deduplicated)
conversation between sender and recipient and, when the recipient has an
email address and notifications are enabled, emailed as well.

Delivery is fire-and-forget: callers dispatch after their own transaction
has committed, and every failure here is logged and swallowed so it can
never undo the state change that triggered it.
"""

from datetime import datetime, timezone
from enum import Enum
import logging
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.constants import BRAND_NAME
from ..models.booking import StreamingBooking
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .email import EmailService
from .template_service import TemplateService

logger = logging.getLogger(__name__)


class NotificationKind(str, Enum):
    BOOKING_REQUESTED = "booking_requested"
    BOOKING_APPROVED = "booking_approved"
    BOOKING_REJECTED = "booking_rejected"
    BOOKING_CANCELLED = "booking_cancelled"


SUBJECTS: Dict[NotificationKind, str] = {
    NotificationKind.BOOKING_REQUESTED: f"New live session request - {BRAND_NAME}",
    NotificationKind.BOOKING_APPROVED: f"Your live session is confirmed - {BRAND_NAME}",
    NotificationKind.BOOKING_REJECTED: f"Your live session request was declined - {BRAND_NAME}",
    NotificationKind.BOOKING_CANCELLED: f"Your live session was cancelled - {BRAND_NAME}",
}


class NotificationService(BaseService):
    """Best-effort chat + email notifications."""

    def __init__(
        self,
        db: Session,
        template_service: Optional[TemplateService] = None,
        email_service: Optional[EmailService] = None,
    ):
        super().__init__(db)
        self.template_service = template_service or TemplateService()
        self._email_service = email_service
        self.profile_repository = RepositoryFactory.create_profile_repository(db)
        self.conversation_repository = RepositoryFactory.create_conversation_repository(db)
        self.message_repository = RepositoryFactory.create_message_repository(db)

    @property
    def email_service(self) -> EmailService:
        if self._email_service is None:
            self._email_service = EmailService(self.db)
        return self._email_service

    @BaseService.measure_operation("send_notification")
    def send(
        self,
        to_actor_id: str,
        template_kind: NotificationKind,
        context: Dict[str, Any],
        sender_id: Optional[str] = None,
    ) -> bool:
        """
        Render and deliver one notification.

        Args:
            to_actor_id: Recipient profile id
            template_kind: Which template to render
            context: Template variables
            sender_id: Profile the chat message is posted from; when None
                only the email channel is used

        Returns:
            True when every attempted channel succeeded. Never raises.
        """
        if not settings.notifications_enabled:
            return True

        kind = NotificationKind(template_kind)
        try:
            body = self.template_service.render_template(
                f"notifications/{kind.value}.txt", context=context
            )
        except Exception as e:
            self.logger.error(f"Failed to render {kind.value} notification: {str(e)}", exc_info=True)
            return False

        chat_ok = True
        if sender_id and sender_id != to_actor_id:
            chat_ok = self._post_chat_message(sender_id, to_actor_id, body)
        email_ok = self._send_email(to_actor_id, SUBJECTS[kind], body)
        return chat_ok and email_ok

    def notify_booking(
        self,
        booking: StreamingBooking,
        kind: NotificationKind,
        to_actor_id: str,
        sender_id: str,
        **extra: Any,
    ) -> bool:
        """Send a booking notification with the standard schedule recap context."""
        try:
            context = self.booking_context(booking)
        except Exception as e:
            self.logger.error(f"Failed to build context for booking {booking.id}: {str(e)}")
            return False
        context.update(extra)
        return self.send(to_actor_id, kind, context, sender_id=sender_id)

    def booking_context(self, booking: StreamingBooking) -> Dict[str, Any]:
        subscriber = self.profile_repository.get_by_id(booking.subscriber_id, load_relationships=False)
        influencer = self.profile_repository.get_by_id(booking.influencer_id, load_relationships=False)
        return {
            "booking_id": booking.id,
            "subscriber_name": subscriber.display_name if subscriber else "A subscriber",
            "influencer_name": influencer.display_name if influencer else "The creator",
            "scheduled_date": booking.scheduled_date,
            "scheduled_time": booking.scheduled_time,
            "duration_minutes": booking.duration_minutes,
            "price_paid": booking.price_paid,
            "influencer_earnings": booking.influencer_earnings,
            "notes": booking.notes,
            "reason": booking.rejection_reason,
            "subscriber_early_join_minutes": settings.subscriber_early_join_minutes,
        }

    def _post_chat_message(self, sender_id: str, receiver_id: str, body: str) -> bool:
        try:
            with self.transaction():
                conversation, _ = self.conversation_repository.get_or_create(sender_id, receiver_id)
                now = datetime.now(timezone.utc)
                self.message_repository.create(
                    conversation_id=conversation.id,
                    sender_id=sender_id,
                    receiver_id=receiver_id,
                    content=body,
                    created_at=now,
                )
                self.conversation_repository.touch_last_message(conversation.id, now)
            return True
        except Exception as e:
            self.logger.error(
                f"Failed to post notification message {sender_id} -> {receiver_id}: {str(e)}",
                exc_info=True,
            )
            return False

    def _send_email(self, to_actor_id: str, subject: str, body: str) -> bool:
        try:
            recipient = self.profile_repository.get_by_id(to_actor_id, load_relationships=False)
            if recipient is None or not recipient.email:
                return True
            self.email_service.send_email(recipient.email, subject, body)
            return True
        except Exception as e:
            self.logger.warning(f"Failed to email notification to {to_actor_id}: {str(e)}", exc_info=True)
            return False
