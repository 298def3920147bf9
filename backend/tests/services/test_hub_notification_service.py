"""Notifications are best effort: failures are reported, never raised."""

from datetime import datetime, timezone
from unittest.mock import Mock

import pytest

from app.core.config import settings
from app.core.exceptions import ServiceException
from app.models.booking import BookingStatus
from app.models.message import Message
from app.services.booking_service import BookingService
from app.services.email import EmailService
from app.services.notification_service import NotificationKind, NotificationService
from tests.factories.streaming_builders import create_booking

START = datetime(2030, 5, 1, 18, 0, tzinfo=timezone.utc)


@pytest.fixture
def pending(db, influencer, subscriber):
    return create_booking(db, subscriber, influencer, START, status=BookingStatus.PENDING)


def test_booking_notification_posts_chat_and_email(db, pending, influencer, subscriber):
    email_service = Mock(spec=EmailService)
    service = NotificationService(db, email_service=email_service)

    assert service.notify_booking(
        pending, NotificationKind.BOOKING_APPROVED, to_actor_id=subscriber.id, sender_id=influencer.id
    )

    message = db.query(Message).one()
    assert message.sender_id == influencer.id
    assert "Duration: 15 minutes" in message.content
    email_service.send_email.assert_called_once()
    to_email, subject, _ = email_service.send_email.call_args.args
    assert to_email == subscriber.email
    assert "confirmed" in subject


def test_disabled_notifications_do_nothing(db, pending, influencer, subscriber, monkeypatch):
    monkeypatch.setattr(settings, "notifications_enabled", False)
    service = NotificationService(db, email_service=Mock(spec=EmailService))

    assert service.send(subscriber.id, NotificationKind.BOOKING_APPROVED, {}, sender_id=influencer.id)
    assert db.query(Message).count() == 0


def test_render_failure_is_reported(db, subscriber):
    template_service = Mock()
    template_service.render_template.side_effect = RuntimeError("template exploded")
    service = NotificationService(db, template_service=template_service)

    assert service.send(subscriber.id, NotificationKind.BOOKING_REJECTED, {}) is False


def test_email_failure_keeps_chat_message(db, pending, influencer, subscriber):
    email_service = Mock(spec=EmailService)
    email_service.send_email.side_effect = ServiceException("provider down")
    service = NotificationService(db, email_service=email_service)

    assert (
        service.notify_booking(
            pending, NotificationKind.BOOKING_REQUESTED, to_actor_id=influencer.id, sender_id=subscriber.id
        )
        is False
    )
    assert db.query(Message).count() == 1


def test_misconfigured_provider_is_swallowed(db, pending, influencer, subscriber, monkeypatch):
    monkeypatch.setattr(settings, "email_provider", "resend")
    monkeypatch.setattr(settings, "resend_api_key", None)
    service = NotificationService(db)

    assert (
        service.notify_booking(
            pending, NotificationKind.BOOKING_REQUESTED, to_actor_id=influencer.id, sender_id=subscriber.id
        )
        is False
    )


def test_failed_notification_never_undoes_transition(db, pending, influencer_actor):
    notifier = Mock(spec=NotificationService)
    notifier.notify_booking.return_value = False
    booking = BookingService(db, notification_service=notifier).approve_booking(
        influencer_actor, pending.id
    )

    assert booking.status == BookingStatus.APPROVED.value
    notifier.notify_booking.assert_called_once()
    assert notifier.notify_booking.call_args.args[1] == NotificationKind.BOOKING_APPROVED


def test_chat_failure_does_not_raise(db, pending, influencer, subscriber):
    service = NotificationService(db, email_service=Mock(spec=EmailService))
    service.conversation_repository = Mock()
    service.conversation_repository.get_or_create.side_effect = RuntimeError("db gone")

    assert (
        service.notify_booking(
            pending,
            NotificationKind.BOOKING_CANCELLED,
            to_actor_id=subscriber.id,
            sender_id=influencer.id,
            reason="Sick",
        )
        is False
    )


class TestEmailService:
    def test_console_provider_only_logs(self, db):
        assert EmailService(db, provider="console").send_email("a@example.com", "Hi", "Body") == {"id": None}

    def test_resend_requires_key(self, db, monkeypatch):
        monkeypatch.setattr(settings, "resend_api_key", None)
        with pytest.raises(ServiceException):
            EmailService(db, provider="resend")

    def test_resend_sends_plain_text(self, db, monkeypatch):
        monkeypatch.setattr(settings, "resend_api_key", "re_test")
        sent = Mock(return_value={"id": "email-1"})
        monkeypatch.setattr("resend.Emails.send", sent)

        response = EmailService(db, provider="resend").send_email("a@example.com", "Hi", "Body")

        assert response == {"id": "email-1"}
        payload = sent.call_args.args[0]
        assert payload["to"] == "a@example.com"
        assert payload["text"] == "Body"

    def test_resend_error_becomes_service_exception(self, db, monkeypatch):
        monkeypatch.setattr(settings, "resend_api_key", "re_test")
        monkeypatch.setattr("resend.Emails.send", Mock(side_effect=RuntimeError("429")))
        with pytest.raises(ServiceException):
            EmailService(db, provider="resend").send_email("a@example.com", "Hi", "Body")


def test_template_recap_mentions_schedule(db, pending):
    context = NotificationService(db).booking_context(pending)
    assert context["duration_minutes"] == 15
    assert context["scheduled_date"] == START.date()
    assert context["subscriber_early_join_minutes"] == settings.subscriber_early_join_minutes
    assert pending.scheduled_at == START
