"""
Booking lifecycle: creation rules, influencer decisions, completion and
the earnings overview.
"""

from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal

import pytest

from app.core.enums import RoleName
from app.core.exceptions import (
    ForbiddenException,
    InsufficientLeadTimeException,
    InvalidTransitionException,
    NotFoundException,
    ValidationException,
)
from app.models.booking import BookingStatus, StreamingBooking
from app.models.message import Message
from app.models.payment import Payment
from app.models.streaming_session import StreamingSession
from app.principal import ActorContext
from app.schemas.streaming_booking import BookingCreate
from app.services.booking_service import BookingService
from tests.factories.streaming_builders import (
    create_booking,
    create_profile,
    create_session,
    enable_streaming,
)

REAL_DATETIME = datetime
NOW = datetime(2030, 5, 1, 12, 0, tzinfo=timezone.utc)


def _freeze_time(monkeypatch, target: datetime) -> None:
    class _FixedDateTime(datetime):
        @classmethod
        def now(cls, tz=None):
            if tz is None:
                return target.replace(tzinfo=None)
            return target.astimezone(tz)

        @classmethod
        def combine(cls, date_obj, time_obj, tzinfo=None):
            if tzinfo is None:
                return REAL_DATETIME.combine(date_obj, time_obj)
            return REAL_DATETIME.combine(date_obj, time_obj, tzinfo)

    monkeypatch.setattr("app.services.booking_service.datetime", _FixedDateTime)


def _request(influencer_id: str, at: time = time(18, 0), duration: int = 15, **extra) -> BookingCreate:
    return BookingCreate(
        influencer_id=influencer_id,
        scheduled_date=date(2030, 5, 1),
        scheduled_time=at,
        duration_minutes=duration,
        **extra,
    )


@pytest.fixture
def service(db):
    return BookingService(db)


@pytest.fixture(autouse=True)
def frozen_now(monkeypatch):
    _freeze_time(monkeypatch, NOW)


class TestCreateBooking:
    def test_creates_pending_booking_with_price_snapshot(
        self, db, service, influencer, subscriber_actor
    ):
        booking = service.create_booking(subscriber_actor, _request(influencer.id, notes="  hi  "))

        assert booking.status == BookingStatus.PENDING.value
        assert booking.price_paid == Decimal("120.00")
        assert booking.influencer_earnings == Decimal("108.00")
        assert booking.scheduled_at == datetime(2030, 5, 1, 18, 0, tzinfo=timezone.utc)

    def test_influencer_is_notified_in_chat(self, db, service, influencer, subscriber_actor):
        service.create_booking(subscriber_actor, _request(influencer.id))

        messages = db.query(Message).all()
        assert len(messages) == 1
        assert messages[0].sender_id == subscriber_actor.id
        assert messages[0].receiver_id == influencer.id

    def test_only_subscribers_can_book(self, service, influencer, admin_actor):
        with pytest.raises(ForbiddenException):
            service.create_booking(admin_actor, _request(influencer.id))

    def test_unknown_influencer(self, service, subscriber_actor, other_subscriber):
        with pytest.raises(NotFoundException):
            service.create_booking(subscriber_actor, _request(other_subscriber.id))

    @pytest.mark.parametrize("duration", [0, 7, 90])
    def test_duration_must_be_offered(self, service, influencer, subscriber_actor, duration):
        with pytest.raises(ValidationException) as exc_info:
            service.create_booking(subscriber_actor, _request(influencer.id, duration=duration))
        assert exc_info.value.code == "INVALID_DURATION"

    def test_streaming_disabled(self, db, service, subscriber_actor):
        quiet = create_profile(db, RoleName.INFLUENCER)
        enable_streaming(db, quiet, is_enabled=False)

        with pytest.raises(ValidationException) as exc_info:
            service.create_booking(subscriber_actor, _request(quiet.id))
        assert exc_info.value.code == "STREAMING_DISABLED"

    def test_never_configured_counts_as_disabled(self, db, service, subscriber_actor):
        fresh = create_profile(db, RoleName.INFLUENCER)

        with pytest.raises(ValidationException) as exc_info:
            service.create_booking(subscriber_actor, _request(fresh.id))
        assert exc_info.value.code == "STREAMING_DISABLED"

    def test_lead_time_boundary(self, service, influencer, subscriber_actor):
        with pytest.raises(InsufficientLeadTimeException) as exc_info:
            service.create_booking(subscriber_actor, _request(influencer.id, at=time(12, 4, 59)))
        assert exc_info.value.code == "INSUFFICIENT_LEAD_TIME"

        booking = service.create_booking(subscriber_actor, _request(influencer.id, at=time(12, 5)))
        assert booking.status == BookingStatus.PENDING.value

    def test_daily_limit_counts_open_bookings_only(self, db, service, subscriber, subscriber_actor):
        capped = create_profile(db, RoleName.INFLUENCER)
        enable_streaming(db, capped, max_bookings_per_day=2)
        slot = datetime(2030, 5, 1, 20, 0, tzinfo=timezone.utc)
        create_booking(db, subscriber, capped, slot, status=BookingStatus.REJECTED)
        create_booking(db, subscriber, capped, slot, status=BookingStatus.CANCELLED)
        create_booking(db, subscriber, capped, slot, status=BookingStatus.APPROVED)

        service.create_booking(subscriber_actor, _request(capped.id))
        with pytest.raises(ValidationException) as exc_info:
            service.create_booking(subscriber_actor, _request(capped.id, at=time(19, 0)))
        assert exc_info.value.code == "DAILY_LIMIT_REACHED"

    def test_daily_limit_is_counted_under_the_settings_lock(
        self, db, service, subscriber, subscriber_actor, monkeypatch
    ):
        capped = create_profile(db, RoleName.INFLUENCER)
        enable_streaming(db, capped, max_bookings_per_day=1)
        steps = []
        real_lock = service.settings_repository.lock_for_influencer
        real_count = service.repository.count_open_for_influencer_on_date

        def lock(influencer_id):
            steps.append("lock")
            return real_lock(influencer_id)

        def count(influencer_id, day):
            steps.append("count")
            # A booking committed by a competing request just before we counted
            if len(steps) == 2:
                create_booking(db, subscriber, capped, datetime(2030, 5, 1, 21, 0, tzinfo=timezone.utc))
            return real_count(influencer_id, day)

        monkeypatch.setattr(service.settings_repository, "lock_for_influencer", lock)
        monkeypatch.setattr(service.repository, "count_open_for_influencer_on_date", count)

        with pytest.raises(ValidationException) as exc_info:
            service.create_booking(subscriber_actor, _request(capped.id))

        assert exc_info.value.code == "DAILY_LIMIT_REACHED"
        assert steps == ["lock", "count"]
        assert db.query(StreamingBooking).filter_by(influencer_id=capped.id).count() == 1

    def test_cannot_book_self(self, db, service, influencer):
        # A subscriber-typed actor whose id matches the influencer
        actor = ActorContext(id=influencer.id, role=RoleName.SUBSCRIBER)
        with pytest.raises(ValidationException) as exc_info:
            service.create_booking(actor, _request(influencer.id))
        assert exc_info.value.code == "SELF_BOOKING"


class TestInfluencerDecisions:
    @pytest.fixture
    def pending(self, db, influencer, subscriber):
        return create_booking(
            db, subscriber, influencer, NOW + timedelta(hours=6), status=BookingStatus.PENDING
        )

    def test_approve(self, service, pending, influencer_actor):
        booking = service.approve_booking(influencer_actor, pending.id)
        assert booking.status == BookingStatus.APPROVED.value
        assert booking.approved_at is not None

    def test_double_approve_reports_already_in_state(self, service, pending, influencer_actor):
        service.approve_booking(influencer_actor, pending.id)
        with pytest.raises(InvalidTransitionException) as exc_info:
            service.approve_booking(influencer_actor, pending.id)
        assert exc_info.value.code == "ALREADY_IN_STATE"
        assert exc_info.value.is_already_in_state

    def test_reject_after_approve_is_conflict(self, service, pending, influencer_actor):
        service.approve_booking(influencer_actor, pending.id)
        with pytest.raises(InvalidTransitionException) as exc_info:
            service.reject_booking(influencer_actor, pending.id, "changed my mind")
        assert exc_info.value.code == "INVALID_TRANSITION"
        assert exc_info.value.current_status == BookingStatus.APPROVED.value

    def test_reject_requires_reason(self, service, pending, influencer_actor):
        with pytest.raises(ValidationException) as exc_info:
            service.reject_booking(influencer_actor, pending.id, "   ")
        assert exc_info.value.code == "REASON_REQUIRED"

    def test_reject_persists_reason_and_notifies(self, db, service, pending, influencer_actor):
        booking = service.reject_booking(influencer_actor, pending.id, "  Travelling  ")

        assert booking.status == BookingStatus.REJECTED.value
        assert booking.rejection_reason == "Travelling"
        notice = db.query(Message).filter(Message.receiver_id == pending.subscriber_id).one()
        assert "Travelling" in notice.content

    def test_only_booked_influencer_decides(self, db, service, pending, subscriber_actor):
        with pytest.raises(ForbiddenException):
            service.approve_booking(subscriber_actor, pending.id)

    def test_unknown_booking(self, service, influencer_actor):
        with pytest.raises(NotFoundException):
            service.approve_booking(influencer_actor, "01HZZZZZZZZZZZZZZZZZZZZZZZ")


class TestCancelBooking:
    def test_cancel_requires_approved(self, db, service, influencer, subscriber, influencer_actor):
        pending = create_booking(
            db, subscriber, influencer, NOW + timedelta(hours=2), status=BookingStatus.PENDING
        )
        with pytest.raises(InvalidTransitionException):
            service.cancel_booking(influencer_actor, pending.id, "sick")

    def test_cancel_ends_active_session(self, db, service, influencer, subscriber, influencer_actor):
        booking = create_booking(db, subscriber, influencer, NOW)
        session = create_session(db, booking, ends_at=NOW + timedelta(minutes=15))

        cancelled = service.cancel_booking(influencer_actor, booking.id, "Connection issues")

        assert cancelled.status == BookingStatus.CANCELLED.value
        assert cancelled.rejection_reason == "Connection issues"
        db.expire_all()
        ended = db.get(StreamingSession, session.id)
        assert ended.is_active is False
        assert ended.end_reason == "cancelled"


class TestCompleteBooking:
    def test_complete_records_payment_once(self, db, service, influencer, subscriber):
        booking = create_booking(db, subscriber, influencer, NOW - timedelta(minutes=20))

        completed = service.complete_booking(booking.id)
        assert completed.status == BookingStatus.COMPLETED.value

        with pytest.raises(InvalidTransitionException) as exc_info:
            service.complete_booking(booking.id)
        assert exc_info.value.code == "ALREADY_IN_STATE"

        payments = db.query(Payment).filter(Payment.booking_id == booking.id).all()
        assert len(payments) == 1
        assert payments[0].amount == Decimal("120.00")
        assert payments[0].platform_fee == Decimal("12.00")

    def test_cancelled_booking_is_not_completed(self, db, service, influencer, subscriber):
        booking = create_booking(
            db, subscriber, influencer, NOW, status=BookingStatus.CANCELLED
        )
        with pytest.raises(InvalidTransitionException) as exc_info:
            service.complete_booking(booking.id)
        assert exc_info.value.code == "INVALID_TRANSITION"
        assert db.query(Payment).count() == 0


class TestReads:
    def test_view_flags_follow_the_clock(self, db, service, influencer, subscriber, subscriber_actor):
        booking = create_booking(db, subscriber, influencer, NOW + timedelta(minutes=3))

        view = service.get_booking_view(subscriber_actor, booking.id)
        assert view.can_influencer_join is True
        assert view.can_subscriber_join is True
        assert view.time_until_start_seconds == 180

        later = service.get_booking_view(subscriber_actor, booking.id, now=NOW + timedelta(hours=1))
        assert later.can_influencer_join is False
        assert later.can_subscriber_join is False
        assert later.time_until_start_seconds == 0

    def test_pending_booking_has_no_join_flags(
        self, db, service, influencer, subscriber, influencer_actor
    ):
        booking = create_booking(db, subscriber, influencer, NOW, status=BookingStatus.PENDING)
        view = service.get_booking_view(influencer_actor, booking.id)
        assert view.can_influencer_join is False

    def test_outsider_cannot_read(self, db, service, influencer, subscriber, other_actor, admin_actor):
        booking = create_booking(db, subscriber, influencer, NOW)
        with pytest.raises(ForbiddenException):
            service.get_booking_for_actor(other_actor, booking.id)
        assert service.get_booking_for_actor(admin_actor, booking.id).id == booking.id

    def test_listings(self, db, service, influencer, subscriber, influencer_actor, subscriber_actor):
        early = create_booking(db, subscriber, influencer, NOW + timedelta(hours=1))
        late = create_booking(
            db, subscriber, influencer, NOW + timedelta(hours=3), status=BookingStatus.PENDING
        )

        assert [b.id for b in service.list_bookings_for_influencer(influencer_actor)] == [
            early.id,
            late.id,
        ]
        assert [b.id for b in service.list_bookings_for_subscriber(subscriber_actor)] == [
            late.id,
            early.id,
        ]
        pending_only = service.list_bookings_for_influencer(influencer_actor, status="pending")
        assert [b.id for b in pending_only] == [late.id]
        with pytest.raises(ForbiddenException):
            service.list_bookings_for_influencer(subscriber_actor)

    def test_earnings_summary(self, db, service, influencer, subscriber, influencer_actor):
        create_booking(
            db,
            subscriber,
            influencer,
            NOW - timedelta(days=1),
            status=BookingStatus.COMPLETED,
            price=Decimal("200.00"),
        )
        create_booking(
            db, subscriber, influencer, NOW - timedelta(days=2), status=BookingStatus.COMPLETED
        )
        create_booking(db, subscriber, influencer, NOW + timedelta(days=1), status=BookingStatus.PENDING)

        summary = service.earnings_summary(influencer_actor)

        assert summary.total_earnings == Decimal("288.00")
        assert summary.completed_count == 2
        assert summary.pending_count == 1
        assert summary.approved_count == 0
