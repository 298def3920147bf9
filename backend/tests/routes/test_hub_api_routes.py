"""HTTP surface: authentication, the error envelope and the main flows."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

from app.auth import create_access_token
from app.core.enums import AccountStatus, RoleName
from app.models.booking import BookingStatus
from app.models.content import ContentStatus
from tests.factories.streaming_builders import (
    auth_headers,
    create_booking,
    create_content,
    create_profile,
)

MISSING_ULID = "01HZZZZZZZZZZZZZZZZZZZZZZZ"


def _booking_payload(influencer_id: str, days_ahead: int = 2) -> dict:
    day = (datetime.now(timezone.utc) + timedelta(days=days_ahead)).date()
    return {
        "influencer_id": influencer_id,
        "scheduled_date": day.isoformat(),
        "scheduled_time": "12:00:00",
        "duration_minutes": 30,
    }


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


class TestAuthentication:
    def test_missing_token(self, client):
        response = client.get("/api/v1/bookings")
        assert response.status_code == 401
        body = response.json()
        assert body["title"] == "Unauthorized"
        assert body["message"] == "Not authenticated"
        assert body["instance"] == "/api/v1/bookings"

    def test_garbage_token(self, client):
        response = client.get("/api/v1/bookings", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_expired_token(self, client, subscriber):
        token = create_access_token(subscriber.id, expires_delta=timedelta(minutes=-1))
        response = client.get("/api/v1/bookings", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_token_for_unknown_profile(self, client):
        token = create_access_token(MISSING_ULID)
        response = client.get("/api/v1/bookings", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_suspended_profile(self, client, db):
        suspended = create_profile(db, account_status=AccountStatus.SUSPENDED.value)
        response = client.get("/api/v1/bookings", headers=auth_headers(suspended))
        assert response.status_code == 403
        assert response.json()["message"] == "Account is suspended"

    def test_role_comes_from_profile(self, client, subscriber):
        # A subscriber cannot reach influencer-only data whatever the client claims
        response = client.get("/api/v1/bookings/earnings", headers=auth_headers(subscriber))
        assert response.status_code == 403


class TestBookingRoutes:
    def test_request_then_approve(self, client, influencer, subscriber):
        created = client.post(
            "/api/v1/bookings", json=_booking_payload(influencer.id), headers=auth_headers(subscriber)
        )
        assert created.status_code == 201
        booking = created.json()
        assert booking["status"] == "pending"
        assert booking["price_paid"] == 200.0
        assert booking["influencer_earnings"] == 180.0

        approved = client.post(
            f"/api/v1/bookings/{booking['id']}/approve", headers=auth_headers(influencer)
        )
        assert approved.status_code == 200
        assert approved.json()["status"] == "approved"

        again = client.post(
            f"/api/v1/bookings/{booking['id']}/approve", headers=auth_headers(influencer)
        )
        assert again.status_code == 409
        body = again.json()
        assert body["code"] == "ALREADY_IN_STATE"
        assert body["details"]["current_status"] == "approved"

        listed = client.get("/api/v1/bookings?role=influencer", headers=auth_headers(influencer))
        assert [b["id"] for b in listed.json()] == [booking["id"]]

    def test_reject_requires_reason(self, client, db, influencer, subscriber):
        booking = create_booking(
            db,
            subscriber,
            influencer,
            datetime.now(timezone.utc) + timedelta(days=1),
            status=BookingStatus.PENDING,
        )
        response = client.post(
            f"/api/v1/bookings/{booking.id}/reject", json={"reason": ""}, headers=auth_headers(influencer)
        )
        assert response.status_code == 400
        assert response.json()["code"] == "REASON_REQUIRED"

    def test_body_validation_envelope(self, client, influencer, subscriber):
        response = client.post(
            "/api/v1/bookings",
            json={"influencer_id": influencer.id, "unexpected": True},
            headers=auth_headers(subscriber),
        )
        assert response.status_code == 422
        body = response.json()
        assert body["code"] == "validation_error"
        assert isinstance(body["details"], list)

    def test_malformed_id(self, client, influencer):
        response = client.get("/api/v1/bookings/not-a-ulid", headers=auth_headers(influencer))
        assert response.status_code == 422

    def test_unknown_booking(self, client, influencer):
        response = client.get(f"/api/v1/bookings/{MISSING_ULID}", headers=auth_headers(influencer))
        assert response.status_code == 404
        assert response.json()["title"] == "Not Found"

    def test_booking_view(self, client, db, influencer, subscriber):
        soon = datetime.now(timezone.utc) + timedelta(minutes=2)
        booking = create_booking(db, subscriber, influencer, soon)
        response = client.get(f"/api/v1/bookings/{booking.id}", headers=auth_headers(subscriber))
        assert response.status_code == 200
        body = response.json()
        assert body["booking"]["id"] == booking.id
        assert body["can_subscriber_join"] is True
        assert body["can_influencer_join"] is True


class TestSessionRoutes:
    def test_open_join_tick_end(self, client, db, influencer, subscriber):
        booking = create_booking(db, subscriber, influencer, datetime.now(timezone.utc))

        waiting = client.post(
            f"/api/v1/streaming-sessions/bookings/{booking.id}", headers=auth_headers(subscriber)
        )
        assert waiting.json()["status"] == "waiting"

        opened = client.post(
            f"/api/v1/streaming-sessions/bookings/{booking.id}", headers=auth_headers(influencer)
        ).json()
        assert opened["status"] == "active"
        session_id = opened["session"]["id"]

        joined = client.post(
            f"/api/v1/streaming-sessions/bookings/{booking.id}", headers=auth_headers(subscriber)
        ).json()
        assert joined["session"]["id"] == session_id

        tick = client.post(f"/api/v1/streaming-sessions/{session_id}/tick", headers=auth_headers(subscriber))
        assert tick.status_code == 200
        assert 0 < tick.json()["remaining_seconds"] <= 15 * 60

        ended = client.post(f"/api/v1/streaming-sessions/{session_id}/end", headers=auth_headers(influencer))
        assert ended.status_code == 200
        assert ended.json()["end_reason"] == "influencer_ended"

        status = client.get(
            f"/api/v1/streaming-sessions/bookings/{booking.id}", headers=auth_headers(subscriber)
        ).json()
        assert status["booking_status"] == "completed"
        assert status["has_active_session"] is False

        again = client.post(f"/api/v1/streaming-sessions/{session_id}/end", headers=auth_headers(influencer))
        assert again.status_code == 409

    def test_window_closed(self, client, db, influencer, subscriber):
        booking = create_booking(db, subscriber, influencer, datetime.now(timezone.utc) + timedelta(hours=3))
        response = client.post(
            f"/api/v1/streaming-sessions/bookings/{booking.id}", headers=auth_headers(influencer)
        )
        assert response.status_code == 400
        assert response.json()["code"] == "JOIN_WINDOW_CLOSED"


class TestContentRoutes:
    def test_draft_review_publish(self, client, influencer, admin, subscriber):
        created = client.post(
            "/api/v1/content",
            json={"title": "Studio tour", "is_purchasable": True, "price": 9.5},
            headers=auth_headers(influencer),
        )
        assert created.status_code == 201
        post_id = created.json()["id"]

        assert client.get(f"/api/v1/content/{post_id}/access").json()["can_view"] is False
        client.post(f"/api/v1/content/{post_id}/submit", headers=auth_headers(influencer))
        reviewed = client.post(
            f"/api/v1/content/{post_id}/review", json={"decision": "approve"}, headers=auth_headers(admin)
        )
        assert reviewed.json()["status"] == "approved"

        bought = client.post(
            f"/api/v1/content/{post_id}/purchase",
            json={"payment_method": "card"},
            headers=auth_headers(subscriber),
        )
        assert bought.status_code == 201
        assert bought.json()["price_paid"] == 9.5

        access = client.get(f"/api/v1/content/{post_id}/access", headers=auth_headers(subscriber))
        assert access.json() == {"content_id": post_id, "can_view": True}

        twice = client.post(
            f"/api/v1/content/{post_id}/purchase", json={}, headers=auth_headers(subscriber)
        )
        assert twice.status_code == 409

    def test_owner_listing_for_anonymous_viewer(self, client, db, influencer):
        create_content(db, influencer, is_free=True)
        create_content(db, influencer, status=ContentStatus.PENDING_REVIEW)

        items = client.get(f"/api/v1/content/owners/{influencer.id}").json()
        assert [item["can_view"] for item in items] == [True]

    def test_subscription_unlocks_paid_posts(self, client, db, influencer, subscriber):
        post = create_content(db, influencer)

        subscribed = client.post(
            "/api/v1/subscriptions", json={"influencer_id": influencer.id}, headers=auth_headers(subscriber)
        )
        assert subscribed.status_code == 201
        assert subscribed.json()["status"] == "active"

        access = client.get(f"/api/v1/content/{post.id}/access", headers=auth_headers(subscriber))
        assert access.json()["can_view"] is True

        duplicate = client.post(
            "/api/v1/subscriptions", json={"influencer_id": influencer.id}, headers=auth_headers(subscriber)
        )
        assert duplicate.status_code == 409
        assert duplicate.json()["code"] == "ALREADY_IN_STATE"


class TestConversationRoutes:
    def test_create_is_deduplicated(self, client, influencer, subscriber):
        first = client.post(
            "/api/v1/conversations", json={"other_user_id": influencer.id}, headers=auth_headers(subscriber)
        ).json()
        second = client.post(
            "/api/v1/conversations", json={"other_user_id": subscriber.id}, headers=auth_headers(influencer)
        ).json()

        assert first["created"] is True
        assert second["created"] is False
        assert first["id"] == second["id"]

    def test_send_read_flow(self, client, influencer, subscriber):
        payload = {"content": "Loved the stream!", "receiver_id": influencer.id, "client_ref": "tmp-1"}
        sent = client.post("/api/v1/conversations/messages", json=payload, headers=auth_headers(subscriber))
        retried = client.post("/api/v1/conversations/messages", json=payload, headers=auth_headers(subscriber))
        assert sent.status_code == 201
        assert retried.json()["id"] == sent.json()["id"]

        conversation_id = sent.json()["conversation_id"]
        [summary] = client.get("/api/v1/conversations", headers=auth_headers(influencer)).json()
        assert summary["unread_count"] == 1

        read = client.post(f"/api/v1/conversations/{conversation_id}/read", headers=auth_headers(influencer))
        assert read.json() == {"conversation_id": conversation_id, "updated": 1}

        messages = client.get(
            f"/api/v1/conversations/{conversation_id}/messages", headers=auth_headers(influencer)
        ).json()
        assert [m["is_read"] for m in messages] == [True]

    def test_outsider_forbidden(self, client, influencer, subscriber, other_subscriber):
        sent = client.post(
            "/api/v1/conversations/messages",
            json={"content": "hi", "receiver_id": influencer.id},
            headers=auth_headers(subscriber),
        ).json()
        response = client.get(
            f"/api/v1/conversations/{sent['conversation_id']}/messages",
            headers=auth_headers(other_subscriber),
        )
        assert response.status_code == 403
        assert response.json()["title"] == "Forbidden"


class TestStreamingSettingsRoutes:
    def test_manage_and_publish_price_list(self, client, db, subscriber):
        creator = create_profile(db, RoleName.INFLUENCER)

        mine = client.get("/api/v1/streaming-settings/me", headers=auth_headers(creator))
        assert mine.status_code == 200
        assert mine.json()["is_enabled"] is False

        patched = client.patch(
            "/api/v1/streaming-settings/me",
            json={"is_enabled": True, "price_10min": 75},
            headers=auth_headers(creator),
        )
        assert patched.json()["price_10min"] == 75.0
        assert patched.json()["price_5min"] == 50.0

        public = client.get(f"/api/v1/streaming-settings/{creator.id}").json()
        assert public["is_enabled"] is True
        assert Decimal(str(public["price_10min"])) == Decimal("75")

        assert client.get("/api/v1/streaming-settings/me", headers=auth_headers(subscriber)).status_code == 403
