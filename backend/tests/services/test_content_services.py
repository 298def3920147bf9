"""Content moderation workflow and per-viewer access decisions."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from app.core.exceptions import ForbiddenException, InvalidTransitionException, NotFoundException
from app.models.content import ContentStatus
from app.models.purchase import UserPurchasedContent
from app.models.subscription import Subscription, SubscriptionStatus
from app.schemas.content import ContentCreate
from app.services.content_access_service import ContentAccessService
from app.services.content_service import ContentService
from tests.factories.streaming_builders import create_content


def _subscribe(db, subscriber, influencer, expires_at, status=SubscriptionStatus.ACTIVE):
    db.add(
        Subscription(
            subscriber_id=subscriber.id,
            influencer_id=influencer.id,
            status=status.value,
            expires_at=expires_at,
        )
    )
    db.commit()


class TestModeration:
    def test_draft_to_approved(self, db, influencer_actor, admin_actor):
        service = ContentService(db)
        post = service.create_post(influencer_actor, ContentCreate(title="Teaser"))
        assert post.status == ContentStatus.DRAFT.value

        assert service.submit_for_review(influencer_actor, post.id).status == "pending_review"
        assert [p.id for p in service.list_pending_review(admin_actor)] == [post.id]
        assert service.review_post(admin_actor, post.id, "approve").status == "approved"

    def test_reject_and_no_second_review(self, db, influencer_actor, admin_actor):
        service = ContentService(db)
        post = service.create_post(influencer_actor, ContentCreate(title="Teaser"))
        service.submit_for_review(influencer_actor, post.id)

        assert service.review_post(admin_actor, post.id, "reject").status == "rejected"
        with pytest.raises(InvalidTransitionException) as exc_info:
            service.review_post(admin_actor, post.id, "approve")
        assert exc_info.value.current_status == "rejected"

    def test_roles(self, db, influencer_actor, subscriber_actor, other_actor):
        service = ContentService(db)
        with pytest.raises(ForbiddenException):
            service.create_post(subscriber_actor, ContentCreate(title="Nope"))

        post = service.create_post(influencer_actor, ContentCreate(title="Mine"))
        with pytest.raises(ForbiddenException):
            service.submit_for_review(other_actor, post.id)
        with pytest.raises(ForbiddenException):
            service.review_post(influencer_actor, post.id, "approve")

    def test_submit_twice(self, db, influencer_actor):
        service = ContentService(db)
        post = service.create_post(influencer_actor, ContentCreate(title="Once"))
        service.submit_for_review(influencer_actor, post.id)
        with pytest.raises(InvalidTransitionException) as exc_info:
            service.submit_for_review(influencer_actor, post.id)
        assert exc_info.value.code == "ALREADY_IN_STATE"

    def test_price_is_normalised(self, db, influencer_actor):
        post = ContentService(db).create_post(
            influencer_actor,
            ContentCreate(title="Set", is_purchasable=True, price="4.999"),
        )
        assert post.price == Decimal("5.00")


class TestAccess:
    @pytest.fixture
    def paid(self, db, influencer):
        return create_content(db, influencer)

    def test_unknown_content(self, db, subscriber_actor):
        with pytest.raises(NotFoundException):
            ContentAccessService(db).can_view(subscriber_actor, "01HZZZZZZZZZZZZZZZZZZZZZZZ")

    def test_paid_content_needs_a_relationship(self, db, paid, subscriber_actor, influencer_actor):
        service = ContentAccessService(db)
        assert service.can_view(None, paid.id) is False
        assert service.can_view(subscriber_actor, paid.id) is False
        assert service.can_view(influencer_actor, paid.id) is True

    def test_active_subscription_grants(self, db, paid, influencer, subscriber, subscriber_actor):
        _subscribe(db, subscriber, influencer, datetime.now(timezone.utc) + timedelta(days=3))
        assert ContentAccessService(db).can_view(subscriber_actor, paid.id) is True

    @pytest.mark.parametrize(
        "expires_in,status",
        [
            (timedelta(days=-1), SubscriptionStatus.ACTIVE),
            (timedelta(days=3), SubscriptionStatus.CANCELLED),
        ],
    )
    def test_lapsed_subscription_does_not_grant(
        self, db, paid, influencer, subscriber, subscriber_actor, expires_in, status
    ):
        _subscribe(db, subscriber, influencer, datetime.now(timezone.utc) + expires_in, status)
        assert ContentAccessService(db).can_view(subscriber_actor, paid.id) is False

    def test_purchase_grants_only_that_item(
        self, db, influencer, paid, subscriber, subscriber_actor
    ):
        other = create_content(db, influencer, title="Other")
        db.add(UserPurchasedContent(user_id=subscriber.id, content_id=paid.id, price_paid=5))
        db.commit()

        service = ContentAccessService(db)
        assert service.can_view(subscriber_actor, paid.id) is True
        assert service.can_view(subscriber_actor, other.id) is False

    def test_owner_listing_includes_unapproved(
        self, db, influencer, subscriber, influencer_actor, subscriber_actor
    ):
        free = create_content(db, influencer, is_free=True, title="Free")
        paid = create_content(db, influencer, title="Paid")
        bought = create_content(db, influencer, title="Bought")
        draft = create_content(db, influencer, status=ContentStatus.DRAFT, title="Draft")
        db.add(UserPurchasedContent(user_id=subscriber.id, content_id=bought.id, price_paid=5))
        db.commit()
        service = ContentAccessService(db)

        owner_view = {
            item.post.id: item.can_view
            for item in service.list_visible_for_owner(influencer_actor, influencer.id)
        }
        assert set(owner_view) == {free.id, paid.id, bought.id, draft.id}
        assert all(owner_view.values())

        viewer = {
            item.post.id: item.can_view
            for item in service.list_visible_for_owner(subscriber_actor, influencer.id)
        }
        assert viewer == {free.id: True, paid.id: False, bought.id: True}

        anonymous = {
            item.post.id: item.can_view for item in service.list_visible_for_owner(None, influencer.id)
        }
        assert anonymous == {free.id: True, paid.id: False, bought.id: False}
