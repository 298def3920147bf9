# backend/app/services/subscription_service.py
"""
Subscription Service for the HubContent platform

Subscribers pay an influencer's subscription price for
``subscription_period_days`` of access to their paid content. At most one
active subscription exists per pair; a duplicate subscribe is reported as
ALREADY_IN_STATE instead of charging twice.
"""

from datetime import datetime, timedelta, timezone
import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.enums import RoleName
from ..core.exceptions import (
    ForbiddenException,
    InvalidTransitionException,
    NotFoundException,
    ValidationException,
)
from ..core.timezone_utils import ensure_utc
from ..domain.pricing import split_amount
from ..models.subscription import Subscription, SubscriptionStatus
from ..principal import ActorContext
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)


class SubscriptionService(BaseService):
    """Service layer for subscriptions and their payments."""

    def __init__(self, db: Session):
        super().__init__(db)
        self.repository = RepositoryFactory.create_subscription_repository(db)
        self.profile_repository = RepositoryFactory.create_profile_repository(db)
        self.payment_repository = RepositoryFactory.create_payment_repository(db)

    def _already_active(self, subscription: Subscription) -> InvalidTransitionException:
        return InvalidTransitionException(
            entity="Subscription",
            entity_id=subscription.id,
            current_status=SubscriptionStatus.ACTIVE.value,
            target_status=SubscriptionStatus.ACTIVE.value,
        )

    @BaseService.measure_operation("subscribe")
    def subscribe(
        self, actor: ActorContext, influencer_id: str, payment_method: str = "card"
    ) -> Subscription:
        """
        Start a paid subscription to ``influencer_id``.

        An active row whose period has already run out is expired first, so
        renewing after expiry works without waiting for the sweep.

        Raises:
            ValidationException: Self-subscription
            NotFoundException: Influencer does not exist
            InvalidTransitionException: ALREADY_IN_STATE when an unexpired
                active subscription exists
        """
        if influencer_id == actor.id:
            raise ValidationException("You cannot subscribe to yourself", code="SELF_SUBSCRIPTION")
        influencer = self.profile_repository.get_by_id(influencer_id, load_relationships=False)
        if influencer is None or influencer.user_type != RoleName.INFLUENCER.value:
            raise NotFoundException("Influencer not found")

        now = datetime.now(timezone.utc)
        quote = split_amount(influencer.subscription_price or 0, settings.platform_fee_rate)

        with self.transaction():
            current = self.repository.get_active(actor.id, influencer_id)
            if current is not None:
                if current.expires_at is None or ensure_utc(current.expires_at) > now:
                    raise self._already_active(current)
                self.repository.update_where(
                    current.id,
                    {"status": SubscriptionStatus.ACTIVE.value},
                    status=SubscriptionStatus.EXPIRED.value,
                    updated_at=now,
                )

            try:
                with self.repository.savepoint():
                    subscription = self.repository.create(
                        subscriber_id=actor.id,
                        influencer_id=influencer_id,
                        status=SubscriptionStatus.ACTIVE.value,
                        price_paid=quote.price,
                        expires_at=now + timedelta(days=settings.subscription_period_days),
                        created_at=now,
                    )
            except IntegrityError:
                winner = self.repository.get_active(actor.id, influencer_id)
                if winner is None:
                    raise
                raise self._already_active(winner)

            self.payment_repository.record(
                actor.id,
                influencer_id,
                quote,
                payment_method,
                subscription_id=subscription.id,
            )

        self.logger.info(
            f"Subscription {subscription.id}: {actor.id} -> {influencer_id} until {subscription.expires_at}"
        )
        return subscription

    @BaseService.measure_operation("cancel_subscription")
    def cancel_subscription(self, actor: ActorContext, subscription_id: str) -> Subscription:
        subscription = self.repository.get_by_id(subscription_id, load_relationships=False)
        if subscription is None:
            raise NotFoundException("Subscription not found")
        if subscription.subscriber_id != actor.id:
            raise ForbiddenException("You can only cancel your own subscriptions")
        with self.transaction():
            subscription = self.repository.transition_status(
                subscription_id,
                SubscriptionStatus.ACTIVE,
                SubscriptionStatus.CANCELLED,
                updated_at=datetime.now(timezone.utc),
            )
        return subscription

    @BaseService.measure_operation("expire_overdue_subscriptions")
    def expire_overdue(self, now: Optional[datetime] = None) -> int:
        """Mark every active subscription past ``expires_at`` as expired."""
        moment = now or datetime.now(timezone.utc)
        expired = 0
        with self.transaction():
            for subscription in self.repository.list_overdue(moment):
                if self.repository.update_where(
                    subscription.id,
                    {"status": SubscriptionStatus.ACTIVE.value},
                    status=SubscriptionStatus.EXPIRED.value,
                    updated_at=moment,
                ):
                    expired += 1
        if expired:
            self.logger.info(f"Expired {expired} subscriptions")
        return expired

    def list_for_subscriber(self, actor: ActorContext) -> List[Subscription]:
        return self.repository.list_for_subscriber(actor.id)
