"""Subscription data access."""

from datetime import datetime
import logging
from typing import Any, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..core.constants import DEFAULT_QUERY_LIMIT
from ..core.exceptions import InvalidTransitionException, NotFoundException
from ..models.subscription import Subscription, SubscriptionStatus
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class SubscriptionRepository(BaseRepository[Subscription]):
    """Repository for subscriber -> influencer subscriptions."""

    def __init__(self, db: Session):
        super().__init__(db, Subscription)

    def transition_status(
        self,
        subscription_id: str,
        expected: SubscriptionStatus,
        target: SubscriptionStatus,
        **fields: Any,
    ) -> Subscription:
        updated = self.update_where(
            subscription_id, {"status": expected.value}, status=target.value, **fields
        )
        subscription = self.get_fresh(subscription_id)
        if subscription is None:
            raise NotFoundException("Subscription not found")
        if not updated:
            raise InvalidTransitionException(
                entity="Subscription",
                entity_id=subscription_id,
                current_status=subscription.status,
                target_status=target.value,
            )
        return subscription

    def get_active(self, subscriber_id: str, influencer_id: str) -> Optional[Subscription]:
        """The row holding ``status = 'active'`` for a pair, expired or not."""
        result = self._execute_query(
            self.db.query(Subscription)
            .populate_existing()
            .filter(
                Subscription.subscriber_id == subscriber_id,
                Subscription.influencer_id == influencer_id,
                Subscription.status == SubscriptionStatus.ACTIVE.value,
            )
            .limit(1)
        )
        return result[0] if result else None

    def has_active(self, subscriber_id: str, influencer_id: str, now: datetime) -> bool:
        """True when an active subscription exists and has not passed its expiry."""
        query = self.db.query(Subscription).filter(
            Subscription.subscriber_id == subscriber_id,
            Subscription.influencer_id == influencer_id,
            Subscription.status == SubscriptionStatus.ACTIVE.value,
            or_(Subscription.expires_at.is_(None), Subscription.expires_at > now),
        )
        return bool(self._execute_query(query.limit(1)))

    def list_for_subscriber(
        self, subscriber_id: str, limit: int = DEFAULT_QUERY_LIMIT
    ) -> List[Subscription]:
        query = (
            self.db.query(Subscription)
            .filter(Subscription.subscriber_id == subscriber_id)
            .order_by(Subscription.created_at.desc(), Subscription.id.desc())
            .limit(limit)
        )
        return self._execute_query(query)

    def list_overdue(self, now: datetime) -> List[Subscription]:
        query = self.db.query(Subscription).filter(
            Subscription.status == SubscriptionStatus.ACTIVE.value,
            Subscription.expires_at.is_not(None),
            Subscription.expires_at <= now,
        )
        return self._execute_query(query)
