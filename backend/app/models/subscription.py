"""Subscriber -> influencer subscription model."""

from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Numeric, String, text
import ulid

from ..database import Base


class SubscriptionStatus(str, Enum):
    ACTIVE = "active"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class Subscription(Base):
    """
    Paid subscription of a subscriber to an influencer's content.

    At most one ``active`` row may exist per (subscriber, influencer) pair;
    the partial unique index enforces it under concurrent subscribe attempts.
    """

    __tablename__ = "subscriptions"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    subscriber_id = Column(String(26), ForeignKey("profiles.id"), nullable=False, index=True)
    influencer_id = Column(String(26), ForeignKey("profiles.id"), nullable=False, index=True)
    status = Column(String(20), nullable=False, default=SubscriptionStatus.ACTIVE.value)
    price_paid = Column(Numeric(10, 2), nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )
    updated_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        CheckConstraint(
            "status IN ('active', 'cancelled', 'expired')", name="ck_subscriptions_status"
        ),
        Index(
            "uq_subscriptions_active_pair",
            "subscriber_id",
            "influencer_id",
            unique=True,
            postgresql_where=text("status = 'active'"),
            sqlite_where=text("status = 'active'"),
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<Subscription {self.id} {self.subscriber_id}->{self.influencer_id} "
            f"status={self.status} expires_at={self.expires_at}>"
        )
