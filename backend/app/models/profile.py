# backend/app/models/profile.py
"""
Profile model for the HubContent platform.

A profile is the platform identity of an authenticated account. Its
``user_type`` is the only source of an actor's role; clients never assert
their own role.
"""

from datetime import datetime, timezone
import logging

from sqlalchemy import CheckConstraint, Column, DateTime, Numeric, String
import ulid

from ..core.enums import AccountStatus, RoleName
from ..database import Base

logger = logging.getLogger(__name__)


class Profile(Base):
    """
    Platform profile for influencers, subscribers and admins.

    Attributes:
        id: ULID primary key (also the JWT subject)
        email: Contact address used for notification emails
        username: Public handle
        full_name: Optional display name
        user_type: influencer | subscriber | admin
        account_status: active | pending_kyc | suspended
        subscription_price: Monthly subscription price (influencers only)
    """

    __tablename__ = "profiles"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    email = Column(String(255), unique=True, nullable=True)
    username = Column(String(50), unique=True, nullable=False)
    full_name = Column(String(255), nullable=True)
    user_type = Column(String(20), nullable=False, default=RoleName.SUBSCRIBER.value)
    account_status = Column(String(20), nullable=False, default=AccountStatus.ACTIVE.value)
    subscription_price = Column(Numeric(10, 2), nullable=False, default=0)
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=True,
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        CheckConstraint(
            "user_type IN ('influencer', 'subscriber', 'admin')",
            name="ck_profiles_user_type",
        ),
        CheckConstraint(
            "account_status IN ('active', 'pending_kyc', 'suspended')",
            name="ck_profiles_account_status",
        ),
        CheckConstraint("subscription_price >= 0", name="ck_profiles_subscription_price"),
    )

    def __repr__(self) -> str:
        return f"<Profile {self.id} @{self.username} ({self.user_type})>"

    @property
    def display_name(self) -> str:
        return self.full_name or f"@{self.username}"

    @property
    def is_active(self) -> bool:
        return self.account_status != AccountStatus.SUSPENDED.value
