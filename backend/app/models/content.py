# backend/app/models/content.py
"""
Content post model.

Posts carry their own visibility flags (free / purchasable / price); whether
a given viewer may see one is decided by the access gate from facts looked
up at read time, never from columns on this row.
"""

from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import relationship
import ulid

from ..database import Base


class ContentStatus(str, Enum):
    """Moderation status of a content post."""

    DRAFT = "draft"
    PENDING_REVIEW = "pending_review"
    APPROVED = "approved"
    REJECTED = "rejected"


class ContentPost(Base):
    """A photo/video/text post published by an influencer."""

    __tablename__ = "content_posts"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    owner_id = Column(String(26), ForeignKey("profiles.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    type = Column(String(20), nullable=False, default="image")
    file_url = Column(Text, nullable=True)
    thumbnail_url = Column(Text, nullable=True)

    is_free = Column(Boolean, nullable=False, default=False)
    is_purchasable = Column(Boolean, nullable=False, default=False)
    price = Column(Numeric(10, 2), nullable=False, default=0)

    status = Column(String(20), nullable=False, default=ContentStatus.DRAFT.value, index=True)

    created_at = Column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )
    updated_at = Column(DateTime(timezone=True), nullable=True)

    owner = relationship("Profile", foreign_keys=[owner_id])

    __table_args__ = (
        CheckConstraint(
            "status IN ('draft', 'pending_review', 'approved', 'rejected')",
            name="ck_content_posts_status",
        ),
        CheckConstraint("price >= 0", name="ck_content_posts_price_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<ContentPost {self.id} owner={self.owner_id} status={self.status}>"
