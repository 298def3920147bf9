"""One-off content purchase record (permanent ownership of a single post)."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Numeric, String, UniqueConstraint
import ulid

from ..database import Base


class UserPurchasedContent(Base):
    __tablename__ = "user_purchased_content"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    user_id = Column(
        String(26), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    content_id = Column(
        String(26), ForeignKey("content_posts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    price_paid = Column(Numeric(10, 2), nullable=False)
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    __table_args__ = (
        UniqueConstraint("user_id", "content_id", name="uq_user_purchased_content_pair"),
    )

    def __repr__(self) -> str:
        return f"<UserPurchasedContent user={self.user_id} content={self.content_id}>"
