# backend/app/models/conversation.py
"""
Conversation model for per-user-pair messaging architecture.

Each unordered pair of participants has exactly one conversation. The
participant columns keep the order the creator supplied; ``pair_key`` holds
the sorted pair and carries the uniqueness constraint, so (a, b) and (b, a)
can never both be stored.
"""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import Column, DateTime, ForeignKey, Index, String
from sqlalchemy.orm import relationship
import ulid

from ..database import Base


def make_pair_key(user_id_1: str, user_id_2: str) -> str:
    """Order-independent key for a participant pair."""
    first, second = sorted((str(user_id_1), str(user_id_2)))
    return f"{first}:{second}"


class Conversation(Base):
    """
    Conversation model for per-user-pair messaging.

    Attributes:
        id: ULID primary key
        participant1_id: First participant as supplied at creation
        participant2_id: Second participant as supplied at creation
        pair_key: Sorted "<id>:<id>" key, unique across the table
        created_at: When the conversation was created
        updated_at: When the conversation was last updated
        last_message_at: When the most recent message was sent
    """

    __tablename__ = "conversations"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    participant1_id = Column(
        String(26), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    participant2_id = Column(
        String(26), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    pair_key = Column(String(60), nullable=False, unique=True)
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
    last_message_at = Column(DateTime(timezone=True), nullable=True)

    messages = relationship(
        "Message",
        back_populates="conversation",
        order_by="Message.created_at",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("idx_conversations_participant1", "participant1_id"),
        Index("idx_conversations_participant2", "participant2_id"),
        Index("idx_conversations_last_message", "last_message_at"),
        {
            "comment": "One conversation per unordered participant pair",
        },
    )

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        if not self.pair_key and self.participant1_id and self.participant2_id:
            self.pair_key = make_pair_key(self.participant1_id, self.participant2_id)

    def __repr__(self) -> str:
        return (
            f"<Conversation(id={self.id}, p1={self.participant1_id}, p2={self.participant2_id})>"
        )

    def get_other_user_id(self, current_user_id: str) -> str:
        """
        Get the ID of the other participant in the conversation.

        Args:
            current_user_id: The ID of the current user

        Returns:
            The ID of the other participant
        """
        if current_user_id == self.participant1_id:
            return str(self.participant2_id)
        return str(self.participant1_id)

    def is_participant(self, user_id: str) -> bool:
        return user_id in (self.participant1_id, self.participant2_id)
