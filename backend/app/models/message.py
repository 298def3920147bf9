# backend/app/models/message.py
"""
Message model for the chat system.

Messages belong to a conversation. ``client_ref`` is the optimistic id a
client attached before the write was confirmed; it is unique per sender so a
retried send resolves to the stored row instead of a duplicate.
"""

from datetime import datetime, timezone

import ulid
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from ..database import Base


class Message(Base):
    """A chat message between two conversation participants."""

    __tablename__ = "messages"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    conversation_id = Column(
        String(26), ForeignKey("conversations.id", ondelete="CASCADE"), nullable=False
    )
    sender_id = Column(String(26), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    receiver_id = Column(String(26), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    content = Column(Text, nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)
    client_ref = Column(String(64), nullable=True)
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    conversation = relationship("Conversation", back_populates="messages")

    __table_args__ = (
        UniqueConstraint("sender_id", "client_ref", name="uq_messages_sender_client_ref"),
        Index("idx_messages_conversation_created", "conversation_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Message {self.id} conversation={self.conversation_id} sender={self.sender_id}>"
