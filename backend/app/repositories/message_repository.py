# backend/app/repositories/message_repository.py
"""
Message Repository for the chat system.

Implements the data access operations for message management.
"""

import logging
from typing import List, Optional, cast

from sqlalchemy import and_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.constants import DEFAULT_QUERY_LIMIT
from ..core.exceptions import RepositoryException
from ..models.message import Message
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class MessageRepository(BaseRepository[Message]):
    """
    Repository for message data access.

    Handles all database operations for the chat system.
    """

    def __init__(self, db: Session):
        """Initialize with Message model."""
        super().__init__(db, Message)
        self.logger = logging.getLogger(__name__)

    def find_by_client_ref(self, sender_id: str, client_ref: str) -> Optional[Message]:
        """Find a message a sender already stored under an optimistic client id."""
        return cast(
            Optional[Message],
            self.find_one_by(sender_id=sender_id, client_ref=client_ref),
        )

    def list_for_conversation(
        self, conversation_id: str, limit: int = DEFAULT_QUERY_LIMIT, offset: int = 0
    ) -> List[Message]:
        """Messages of a conversation, oldest first."""
        query = (
            self.db.query(Message)
            .filter(Message.conversation_id == conversation_id)
            .order_by(Message.created_at.asc(), Message.id.asc())
            .offset(offset)
            .limit(limit)
        )
        return self._execute_query(query)

    def count_unread(self, conversation_id: str, user_id: str) -> int:
        try:
            return (
                self.db.query(Message)
                .filter(
                    and_(
                        Message.conversation_id == conversation_id,
                        Message.receiver_id == user_id,
                        Message.is_read == False,  # noqa: E712
                    )
                )
                .count()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error counting unread messages: {str(e)}")
            raise RepositoryException(f"Failed to count unread messages: {str(e)}")

    def mark_conversation_read(self, conversation_id: str, user_id: str) -> int:
        """
        Mark every message addressed to ``user_id`` in a conversation as read.

        Returns:
            Number of messages updated
        """
        try:
            updated = (
                self.db.query(Message)
                .filter(
                    and_(
                        Message.conversation_id == conversation_id,
                        Message.receiver_id == user_id,
                        Message.is_read == False,  # noqa: E712
                    )
                )
                .update({Message.is_read: True}, synchronize_session="fetch")
            )
            self.db.flush()
            return int(updated)
        except SQLAlchemyError as e:
            self.logger.error(f"Error marking messages read: {str(e)}")
            raise RepositoryException(f"Failed to mark messages read: {str(e)}")
