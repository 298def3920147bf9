# backend/app/repositories/conversation_repository.py
"""
Conversation Repository for per-user-pair messaging.

Provides data access methods for conversations between any two profiles.
Pair uniqueness is enforced by the unique ``pair_key`` column, so a
get-or-create that loses a race resolves to the winner's row.
"""

from datetime import datetime, timezone
from typing import List, Optional, cast

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.constants import DEFAULT_QUERY_LIMIT
from ..core.exceptions import RepositoryException
from ..models.conversation import Conversation, make_pair_key
from .base_repository import BaseRepository


class ConversationRepository(BaseRepository[Conversation]):
    """
    Repository for Conversation entity operations.

    Handles all database operations for conversations including:
    - Finding or creating conversations for user pairs
    - Listing conversations for a user
    - Updating conversation metadata (last_message_at)
    """

    def __init__(self, db: Session):
        """Initialize with database session."""
        super().__init__(db, Conversation)

    def find_by_pair(self, user_a_id: str, user_b_id: str) -> Optional[Conversation]:
        """
        Find the conversation between two users regardless of argument order.

        Args:
            user_a_id: One participant
            user_b_id: The other participant

        Returns:
            The conversation if found, None otherwise
        """
        result = (
            self.db.query(Conversation)
            .filter(Conversation.pair_key == make_pair_key(user_a_id, user_b_id))
            .first()
        )
        return cast(Optional[Conversation], result)

    def get_or_create(self, user_a_id: str, user_b_id: str) -> tuple[Conversation, bool]:
        """
        Get an existing conversation or create a new one.

        Safe under concurrency: if another writer inserts the same pair
        between our lookup and our insert, the unique violation is rolled
        back to a savepoint and the winner's row is returned.

        Args:
            user_a_id: Stored as participant1 when created
            user_b_id: Stored as participant2 when created

        Returns:
            Tuple of (conversation, created) where created is True if new
        """
        existing = self.find_by_pair(user_a_id, user_b_id)
        if existing:
            return existing, False

        try:
            with self.savepoint():
                conversation = self.create(
                    participant1_id=user_a_id,
                    participant2_id=user_b_id,
                    pair_key=make_pair_key(user_a_id, user_b_id),
                )
            return conversation, True
        except IntegrityError as exc:
            self.logger.info(
                "Conversation insert for %s/%s lost a race, re-reading", user_a_id, user_b_id
            )
            winner = self.find_by_pair(user_a_id, user_b_id)
            if winner is None:
                raise RepositoryException(
                    f"Failed to get or create conversation: {exc}"
                ) from exc
            return winner, False

    def find_for_user(
        self, user_id: str, limit: int = DEFAULT_QUERY_LIMIT, offset: int = 0
    ) -> List[Conversation]:
        """
        Find all conversations where a user is a participant.

        Returns:
            Conversations ordered by most recent activity first
        """
        query = (
            self.db.query(Conversation)
            .filter(
                or_(
                    Conversation.participant1_id == user_id,
                    Conversation.participant2_id == user_id,
                )
            )
            .order_by(
                func.coalesce(Conversation.last_message_at, Conversation.created_at).desc(),
                Conversation.id.desc(),
            )
            .offset(offset)
            .limit(limit)
        )
        return self._execute_query(query)

    def touch_last_message(self, conversation_id: str, at: Optional[datetime] = None) -> None:
        """Record that a message was just sent in the conversation."""
        conversation = self.get_by_id(conversation_id, load_relationships=False)
        if conversation is None:
            return
        moment = at or datetime.now(timezone.utc)
        conversation.last_message_at = moment
        conversation.updated_at = moment
        self.db.flush()
