# backend/app/services/conversation_service.py
"""
Conversation Service for per-user-pair messaging.

Handles business logic for the conversation system including:
- Getting or creating the single conversation of a user pair
- Listing conversations for a user
- Sending messages (idempotent per sender + client reference)
- Marking messages read

Only the two participants may read or write a conversation.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
import logging
from typing import List, Optional, Tuple, cast

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.constants import MAX_MESSAGE_LENGTH
from ..core.exceptions import ForbiddenException, NotFoundException, ValidationException
from ..models.conversation import Conversation
from ..models.message import Message
from ..principal import ActorContext
from ..repositories.conversation_repository import ConversationRepository
from ..repositories.factory import RepositoryFactory
from ..repositories.message_repository import MessageRepository
from .base import BaseService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConversationSummary:
    conversation: Conversation
    other_user_id: str
    unread_count: int


class ConversationService(BaseService):
    """
    Service for managing per-user-pair conversations.

    Handles conversation creation, message sending, and
    related business logic with proper access control.
    """

    def __init__(
        self,
        db: Session,
        conversation_repository: Optional[ConversationRepository] = None,
        message_repository: Optional[MessageRepository] = None,
    ):
        """
        Initialize conversation service.

        Args:
            db: Database session
            conversation_repository: Optional repository for conversations
            message_repository: Optional repository for messages
        """
        super().__init__(db)
        self.conversation_repository = (
            conversation_repository or RepositoryFactory.create_conversation_repository(db)
        )
        self.message_repository = message_repository or RepositoryFactory.create_message_repository(
            db
        )
        self.profile_repository = RepositoryFactory.create_profile_repository(db)
        self.logger = logging.getLogger(__name__)

    @BaseService.measure_operation("get_or_create_conversation")
    def get_or_create_conversation(self, user_a_id: str, user_b_id: str) -> Tuple[Conversation, bool]:
        """
        Get existing conversation or create new one.

        The pair is unordered: (a, b) and (b, a) resolve to the same row.

        Returns:
            Tuple of (conversation, created) where created is True if new

        Raises:
            ValidationException: If both ids are the same user
        """
        if not user_a_id or not user_b_id or user_a_id == user_b_id:
            raise ValidationException(
                "A conversation needs two different participants", code="INVALID_PARTICIPANTS"
            )
        with self.transaction():
            conversation, created = self.conversation_repository.get_or_create(user_a_id, user_b_id)
        if created:
            self.logger.info(f"Conversation {conversation.id} started between {user_a_id} and {user_b_id}")
        return conversation, created

    def start_conversation(self, actor: ActorContext, other_user_id: str) -> Tuple[Conversation, bool]:
        if self.profile_repository.get_by_id(other_user_id, load_relationships=False) is None:
            raise NotFoundException("User not found")
        return self.get_or_create_conversation(actor.id, other_user_id)

    def get_conversation_for_actor(self, actor: ActorContext, conversation_id: str) -> Conversation:
        """
        Load a conversation the actor participates in.

        Raises:
            NotFoundException: Unknown conversation
            ForbiddenException: Actor is not a participant
        """
        conversation = self.conversation_repository.get_by_id(conversation_id, load_relationships=False)
        if conversation is None:
            raise NotFoundException("Conversation not found")
        if not conversation.is_participant(actor.id):
            raise ForbiddenException("You are not a participant of this conversation")
        return cast(Conversation, conversation)

    @BaseService.measure_operation("list_conversations")
    def list_conversations(self, actor: ActorContext) -> List[ConversationSummary]:
        conversations = self.conversation_repository.find_for_user(actor.id)
        return [
            ConversationSummary(
                conversation=conversation,
                other_user_id=conversation.get_other_user_id(actor.id),
                unread_count=self.message_repository.count_unread(conversation.id, actor.id),
            )
            for conversation in conversations
        ]

    def list_messages(self, actor: ActorContext, conversation_id: str) -> List[Message]:
        self.get_conversation_for_actor(actor, conversation_id)
        return self.message_repository.list_for_conversation(conversation_id)

    @BaseService.measure_operation("send_message")
    def send_message(
        self,
        actor: ActorContext,
        content: str,
        conversation_id: Optional[str] = None,
        receiver_id: Optional[str] = None,
        client_ref: Optional[str] = None,
    ) -> Message:
        """
        Send a message to an existing conversation or directly to a user.

        When ``client_ref`` is given and the sender already stored a message
        under it, that message is returned instead of storing a duplicate.

        Raises:
            ValidationException: Empty/oversized content or no target
            ForbiddenException: Actor is not a participant
            NotFoundException: Unknown conversation or receiver
        """
        body = (content or "").strip()
        if not body:
            raise ValidationException("Message content is required", code="EMPTY_MESSAGE")
        if len(body) > MAX_MESSAGE_LENGTH:
            raise ValidationException(
                f"Messages are limited to {MAX_MESSAGE_LENGTH} characters", code="MESSAGE_TOO_LONG"
            )

        if client_ref:
            existing = self.message_repository.find_by_client_ref(actor.id, client_ref)
            if existing is not None:
                return existing

        if conversation_id:
            conversation = self.get_conversation_for_actor(actor, conversation_id)
        elif receiver_id:
            conversation, _ = self.start_conversation(actor, receiver_id)
        else:
            raise ValidationException("conversation_id or receiver_id is required")

        recipient_id = conversation.get_other_user_id(actor.id)
        now = datetime.now(timezone.utc)
        with self.transaction():
            try:
                with self.message_repository.savepoint():
                    message = self.message_repository.create(
                        conversation_id=conversation.id,
                        sender_id=actor.id,
                        receiver_id=recipient_id,
                        content=body,
                        client_ref=client_ref,
                        created_at=now,
                    )
            except IntegrityError:
                # A retried send with the same client_ref won the insert
                winner = self.message_repository.find_by_client_ref(actor.id, client_ref or "")
                if winner is None:
                    raise
                return winner
            self.conversation_repository.touch_last_message(conversation.id, now)

        self.logger.info(
            f"Message sent in conversation {conversation.id}",
            extra={"conversation_id": conversation.id, "sender_id": actor.id, "message_id": message.id},
        )
        return message

    @BaseService.measure_operation("mark_read")
    def mark_read(self, actor: ActorContext, conversation_id: str) -> int:
        """Mark every message addressed to the actor in a conversation as read."""
        self.get_conversation_for_actor(actor, conversation_id)
        with self.transaction():
            return self.message_repository.mark_conversation_read(conversation_id, actor.id)
