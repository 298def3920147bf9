"""Conversation and message schemas."""

from datetime import datetime
from typing import Optional

from pydantic import Field, model_validator

from ..core.constants import MAX_MESSAGE_LENGTH
from .base import StandardizedModel, StrictRequestModel


class ConversationCreate(StrictRequestModel):
    other_user_id: str


class ConversationResponse(StandardizedModel):
    id: str
    participant1_id: str
    participant2_id: str
    created_at: datetime
    last_message_at: Optional[datetime] = None


class ConversationSummaryResponse(StandardizedModel):
    conversation: ConversationResponse
    other_user_id: str
    unread_count: int


class MessageCreate(StrictRequestModel):
    """Send to an existing conversation or straight to a user."""

    content: str = Field(..., min_length=1, max_length=MAX_MESSAGE_LENGTH)
    conversation_id: Optional[str] = None
    receiver_id: Optional[str] = None
    client_ref: Optional[str] = Field(None, max_length=64)

    @model_validator(mode="after")
    def _one_target(self) -> "MessageCreate":
        if not self.conversation_id and not self.receiver_id:
            raise ValueError("conversation_id or receiver_id is required")
        return self


class MessageResponse(StandardizedModel):
    id: str
    conversation_id: str
    sender_id: str
    receiver_id: str
    content: str
    is_read: bool
    client_ref: Optional[str] = None
    created_at: datetime


class MarkReadResponse(StandardizedModel):
    conversation_id: str
    updated: int


class ConversationCreateResponse(ConversationResponse):
    created: bool = False
