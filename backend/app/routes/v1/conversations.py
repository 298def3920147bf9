# backend/app/routes/v1/conversations.py
"""
Conversations routes - API v1

Versioned conversation endpoints under /api/v1/conversations.
All business logic delegated to ConversationService.

Endpoints:
    GET /                               -> List user's conversations
    POST /                              -> Create/get conversation with another user
    POST /messages                      -> Send a message (to a conversation or a user)
    GET /{conversation_id}/messages     -> Messages oldest first
    POST /{conversation_id}/read        -> Mark incoming messages read
"""

import asyncio
import logging
from typing import List

from fastapi import APIRouter, Depends, status
from fastapi.params import Path

from ...api.dependencies.auth import get_current_actor
from ...api.dependencies.services import get_conversation_service
from ...principal import ActorContext
from ...schemas.conversation import (
    ConversationCreate,
    ConversationCreateResponse,
    ConversationResponse,
    ConversationSummaryResponse,
    MarkReadResponse,
    MessageCreate,
    MessageResponse,
)
from ...services.conversation_service import ConversationService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["conversations-v1"])

ULID_PATH_PATTERN = r"^[0-9A-HJKMNP-TV-Z]{26}$"


@router.get("", response_model=List[ConversationSummaryResponse])
def list_conversations(
    actor: ActorContext = Depends(get_current_actor),
    service: ConversationService = Depends(get_conversation_service),
) -> List[ConversationSummaryResponse]:
    """List the caller's conversations, most recent activity first."""
    return [
        ConversationSummaryResponse(
            conversation=ConversationResponse.model_validate(summary.conversation),
            other_user_id=summary.other_user_id,
            unread_count=summary.unread_count,
        )
        for summary in service.list_conversations(actor)
    ]


@router.post("", response_model=ConversationCreateResponse)
async def create_conversation(
    request: ConversationCreate,
    actor: ActorContext = Depends(get_current_actor),
    service: ConversationService = Depends(get_conversation_service),
) -> ConversationCreateResponse:
    """
    Get or create the conversation with another user.

    If the conversation already exists (in either participant order), the
    existing one is returned with ``created = false``.
    """
    conversation, created = await asyncio.to_thread(
        service.start_conversation, actor, request.other_user_id
    )
    response = ConversationCreateResponse.model_validate(conversation)
    response.created = created
    return response


@router.post("/messages", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def send_message(
    request: MessageCreate,
    actor: ActorContext = Depends(get_current_actor),
    service: ConversationService = Depends(get_conversation_service),
) -> MessageResponse:
    message = await asyncio.to_thread(
        service.send_message,
        actor,
        request.content,
        conversation_id=request.conversation_id,
        receiver_id=request.receiver_id,
        client_ref=request.client_ref,
    )
    return MessageResponse.model_validate(message)


@router.get("/{conversation_id}/messages", response_model=List[MessageResponse])
def list_messages(
    conversation_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    actor: ActorContext = Depends(get_current_actor),
    service: ConversationService = Depends(get_conversation_service),
) -> List[MessageResponse]:
    return [
        MessageResponse.model_validate(m) for m in service.list_messages(actor, conversation_id)
    ]


@router.post("/{conversation_id}/read", response_model=MarkReadResponse)
async def mark_read(
    conversation_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    actor: ActorContext = Depends(get_current_actor),
    service: ConversationService = Depends(get_conversation_service),
) -> MarkReadResponse:
    updated = await asyncio.to_thread(service.mark_read, actor, conversation_id)
    return MarkReadResponse(conversation_id=conversation_id, updated=updated)
