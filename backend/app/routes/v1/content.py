# backend/app/routes/v1/content.py
"""
Content routes - API v1

Endpoints:
    POST /                              -> Influencer drafts a post
    GET /owners/{owner_id}              -> Owner's posts annotated with can_view
    GET /{content_id}/access            -> Whether the caller may view a post
    POST /{content_id}/submit           -> Owner submits a draft for review
    POST /{content_id}/review           -> Admin approves or rejects
    POST /{content_id}/purchase         -> Buy a single post
"""

import asyncio
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from fastapi.params import Path

from ...api.dependencies.auth import get_current_actor, get_optional_actor
from ...api.dependencies.services import (
    get_content_access_service,
    get_content_service,
    get_purchase_service,
)
from ...principal import ActorContext
from ...schemas.content import (
    ContentAccessResponse,
    ContentCreate,
    ContentItemView,
    ContentPostResponse,
    ContentReviewRequest,
    PaymentRequest,
    PurchaseResponse,
)
from ...services.content_access_service import ContentAccessService
from ...services.content_service import ContentService
from ...services.purchase_service import PurchaseService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["content-v1"])

ULID_PATH_PATTERN = r"^[0-9A-HJKMNP-TV-Z]{26}$"


@router.post("", response_model=ContentPostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    payload: ContentCreate,
    actor: ActorContext = Depends(get_current_actor),
    service: ContentService = Depends(get_content_service),
) -> ContentPostResponse:
    post = await asyncio.to_thread(service.create_post, actor, payload)
    return ContentPostResponse.model_validate(post)


@router.get("/owners/{owner_id}", response_model=List[ContentItemView])
def list_owner_content(
    owner_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    actor: Optional[ActorContext] = Depends(get_optional_actor),
    service: ContentAccessService = Depends(get_content_access_service),
) -> List[ContentItemView]:
    return [
        ContentItemView(post=ContentPostResponse.model_validate(item.post), can_view=item.can_view)
        for item in service.list_visible_for_owner(actor, owner_id)
    ]


@router.get("/{content_id}/access", response_model=ContentAccessResponse)
def check_access(
    content_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    actor: Optional[ActorContext] = Depends(get_optional_actor),
    service: ContentAccessService = Depends(get_content_access_service),
) -> ContentAccessResponse:
    """Anonymous callers are allowed; they can only see free approved posts."""
    return ContentAccessResponse(content_id=content_id, can_view=service.can_view(actor, content_id))


@router.post("/{content_id}/submit", response_model=ContentPostResponse)
async def submit_for_review(
    content_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    actor: ActorContext = Depends(get_current_actor),
    service: ContentService = Depends(get_content_service),
) -> ContentPostResponse:
    post = await asyncio.to_thread(service.submit_for_review, actor, content_id)
    return ContentPostResponse.model_validate(post)


@router.post("/{content_id}/review", response_model=ContentPostResponse)
async def review_post(
    payload: ContentReviewRequest,
    content_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    actor: ActorContext = Depends(get_current_actor),
    service: ContentService = Depends(get_content_service),
) -> ContentPostResponse:
    post = await asyncio.to_thread(service.review_post, actor, content_id, payload.decision)
    return ContentPostResponse.model_validate(post)


@router.post(
    "/{content_id}/purchase", response_model=PurchaseResponse, status_code=status.HTTP_201_CREATED
)
async def purchase_content(
    payload: PaymentRequest,
    content_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    actor: ActorContext = Depends(get_current_actor),
    service: PurchaseService = Depends(get_purchase_service),
) -> PurchaseResponse:
    purchase = await asyncio.to_thread(
        service.purchase, actor, content_id, payload.payment_method
    )
    return PurchaseResponse.model_validate(purchase)
