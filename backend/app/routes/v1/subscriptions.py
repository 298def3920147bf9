# backend/app/routes/v1/subscriptions.py
"""
Subscription routes - API v1

Endpoints:
    POST /                              -> Subscribe to an influencer
    GET /                               -> Caller's subscriptions
    POST /{subscription_id}/cancel      -> Cancel an active subscription
"""

import asyncio
from typing import List

from fastapi import APIRouter, Depends, status
from fastapi.params import Path

from ...api.dependencies.auth import get_current_actor
from ...api.dependencies.services import get_subscription_service
from ...principal import ActorContext
from ...schemas.content import SubscribeRequest, SubscriptionResponse
from ...services.subscription_service import SubscriptionService

router = APIRouter(tags=["subscriptions-v1"])

ULID_PATH_PATTERN = r"^[0-9A-HJKMNP-TV-Z]{26}$"


@router.post("", response_model=SubscriptionResponse, status_code=status.HTTP_201_CREATED)
async def subscribe(
    payload: SubscribeRequest,
    actor: ActorContext = Depends(get_current_actor),
    service: SubscriptionService = Depends(get_subscription_service),
) -> SubscriptionResponse:
    subscription = await asyncio.to_thread(
        service.subscribe, actor, payload.influencer_id, payload.payment_method
    )
    return SubscriptionResponse.model_validate(subscription)


@router.get("", response_model=List[SubscriptionResponse])
def list_subscriptions(
    actor: ActorContext = Depends(get_current_actor),
    service: SubscriptionService = Depends(get_subscription_service),
) -> List[SubscriptionResponse]:
    return [SubscriptionResponse.model_validate(s) for s in service.list_for_subscriber(actor)]


@router.post("/{subscription_id}/cancel", response_model=SubscriptionResponse)
async def cancel_subscription(
    subscription_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    actor: ActorContext = Depends(get_current_actor),
    service: SubscriptionService = Depends(get_subscription_service),
) -> SubscriptionResponse:
    subscription = await asyncio.to_thread(service.cancel_subscription, actor, subscription_id)
    return SubscriptionResponse.model_validate(subscription)
