# backend/app/routes/v1/streaming_settings.py
"""
Streaming settings routes - API v1

Endpoints:
    GET /me                 -> Caller's settings (influencer)
    PATCH /me               -> Partial update of the caller's settings
    GET /{influencer_id}    -> Public price list of an influencer
"""

import asyncio

from fastapi import APIRouter, Depends
from fastapi.params import Path

from ...api.dependencies.auth import get_current_actor
from ...api.dependencies.services import get_streaming_settings_service
from ...principal import ActorContext
from ...schemas.streaming_settings import StreamingSettingsResponse, StreamingSettingsUpdate
from ...services.streaming_settings_service import StreamingSettingsService

router = APIRouter(tags=["streaming-settings-v1"])

ULID_PATH_PATTERN = r"^[0-9A-HJKMNP-TV-Z]{26}$"


@router.get("/me", response_model=StreamingSettingsResponse)
async def get_my_settings(
    actor: ActorContext = Depends(get_current_actor),
    service: StreamingSettingsService = Depends(get_streaming_settings_service),
) -> StreamingSettingsResponse:
    streaming_settings = await asyncio.to_thread(service.get, actor)
    return StreamingSettingsResponse.model_validate(streaming_settings)


@router.patch("/me", response_model=StreamingSettingsResponse)
async def update_my_settings(
    payload: StreamingSettingsUpdate,
    actor: ActorContext = Depends(get_current_actor),
    service: StreamingSettingsService = Depends(get_streaming_settings_service),
) -> StreamingSettingsResponse:
    streaming_settings = await asyncio.to_thread(service.update, actor, payload)
    return StreamingSettingsResponse.model_validate(streaming_settings)


@router.get("/{influencer_id}", response_model=StreamingSettingsResponse)
def get_influencer_settings(
    influencer_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    service: StreamingSettingsService = Depends(get_streaming_settings_service),
) -> StreamingSettingsResponse:
    return StreamingSettingsResponse.model_validate(service.get_for_influencer(influencer_id))
