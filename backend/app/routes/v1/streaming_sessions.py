# backend/app/routes/v1/streaming_sessions.py
"""
Live session routes - API v1

Endpoints:
    POST /bookings/{booking_id}     -> Open (influencer) or attach to (subscriber) the session
    GET /bookings/{booking_id}      -> Session status for a booking
    POST /{session_id}/tick         -> Countdown check; ends the session when time is up
    POST /{session_id}/end          -> Influencer ends the session
"""

import asyncio
import logging

from fastapi import APIRouter, Depends
from fastapi.params import Path

from ...api.dependencies.auth import get_current_actor
from ...api.dependencies.services import get_streaming_session_service
from ...principal import ActorContext
from ...schemas.streaming_session import (
    SessionJoinResponse,
    SessionStatusResponse,
    SessionTickResponse,
    StreamingSessionResponse,
)
from ...services.streaming_session_service import StreamingSessionService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["streaming-sessions-v1"])

ULID_PATH_PATTERN = r"^[0-9A-HJKMNP-TV-Z]{26}$"


@router.post("/bookings/{booking_id}", response_model=SessionJoinResponse)
async def ensure_session(
    booking_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    actor: ActorContext = Depends(get_current_actor),
    service: StreamingSessionService = Depends(get_streaming_session_service),
) -> SessionJoinResponse:
    """
    Join the live session of a booking.

    The influencer opens it (idempotent); the subscriber gets ``waiting``
    until the influencer has opened it.
    """
    result = await asyncio.to_thread(service.ensure_session, actor, booking_id)
    return SessionJoinResponse(
        status=result.status,
        session=StreamingSessionResponse.model_validate(result.session) if result.session else None,
        remaining_seconds=result.remaining_seconds,
    )


@router.get("/bookings/{booking_id}", response_model=SessionStatusResponse)
def get_session_status(
    booking_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    actor: ActorContext = Depends(get_current_actor),
    service: StreamingSessionService = Depends(get_streaming_session_service),
) -> SessionStatusResponse:
    result = service.get_session_status(actor, booking_id)
    return SessionStatusResponse(
        booking_id=result.booking_id,
        booking_status=result.booking_status,
        has_active_session=result.has_active_session,
        session=StreamingSessionResponse.model_validate(result.session) if result.session else None,
        remaining_seconds=result.remaining_seconds,
    )


@router.post("/{session_id}/tick", response_model=SessionTickResponse)
async def tick_session(
    session_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    actor: ActorContext = Depends(get_current_actor),
    service: StreamingSessionService = Depends(get_streaming_session_service),
) -> SessionTickResponse:
    tick = await asyncio.to_thread(service.tick, actor, session_id)
    return SessionTickResponse.model_validate(tick)


@router.post("/{session_id}/end", response_model=StreamingSessionResponse)
async def end_session(
    session_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    actor: ActorContext = Depends(get_current_actor),
    service: StreamingSessionService = Depends(get_streaming_session_service),
) -> StreamingSessionResponse:
    session = await asyncio.to_thread(service.end_session, actor, session_id)
    return StreamingSessionResponse.model_validate(session)
