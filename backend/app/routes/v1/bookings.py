# backend/app/routes/v1/bookings.py
"""
Streaming booking routes - API v1

Versioned booking endpoints under /api/v1/bookings.
All business logic delegated to BookingService.

Endpoints:
    POST /                          -> Subscriber requests a live session
    GET /                           -> Caller's bookings (as influencer or subscriber)
    GET /earnings                   -> Influencer earnings overview
    GET /{booking_id}               -> Booking with join flags
    POST /{booking_id}/approve      -> Influencer approves
    POST /{booking_id}/reject       -> Influencer rejects with reason
    POST /{booking_id}/cancel       -> Influencer cancels with reason
"""

import asyncio
import logging
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.params import Path

from ...api.dependencies.auth import get_current_actor
from ...api.dependencies.services import get_booking_service
from ...principal import ActorContext
from ...schemas.streaming_booking import (
    BookingCreate,
    BookingReasonRequest,
    BookingResponse,
    BookingViewResponse,
    EarningsSummaryResponse,
)
from ...services.booking_service import BookingService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["bookings-v1"])

ULID_PATH_PATTERN = r"^[0-9A-HJKMNP-TV-Z]{26}$"


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    booking_data: BookingCreate,
    actor: ActorContext = Depends(get_current_actor),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    """Request a private live session (subscriber only)."""
    booking = await asyncio.to_thread(booking_service.create_booking, actor, booking_data)
    return BookingResponse.model_validate(booking)


@router.get("", response_model=List[BookingResponse])
def list_bookings(
    role: Literal["influencer", "subscriber"] = Query("subscriber"),
    status_filter: Optional[str] = Query(None, alias="status"),
    actor: ActorContext = Depends(get_current_actor),
    booking_service: BookingService = Depends(get_booking_service),
) -> List[BookingResponse]:
    """
    List the caller's bookings.

    ``role=influencer`` returns incoming bookings by schedule ascending;
    ``role=subscriber`` returns the caller's own requests, newest first.
    """
    if role == "influencer":
        bookings = booking_service.list_bookings_for_influencer(actor, status=status_filter)
    else:
        bookings = booking_service.list_bookings_for_subscriber(actor, status=status_filter)
    return [BookingResponse.model_validate(b) for b in bookings]


@router.get("/earnings", response_model=EarningsSummaryResponse)
def get_earnings(
    actor: ActorContext = Depends(get_current_actor),
    booking_service: BookingService = Depends(get_booking_service),
) -> EarningsSummaryResponse:
    return EarningsSummaryResponse.model_validate(booking_service.earnings_summary(actor))


@router.get("/{booking_id}", response_model=BookingViewResponse)
def get_booking(
    booking_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    actor: ActorContext = Depends(get_current_actor),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingViewResponse:
    view = booking_service.get_booking_view(actor, booking_id)
    return BookingViewResponse(
        booking=BookingResponse.model_validate(view.booking),
        scheduled_at=view.scheduled_at,
        can_influencer_join=view.can_influencer_join,
        can_subscriber_join=view.can_subscriber_join,
        time_until_start_seconds=view.time_until_start_seconds,
    )


@router.post("/{booking_id}/approve", response_model=BookingResponse)
async def approve_booking(
    booking_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    actor: ActorContext = Depends(get_current_actor),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    booking = await asyncio.to_thread(booking_service.approve_booking, actor, booking_id)
    return BookingResponse.model_validate(booking)


@router.post("/{booking_id}/reject", response_model=BookingResponse)
async def reject_booking(
    payload: BookingReasonRequest,
    booking_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    actor: ActorContext = Depends(get_current_actor),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    booking = await asyncio.to_thread(
        booking_service.reject_booking, actor, booking_id, payload.reason
    )
    return BookingResponse.model_validate(booking)


@router.post("/{booking_id}/cancel", response_model=BookingResponse)
async def cancel_booking(
    payload: BookingReasonRequest,
    booking_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    actor: ActorContext = Depends(get_current_actor),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    booking = await asyncio.to_thread(
        booking_service.cancel_booking, actor, booking_id, payload.reason
    )
    return BookingResponse.model_validate(booking)
