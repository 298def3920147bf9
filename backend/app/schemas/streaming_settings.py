"""Streaming settings schemas."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import Money, StandardizedModel, StrictRequestModel


class StreamingSettingsUpdate(StrictRequestModel):
    """Partial update; omitted fields keep their stored value."""

    is_enabled: Optional[bool] = None
    price_5min: Optional[Money] = None
    price_10min: Optional[Money] = None
    price_15min: Optional[Money] = None
    price_30min: Optional[Money] = None
    price_45min: Optional[Money] = None
    price_60min: Optional[Money] = None
    max_bookings_per_day: Optional[int] = Field(None, ge=1, le=100)


class StreamingSettingsResponse(StandardizedModel):
    influencer_id: str
    is_enabled: bool
    price_5min: Money
    price_10min: Money
    price_15min: Money
    price_30min: Money
    price_45min: Money
    price_60min: Money
    max_bookings_per_day: int
    updated_at: Optional[datetime] = None
