"""Per-influencer live streaming configuration and price list."""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, Optional

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String

from ..database import Base

# Duration (minutes) -> price column
PRICE_COLUMNS: Dict[int, str] = {
    5: "price_5min",
    10: "price_10min",
    15: "price_15min",
    30: "price_30min",
    45: "price_45min",
    60: "price_60min",
}


class StreamingSettings(Base):
    """An influencer's streaming toggle, price per duration and daily cap."""

    __tablename__ = "streaming_settings"

    influencer_id = Column(
        String(26), ForeignKey("profiles.id", ondelete="CASCADE"), primary_key=True
    )
    is_enabled = Column(Boolean, nullable=False, default=False)
    price_5min = Column(Numeric(10, 2), nullable=False, default=Decimal("50.00"))
    price_10min = Column(Numeric(10, 2), nullable=False, default=Decimal("90.00"))
    price_15min = Column(Numeric(10, 2), nullable=False, default=Decimal("120.00"))
    price_30min = Column(Numeric(10, 2), nullable=False, default=Decimal("200.00"))
    price_45min = Column(Numeric(10, 2), nullable=False, default=Decimal("280.00"))
    price_60min = Column(Numeric(10, 2), nullable=False, default=Decimal("350.00"))
    max_bookings_per_day = Column(Integer, nullable=False, default=5)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=True,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def price_for(self, duration_minutes: int) -> Optional[Decimal]:
        """Listed price for ``duration_minutes`` or None when not offered."""
        column = PRICE_COLUMNS.get(duration_minutes)
        if column is None:
            return None
        value = getattr(self, column)
        return Decimal(str(value)) if value is not None else None

    def __repr__(self) -> str:
        return f"<StreamingSettings influencer={self.influencer_id} enabled={self.is_enabled}>"
