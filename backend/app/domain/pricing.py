"""Price quotes for bookings, subscriptions and purchases."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Union

from app.core.constants import MONEY_QUANT

Number = Union[Decimal, int, float, str]


@dataclass(frozen=True)
class Quote:
    price: Decimal
    platform_fee: Decimal
    influencer_earnings: Decimal


def to_money(value: Number) -> Decimal:
    """Normalise ``value`` to a two-decimal Decimal (half-up)."""
    return Decimal(str(value)).quantize(Decimal(MONEY_QUANT), rounding=ROUND_HALF_UP)


def split_amount(amount: Number, fee_rate: Number) -> Quote:
    """Split a gross amount into platform fee and influencer earnings.

    The fee is rounded to cents and earnings take the remainder, so the two
    always add back up to the price.
    """
    price = to_money(amount)
    fee = to_money(price * Decimal(str(fee_rate)))
    return Quote(price=price, platform_fee=fee, influencer_earnings=price - fee)


def quote_booking(streaming_settings: Any, duration_minutes: int, fee_rate: Number) -> Quote:
    """Quote a live session of ``duration_minutes`` from an influencer's price list.

    Raises ValueError when the influencer does not price that duration.
    """
    price = streaming_settings.price_for(duration_minutes)
    if price is None:
        raise ValueError(f"No price configured for {duration_minutes} minute sessions")
    return split_amount(price, fee_rate)
