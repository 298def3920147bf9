"""
Payment Repository for the HubContent platform

Implements data access for the settled-payment ledger. Rows are written once
by the subscription, purchase and booking flows and never updated.
"""

from decimal import Decimal
import logging
from typing import List

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..core.constants import DEFAULT_QUERY_LIMIT
from ..domain.pricing import Quote, to_money
from ..models.booking import StreamingBooking
from ..models.payment import PAYMENT_STATUS_COMPLETED, Payment
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class PaymentRepository(BaseRepository[Payment]):
    """Repository for settled payments."""

    def __init__(self, db: Session):
        super().__init__(db, Payment)
        self.logger = logging.getLogger(__name__)

    def record(
        self,
        subscriber_id: str,
        influencer_id: str,
        quote: Quote,
        payment_method: str,
        **target: str,
    ) -> Payment:
        """
        Record a settled payment.

        Args:
            subscriber_id: Payer
            influencer_id: Payee
            quote: Amount split into fee and earnings
            payment_method: Free-form method label (card, wallet, ...)
            **target: Exactly one of subscription_id, purchase_id, booking_id

        Returns:
            The created payment
        """
        payment = self.create(
            subscriber_id=subscriber_id,
            influencer_id=influencer_id,
            amount=quote.price,
            platform_fee=quote.platform_fee,
            influencer_earnings=quote.influencer_earnings,
            payment_method=payment_method,
            payment_status=PAYMENT_STATUS_COMPLETED,
            **target,
        )
        self.logger.info(
            f"Recorded payment {payment.id} of {quote.price} from {subscriber_id} to {influencer_id}"
        )
        return payment

    def record_for_booking(self, booking: StreamingBooking, payment_method: str = "card") -> Payment:
        """Settle a completed booking using the split fixed when it was created."""
        price = to_money(booking.price_paid)
        earnings = to_money(booking.influencer_earnings)
        quote = Quote(price=price, platform_fee=price - earnings, influencer_earnings=earnings)
        return self.record(
            booking.subscriber_id,
            booking.influencer_id,
            quote,
            payment_method,
            booking_id=booking.id,
        )

    def list_for_influencer(
        self, influencer_id: str, limit: int = DEFAULT_QUERY_LIMIT
    ) -> List[Payment]:
        query = (
            self.db.query(Payment)
            .filter(Payment.influencer_id == influencer_id)
            .order_by(Payment.created_at.desc(), Payment.id.desc())
            .limit(limit)
        )
        return self._execute_query(query)

    def total_earnings(self, influencer_id: str) -> Decimal:
        total = self._execute_scalar(
            self.db.query(func.coalesce(func.sum(Payment.influencer_earnings), 0)).filter(
                Payment.influencer_id == influencer_id,
                Payment.payment_status == PAYMENT_STATUS_COMPLETED,
            )
        )
        return to_money(total or 0)
