"""
Settled payment ledger.

Payments are recorded as already-settled facts (no gateway integration);
each row splits the gross amount into the platform fee and the influencer's
earnings and points at exactly one thing that was paid for.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

import ulid
from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base

PAYMENT_STATUS_COMPLETED = "completed"


class Payment(Base):
    """A settled payment from a subscriber to an influencer."""

    __tablename__ = "payments"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    subscriber_id: Mapped[str] = mapped_column(String(26), ForeignKey("profiles.id"), nullable=False, index=True)
    influencer_id: Mapped[str] = mapped_column(String(26), ForeignKey("profiles.id"), nullable=False, index=True)

    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    platform_fee: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    influencer_earnings: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    payment_method: Mapped[str] = mapped_column(String(50), nullable=False, default="card")
    payment_status: Mapped[str] = mapped_column(String(20), nullable=False, default=PAYMENT_STATUS_COMPLETED)

    # What was paid for (exactly one is set)
    subscription_id: Mapped[Optional[str]] = mapped_column(String(26), ForeignKey("subscriptions.id"), nullable=True)
    purchase_id: Mapped[Optional[str]] = mapped_column(
        String(26), ForeignKey("user_purchased_content.id"), nullable=True
    )
    booking_id: Mapped[Optional[str]] = mapped_column(String(26), ForeignKey("streaming_bookings.id"), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_payments_amount_non_negative"),
        CheckConstraint(
            "(CASE WHEN subscription_id IS NULL THEN 0 ELSE 1 END)"
            " + (CASE WHEN purchase_id IS NULL THEN 0 ELSE 1 END)"
            " + (CASE WHEN booking_id IS NULL THEN 0 ELSE 1 END) = 1",
            name="ck_payments_single_target",
        ),
    )

    def __repr__(self) -> str:
        return f"<Payment {self.id} amount={self.amount} status={self.payment_status}>"
