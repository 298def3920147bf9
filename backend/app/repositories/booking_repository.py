# backend/app/repositories/booking_repository.py
"""
Booking Repository for the HubContent platform

Implements all data access operations for streaming bookings.

This repository handles:
- Booking CRUD operations
- Guarded status transitions (conditional updates)
- Subscriber / influencer booking listings
- Per-day capacity counting
- Earnings aggregation
"""

from datetime import date
from decimal import Decimal
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session, joinedload

from ..core.constants import DEFAULT_QUERY_LIMIT
from ..core.exceptions import InvalidTransitionException, NotFoundException, RepositoryException
from ..domain.pricing import to_money
from ..models.booking import BookingStatus, StreamingBooking
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)

OPEN_BOOKING_STATUSES = (BookingStatus.PENDING.value, BookingStatus.APPROVED.value)


class BookingRepository(BaseRepository[StreamingBooking]):
    """
    Repository for streaming booking data access.

    Status changes never assign ``booking.status`` directly; they go through
    ``transition_status`` so two racing requests cannot both apply.
    """

    def __init__(self, db: Session):
        """Initialize with StreamingBooking model."""
        super().__init__(db, StreamingBooking)
        self.logger = logging.getLogger(__name__)

    # Status Management Methods

    def transition_status(
        self,
        booking_id: str,
        expected: BookingStatus,
        target: BookingStatus,
        **fields: Any,
    ) -> StreamingBooking:
        """
        Move a booking from ``expected`` to ``target`` atomically.

        Issues ``UPDATE ... WHERE id = :id AND status = :expected``. When no
        row matches, the booking is re-read to report why.

        Args:
            booking_id: ID of the booking
            expected: Status the booking must currently hold
            target: Status to move to
            **fields: Extra columns written in the same statement

        Returns:
            The refreshed booking

        Raises:
            NotFoundException: If booking not found
            InvalidTransitionException: If the booking is not in ``expected``
        """
        updated = self.update_where(
            booking_id,
            {"status": expected.value},
            status=target.value,
            **fields,
        )
        booking = self.get_fresh(booking_id)
        if booking is None:
            raise NotFoundException(f"Booking with id {booking_id} not found")
        if not updated:
            raise InvalidTransitionException(
                entity="Booking",
                entity_id=booking_id,
                current_status=booking.status,
                target_status=target.value,
            )
        self.logger.info(f"Booking {booking_id} moved {expected.value} -> {target.value}")
        return booking

    # Queries

    def list_for_influencer(
        self,
        influencer_id: str,
        status: Optional[str] = None,
        limit: int = DEFAULT_QUERY_LIMIT,
    ) -> List[StreamingBooking]:
        """Influencer's bookings, earliest scheduled first."""
        query = self.db.query(StreamingBooking).filter(
            StreamingBooking.influencer_id == influencer_id
        )
        if status:
            query = query.filter(StreamingBooking.status == status)
        query = query.order_by(
            StreamingBooking.scheduled_date.asc(),
            StreamingBooking.scheduled_time.asc(),
            StreamingBooking.id.asc(),
        ).limit(limit)
        return self._execute_query(query)

    def list_for_subscriber(
        self,
        subscriber_id: str,
        status: Optional[str] = None,
        limit: int = DEFAULT_QUERY_LIMIT,
    ) -> List[StreamingBooking]:
        """Subscriber's bookings, latest scheduled first."""
        query = self.db.query(StreamingBooking).filter(
            StreamingBooking.subscriber_id == subscriber_id
        )
        if status:
            query = query.filter(StreamingBooking.status == status)
        query = query.order_by(
            StreamingBooking.scheduled_date.desc(),
            StreamingBooking.scheduled_time.desc(),
            StreamingBooking.id.desc(),
        ).limit(limit)
        return self._execute_query(query)

    def count_open_for_influencer_on_date(self, influencer_id: str, day: date) -> int:
        """Pending and approved bookings an influencer holds on ``day``."""
        try:
            return (
                self.db.query(StreamingBooking)
                .filter(
                    StreamingBooking.influencer_id == influencer_id,
                    StreamingBooking.scheduled_date == day,
                    StreamingBooking.status.in_(OPEN_BOOKING_STATUSES),
                )
                .count()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error counting bookings for {influencer_id} on {day}: {str(e)}")
            raise RepositoryException(f"Failed to count bookings: {str(e)}")

    def count_by_status_for_influencer(self, influencer_id: str) -> Dict[str, int]:
        try:
            rows = (
                self.db.query(StreamingBooking.status, func.count(StreamingBooking.id))
                .filter(StreamingBooking.influencer_id == influencer_id)
                .group_by(StreamingBooking.status)
                .all()
            )
            return {status: int(count) for status, count in rows}
        except SQLAlchemyError as e:
            self.logger.error(f"Error counting bookings by status: {str(e)}")
            raise RepositoryException(f"Failed to count bookings by status: {str(e)}")

    def sum_completed_earnings(self, influencer_id: str) -> Decimal:
        """Total influencer earnings over completed bookings."""
        total = self._execute_scalar(
            self.db.query(func.coalesce(func.sum(StreamingBooking.influencer_earnings), 0)).filter(
                StreamingBooking.influencer_id == influencer_id,
                StreamingBooking.status == BookingStatus.COMPLETED.value,
            )
        )
        return to_money(total or 0)

    # Helper method overrides

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(
            joinedload(StreamingBooking.subscriber),
            joinedload(StreamingBooking.influencer),
        )
