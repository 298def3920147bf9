# backend/app/services/streaming_settings_service.py
"""Influencer streaming toggle, price list and daily booking cap."""

from datetime import datetime, timezone
from decimal import Decimal
import logging

from sqlalchemy.orm import Session

from ..core.exceptions import ForbiddenException, NotFoundException, ValidationException
from ..domain.pricing import to_money
from ..models.streaming_settings import PRICE_COLUMNS, StreamingSettings
from ..principal import ActorContext
from ..repositories.factory import RepositoryFactory
from ..schemas.streaming_settings import StreamingSettingsUpdate
from .base import BaseService

logger = logging.getLogger(__name__)


class StreamingSettingsService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.repository = RepositoryFactory.create_streaming_settings_repository(db)
        self.profile_repository = RepositoryFactory.create_profile_repository(db)

    def _require_influencer(self, actor: ActorContext) -> None:
        if not actor.is_influencer:
            raise ForbiddenException("Only influencers have streaming settings")

    @BaseService.measure_operation("get_streaming_settings")
    def get(self, actor: ActorContext) -> StreamingSettings:
        """The actor's settings; first access creates a disabled row with default prices."""
        self._require_influencer(actor)
        existing = self.repository.get_for_influencer(actor.id)
        if existing is not None:
            return existing
        with self.transaction():
            created = self.repository.get_or_create(actor.id)
        return created

    def get_for_influencer(self, influencer_id: str) -> StreamingSettings:
        """Public view of an influencer's price list."""
        if not self.profile_repository.is_influencer(influencer_id):
            raise NotFoundException("Influencer not found")
        existing = self.repository.get_for_influencer(influencer_id)
        if existing is None:
            # Never configured: the defaults, streaming off
            return StreamingSettings(
                influencer_id=influencer_id,
                is_enabled=False,
                **{column: self._column_default(column) for column in PRICE_COLUMNS.values()},
                max_bookings_per_day=self._column_default("max_bookings_per_day"),
            )
        return existing

    @staticmethod
    def _column_default(column: str):
        default = StreamingSettings.__table__.c[column].default
        return default.arg if default is not None else None

    @BaseService.measure_operation("update_streaming_settings")
    def update(self, actor: ActorContext, data: StreamingSettingsUpdate) -> StreamingSettings:
        """
        Apply a partial update.

        Raises:
            ForbiddenException: Actor is not an influencer
            ValidationException: A negative price
        """
        self._require_influencer(actor)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        for column in PRICE_COLUMNS.values():
            if column in changes:
                price = to_money(changes[column])
                if price < Decimal("0"):
                    raise ValidationException(
                        "Prices must not be negative", code="NEGATIVE_PRICE", details={"field": column}
                    )
                changes[column] = price

        with self.transaction():
            streaming_settings = self.repository.get_or_create(actor.id)
            for column, value in changes.items():
                setattr(streaming_settings, column, value)
            streaming_settings.updated_at = datetime.now(timezone.utc)
            self.repository.flush()

        self.logger.info(f"Streaming settings updated for {actor.id}: {sorted(changes)}")
        return streaming_settings
