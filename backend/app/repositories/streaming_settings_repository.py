"""Streaming settings data access."""

from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.streaming_settings import StreamingSettings
from .base_repository import BaseRepository


class StreamingSettingsRepository(BaseRepository[StreamingSettings]):
    """Repository for per-influencer streaming settings (keyed by influencer id)."""

    def __init__(self, db: Session):
        super().__init__(db, StreamingSettings)

    def get_for_influencer(self, influencer_id: str) -> Optional[StreamingSettings]:
        try:
            return self.db.get(StreamingSettings, influencer_id)
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading streaming settings for {influencer_id}: {str(e)}")
            raise RepositoryException(f"Failed to load streaming settings: {str(e)}")

    def get_or_create(self, influencer_id: str) -> StreamingSettings:
        """Existing settings, or a disabled row with the default price list."""
        existing = self.get_for_influencer(influencer_id)
        if existing is not None:
            return existing
        return self.create(influencer_id=influencer_id, is_enabled=False)

    def lock_for_influencer(self, influencer_id: str) -> Optional[StreamingSettings]:
        """Re-read the settings row with a row lock held until the transaction ends."""
        try:
            return self.db.get(
                StreamingSettings, influencer_id, with_for_update=True, populate_existing=True
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error locking streaming settings for {influencer_id}: {str(e)}")
            raise RepositoryException(f"Failed to lock streaming settings: {str(e)}")
