# backend/app/repositories/profile_repository.py
"""
Profile Repository for the HubContent platform

Handles Profile data access: lookups by id and the role
check used to validate influencer targets.
"""

import logging

from sqlalchemy.orm import Session

from ..core.enums import RoleName
from ..models.profile import Profile
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ProfileRepository(BaseRepository[Profile]):
    """Repository for Profile data access."""

    def __init__(self, db: Session):
        """Initialize with Profile model."""
        super().__init__(db, Profile)
        self.logger = logging.getLogger(__name__)

    def is_influencer(self, profile_id: str) -> bool:
        return self.exists(id=profile_id, user_type=RoleName.INFLUENCER.value)
