# backend/app/api/dependencies/auth.py
"""
Authentication dependencies.

The bearer token only names a profile; the actor's role is always read from
the stored profile, never from a claim.
"""

import asyncio
import logging
from typing import Optional

from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session

from ...auth import get_token_subject, get_token_subject_optional
from ...principal import ActorContext
from ...repositories.factory import RepositoryFactory
from .database import get_db

logger = logging.getLogger(__name__)


def _load_actor(db: Session, profile_id: str) -> Optional[ActorContext]:
    profile = RepositoryFactory.create_profile_repository(db).get_by_id(
        profile_id, load_relationships=False
    )
    if profile is None:
        return None
    if not profile.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is suspended")
    return ActorContext.from_profile(profile)


async def get_current_actor(
    profile_id: str = Depends(get_token_subject),
    db: Session = Depends(get_db),
) -> ActorContext:
    """
    Resolve the authenticated actor.

    Raises:
        HTTPException: 401 if the token names no profile, 403 if suspended
    """
    actor = await asyncio.to_thread(_load_actor, db, profile_id)
    if actor is None:
        logger.warning(f"Token subject {profile_id} has no profile")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return actor


async def get_optional_actor(
    profile_id: Optional[str] = Depends(get_token_subject_optional),
    db: Session = Depends(get_db),
) -> Optional[ActorContext]:
    """The actor when a valid token is present, otherwise None (anonymous viewer)."""
    if profile_id is None:
        return None
    return await asyncio.to_thread(_load_actor, db, profile_id)
