# backend/app/services/content_service.py
"""
Content publishing workflow.

    draft -> pending_review           (owner submits)
    pending_review -> approved        (admin)
    pending_review -> rejected        (admin)

Transitions use the same conditional-update guard as bookings.
"""

from datetime import datetime, timezone
import logging
from typing import List, Literal

from sqlalchemy.orm import Session

from ..core.exceptions import ForbiddenException, NotFoundException
from ..domain.pricing import to_money
from ..models.content import ContentPost, ContentStatus
from ..principal import ActorContext
from ..repositories.factory import RepositoryFactory
from ..schemas.content import ContentCreate
from .base import BaseService

logger = logging.getLogger(__name__)


class ContentService(BaseService):
    """Creates posts and moves them through moderation."""

    def __init__(self, db: Session):
        super().__init__(db)
        self.repository = RepositoryFactory.create_content_repository(db)

    @BaseService.measure_operation("create_post")
    def create_post(self, actor: ActorContext, data: ContentCreate) -> ContentPost:
        """Create a draft post owned by the acting influencer."""
        if not actor.is_influencer:
            raise ForbiddenException("Only influencers can publish content")
        with self.transaction():
            post = self.repository.create(
                owner_id=actor.id,
                title=data.title,
                description=data.description,
                type=data.type,
                file_url=data.file_url,
                thumbnail_url=data.thumbnail_url,
                is_free=data.is_free,
                is_purchasable=data.is_purchasable,
                price=to_money(data.price),
                status=ContentStatus.DRAFT.value,
            )
        self.logger.info(f"Content {post.id} drafted by {actor.id}")
        return post

    @BaseService.measure_operation("submit_for_review")
    def submit_for_review(self, actor: ActorContext, content_id: str) -> ContentPost:
        post = self.repository.get_by_id(content_id, load_relationships=False)
        if post is None:
            raise NotFoundException("Content not found")
        if post.owner_id != actor.id:
            raise ForbiddenException("Only the owner can submit this post")
        with self.transaction():
            post = self.repository.transition_status(
                content_id,
                ContentStatus.DRAFT,
                ContentStatus.PENDING_REVIEW,
                updated_at=datetime.now(timezone.utc),
            )
        return post

    @BaseService.measure_operation("review_post")
    def review_post(
        self, actor: ActorContext, content_id: str, decision: Literal["approve", "reject"]
    ) -> ContentPost:
        """
        Admin decision on a post awaiting review.

        Raises:
            ForbiddenException: Actor is not an admin
            InvalidTransitionException: Post is not pending review
        """
        if not actor.is_admin:
            raise ForbiddenException("Only admins can review content")
        target = ContentStatus.APPROVED if decision == "approve" else ContentStatus.REJECTED
        with self.transaction():
            post = self.repository.transition_status(
                content_id,
                ContentStatus.PENDING_REVIEW,
                target,
                updated_at=datetime.now(timezone.utc),
            )
        self.logger.info(f"Content {content_id} {target.value} by admin {actor.id}")
        return post

    def list_pending_review(self, actor: ActorContext) -> List[ContentPost]:
        if not actor.is_admin:
            raise ForbiddenException("Only admins can review content")
        return self.repository.list_by_status(ContentStatus.PENDING_REVIEW.value)
