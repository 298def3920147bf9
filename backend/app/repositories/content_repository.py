"""Content post and purchase data access."""

import logging
from typing import Any, List, Optional, cast

from sqlalchemy.orm import Session

from ..core.constants import DEFAULT_QUERY_LIMIT
from ..core.exceptions import InvalidTransitionException, NotFoundException
from ..models.content import ContentPost, ContentStatus
from ..models.purchase import UserPurchasedContent
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ContentRepository(BaseRepository[ContentPost]):
    """Repository for content posts."""

    def __init__(self, db: Session):
        super().__init__(db, ContentPost)

    def transition_status(
        self, content_id: str, expected: ContentStatus, target: ContentStatus, **fields: Any
    ) -> ContentPost:
        """Move a post from ``expected`` to ``target`` with a conditional update."""
        updated = self.update_where(
            content_id, {"status": expected.value}, status=target.value, **fields
        )
        post = self.get_fresh(content_id)
        if post is None:
            raise NotFoundException("Content not found")
        if not updated:
            raise InvalidTransitionException(
                entity="Content",
                entity_id=content_id,
                current_status=post.status,
                target_status=target.value,
            )
        return post

    def list_for_owner(
        self,
        owner_id: str,
        include_unapproved: bool = False,
        limit: int = DEFAULT_QUERY_LIMIT,
    ) -> List[ContentPost]:
        """An owner's posts, newest first; approved only unless asked otherwise."""
        query = self.db.query(ContentPost).filter(ContentPost.owner_id == owner_id)
        if not include_unapproved:
            query = query.filter(ContentPost.status == ContentStatus.APPROVED.value)
        query = query.order_by(ContentPost.created_at.desc(), ContentPost.id.desc()).limit(limit)
        return self._execute_query(query)

    def list_by_status(self, status: str, limit: int = DEFAULT_QUERY_LIMIT) -> List[ContentPost]:
        query = (
            self.db.query(ContentPost)
            .filter(ContentPost.status == status)
            .order_by(ContentPost.created_at.asc())
            .limit(limit)
        )
        return self._execute_query(query)


class PurchaseRepository(BaseRepository[UserPurchasedContent]):
    """Repository for one-off content purchases."""

    def __init__(self, db: Session):
        super().__init__(db, UserPurchasedContent)

    def find_for_user_and_content(
        self, user_id: str, content_id: str
    ) -> Optional[UserPurchasedContent]:
        return cast(
            Optional[UserPurchasedContent],
            self.find_one_by(user_id=user_id, content_id=content_id),
        )

    def has_purchased(self, user_id: str, content_id: str) -> bool:
        return self.exists(user_id=user_id, content_id=content_id)

    def purchased_content_ids(self, user_id: str, content_ids: List[str]) -> set[str]:
        """Subset of ``content_ids`` the user owns through a purchase."""
        if not content_ids:
            return set()
        rows = self._execute_query(
            self.db.query(UserPurchasedContent).filter(
                UserPurchasedContent.user_id == user_id,
                UserPurchasedContent.content_id.in_(content_ids),
            )
        )
        return {row.content_id for row in rows}
