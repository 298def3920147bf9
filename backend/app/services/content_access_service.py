# backend/app/services/content_access_service.py
"""
Content access lookups.

Gathers the viewer's relationship facts for a post (ownership, an unexpired
active subscription to the owner, a purchase of the post) and hands them to
the pure access gate. Facts are looked up on every call, never stored on the
content row.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.exceptions import NotFoundException
from ..domain.access_gate import AccessFacts, can_view
from ..models.content import ContentPost
from ..principal import ActorContext
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContentItem:
    post: ContentPost
    can_view: bool


class ContentAccessService(BaseService):
    """Answers "may this actor open this post?" from stored facts."""

    def __init__(self, db: Session):
        super().__init__(db)
        self.content_repository = RepositoryFactory.create_content_repository(db)
        self.purchase_repository = RepositoryFactory.create_purchase_repository(db)
        self.subscription_repository = RepositoryFactory.create_subscription_repository(db)

    def facts_for(
        self, actor: Optional[ActorContext], content: ContentPost, now: Optional[datetime] = None
    ) -> AccessFacts:
        if actor is None:
            return AccessFacts()
        moment = now or datetime.now(timezone.utc)
        if actor.id == content.owner_id:
            return AccessFacts(is_owner=True)
        return AccessFacts(
            is_owner=False,
            has_active_subscription_to_owner=self.subscription_repository.has_active(
                actor.id, content.owner_id, moment
            ),
            has_purchased_this_item=self.purchase_repository.has_purchased(actor.id, content.id),
        )

    @BaseService.measure_operation("can_view_content")
    def can_view(self, actor: Optional[ActorContext], content_id: str) -> bool:
        """
        Decide visibility of one post for ``actor``.

        Raises:
            NotFoundException: Unknown content id
        """
        content = self.content_repository.get_by_id(content_id, load_relationships=False)
        if content is None:
            raise NotFoundException("Content not found")
        return can_view(actor, content, self.facts_for(actor, content))

    @BaseService.measure_operation("list_visible_for_owner")
    def list_visible_for_owner(
        self, actor: Optional[ActorContext], owner_id: str
    ) -> List[ContentItem]:
        """
        An influencer's posts annotated with ``can_view`` for the viewer.

        Other viewers get approved posts only; the owner also sees drafts,
        pending and rejected posts. Subscription and purchases are looked up
        once for the whole page.
        """
        is_owner = actor is not None and actor.id == owner_id
        posts = self.content_repository.list_for_owner(owner_id, include_unapproved=is_owner)
        if actor is None:
            return [ContentItem(post=post, can_view=can_view(None, post, None)) for post in posts]

        if is_owner:
            facts = AccessFacts(is_owner=True)
            return [ContentItem(post=post, can_view=can_view(actor, post, facts)) for post in posts]

        subscribed = self.subscription_repository.has_active(
            actor.id, owner_id, datetime.now(timezone.utc)
        )
        purchased = self.purchase_repository.purchased_content_ids(actor.id, [p.id for p in posts])
        return [
            ContentItem(
                post=post,
                can_view=can_view(
                    actor,
                    post,
                    AccessFacts(
                        has_active_subscription_to_owner=subscribed,
                        has_purchased_this_item=post.id in purchased,
                    ),
                ),
            )
            for post in posts
        ]
