# backend/app/services/purchase_service.py
"""One-off content purchases."""

from datetime import datetime, timezone
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import InvalidTransitionException, NotFoundException, ValidationException
from ..domain.pricing import split_amount, to_money
from ..models.content import ContentStatus
from ..models.purchase import UserPurchasedContent
from ..principal import ActorContext
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)


class PurchaseService(BaseService):
    """Records permanent ownership of a single post plus its payment."""

    def __init__(self, db: Session):
        super().__init__(db)
        self.content_repository = RepositoryFactory.create_content_repository(db)
        self.purchase_repository = RepositoryFactory.create_purchase_repository(db)
        self.payment_repository = RepositoryFactory.create_payment_repository(db)

    def _already_purchased(self, purchase: UserPurchasedContent) -> InvalidTransitionException:
        return InvalidTransitionException(
            entity="Purchase",
            entity_id=purchase.id,
            current_status="purchased",
            target_status="purchased",
            message="You already own this content",
        )

    @BaseService.measure_operation("purchase_content")
    def purchase(
        self, actor: ActorContext, content_id: str, payment_method: str = "card"
    ) -> UserPurchasedContent:
        """
        Buy ``content_id`` for the acting user.

        Raises:
            NotFoundException: Unknown content, or content not approved
            ValidationException: Free, not purchasable or own content
            InvalidTransitionException: ALREADY_IN_STATE when already bought
        """
        content = self.content_repository.get_by_id(content_id, load_relationships=False)
        if content is None or content.status != ContentStatus.APPROVED.value:
            raise NotFoundException("Content not found")
        if content.owner_id == actor.id:
            raise ValidationException("You cannot buy your own content", code="OWN_CONTENT")
        if content.is_free:
            raise ValidationException("This content is free", code="CONTENT_IS_FREE")
        if not content.is_purchasable or to_money(content.price) <= 0:
            raise ValidationException("This content is not for sale", code="NOT_PURCHASABLE")

        existing = self.purchase_repository.find_for_user_and_content(actor.id, content_id)
        if existing is not None:
            raise self._already_purchased(existing)

        quote = split_amount(content.price, settings.platform_fee_rate)
        with self.transaction():
            try:
                with self.purchase_repository.savepoint():
                    purchase = self.purchase_repository.create(
                        user_id=actor.id,
                        content_id=content_id,
                        price_paid=quote.price,
                        created_at=datetime.now(timezone.utc),
                    )
            except IntegrityError:
                winner = self.purchase_repository.find_for_user_and_content(actor.id, content_id)
                if winner is None:
                    raise
                raise self._already_purchased(winner)

            self.payment_repository.record(
                actor.id,
                content.owner_id,
                quote,
                payment_method,
                purchase_id=purchase.id,
            )

        self.logger.info(f"Content {content_id} purchased by {actor.id} for {quote.price}")
        return purchase
