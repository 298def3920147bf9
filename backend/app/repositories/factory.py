# backend/app/repositories/factory.py
"""
Repository Factory for the HubContent platform

Provides centralized creation of repository instances,
ensuring consistent initialization and dependency injection.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from .base_repository import BaseRepository

# Avoid circular imports
if TYPE_CHECKING:
    from .booking_repository import BookingRepository
    from .content_repository import ContentRepository, PurchaseRepository
    from .conversation_repository import ConversationRepository
    from .message_repository import MessageRepository
    from .payment_repository import PaymentRepository
    from .profile_repository import ProfileRepository
    from .streaming_session_repository import StreamingSessionRepository
    from .streaming_settings_repository import StreamingSettingsRepository
    from .subscription_repository import SubscriptionRepository


class RepositoryFactory:
    """
    Factory class for creating repository instances.

    Centralizes repository creation to ensure consistent initialization
    and makes it easy to swap implementations if needed.
    """

    @staticmethod
    def create_base_repository(db: Session, model) -> BaseRepository:
        """Create a generic base repository for any model."""
        return BaseRepository(db, model)

    @staticmethod
    def create_profile_repository(db: Session) -> "ProfileRepository":
        from .profile_repository import ProfileRepository

        return ProfileRepository(db)

    @staticmethod
    def create_booking_repository(db: Session) -> "BookingRepository":
        """Create repository for booking operations."""
        from .booking_repository import BookingRepository

        return BookingRepository(db)

    @staticmethod
    def create_streaming_session_repository(db: Session) -> "StreamingSessionRepository":
        """Create repository for live session operations."""
        from .streaming_session_repository import StreamingSessionRepository

        return StreamingSessionRepository(db)

    @staticmethod
    def create_streaming_settings_repository(db: Session) -> "StreamingSettingsRepository":
        from .streaming_settings_repository import StreamingSettingsRepository

        return StreamingSettingsRepository(db)

    @staticmethod
    def create_content_repository(db: Session) -> "ContentRepository":
        from .content_repository import ContentRepository

        return ContentRepository(db)

    @staticmethod
    def create_purchase_repository(db: Session) -> "PurchaseRepository":
        from .content_repository import PurchaseRepository

        return PurchaseRepository(db)

    @staticmethod
    def create_subscription_repository(db: Session) -> "SubscriptionRepository":
        from .subscription_repository import SubscriptionRepository

        return SubscriptionRepository(db)

    @staticmethod
    def create_payment_repository(db: Session) -> "PaymentRepository":
        """Create repository for the settled-payment ledger."""
        from .payment_repository import PaymentRepository

        return PaymentRepository(db)

    @staticmethod
    def create_conversation_repository(db: Session) -> "ConversationRepository":
        """Create repository for conversation deduplication and listing."""
        from .conversation_repository import ConversationRepository

        return ConversationRepository(db)

    @staticmethod
    def create_message_repository(db: Session) -> "MessageRepository":
        from .message_repository import MessageRepository

        return MessageRepository(db)
