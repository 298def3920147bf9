# backend/app/repositories/__init__.py
"""
Repository Pattern Implementation for the HubContent platform

This package provides the repository layer for data access,
separating business logic from database queries.

Key Components:
- BaseRepository: Foundation for all repositories with generic CRUD operations
  plus savepoints and conditional updates
- RepositoryFactory: Factory for creating repository instances
- BookingRepository: Guarded booking status transitions and listings
- StreamingSessionRepository: Active-session get-or-create and finalization
- ConversationRepository: One conversation per unordered participant pair

Usage:
    from app.repositories import RepositoryFactory

    # In a service:
    repository = RepositoryFactory.create_booking_repository(db)
    booking = repository.transition_status(booking_id, BookingStatus.PENDING, BookingStatus.APPROVED)
"""

from .base_repository import BaseRepository
from .booking_repository import BookingRepository
from .content_repository import ContentRepository, PurchaseRepository
from .conversation_repository import ConversationRepository
from .factory import RepositoryFactory
from .message_repository import MessageRepository
from .payment_repository import PaymentRepository
from .profile_repository import ProfileRepository
from .streaming_session_repository import StreamingSessionRepository
from .streaming_settings_repository import StreamingSettingsRepository
from .subscription_repository import SubscriptionRepository

__all__ = [
    "BaseRepository",
    "RepositoryFactory",
    "BookingRepository",
    "ContentRepository",
    "PurchaseRepository",
    "ConversationRepository",
    "MessageRepository",
    "PaymentRepository",
    "ProfileRepository",
    "StreamingSessionRepository",
    "StreamingSettingsRepository",
    "SubscriptionRepository",
]
