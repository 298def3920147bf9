# backend/app/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

This module provides factory functions that create service instances
with their required dependencies properly injected.
"""

import logging

from fastapi import Depends
from sqlalchemy.orm import Session

from ...services.booking_service import BookingService
from ...services.content_access_service import ContentAccessService
from ...services.content_service import ContentService
from ...services.conversation_service import ConversationService
from ...services.notification_service import NotificationService
from ...services.purchase_service import PurchaseService
from ...services.streaming_session_service import StreamingSessionService
from ...services.streaming_settings_service import StreamingSettingsService
from ...services.subscription_service import SubscriptionService
from ...services.template_service import TemplateService
from .database import get_db

logger = logging.getLogger(__name__)


def get_notification_service(db: Session = Depends(get_db)) -> NotificationService:
    """
    Get notification service instance.

    Args:
        db: Database session

    Returns:
        NotificationService instance
    """
    # The email service is built on first send so a misconfigured provider
    # never blocks the booking request itself
    return NotificationService(db, TemplateService())


def get_booking_service(
    db: Session = Depends(get_db),
    notification_service: NotificationService = Depends(get_notification_service),
) -> BookingService:
    return BookingService(db, notification_service)


def get_streaming_session_service(db: Session = Depends(get_db)) -> StreamingSessionService:
    return StreamingSessionService(db)


def get_conversation_service(db: Session = Depends(get_db)) -> ConversationService:
    return ConversationService(db)


def get_content_access_service(db: Session = Depends(get_db)) -> ContentAccessService:
    return ContentAccessService(db)


def get_content_service(db: Session = Depends(get_db)) -> ContentService:
    return ContentService(db)


def get_purchase_service(db: Session = Depends(get_db)) -> PurchaseService:
    return PurchaseService(db)


def get_subscription_service(db: Session = Depends(get_db)) -> SubscriptionService:
    return SubscriptionService(db)


def get_streaming_settings_service(db: Session = Depends(get_db)) -> StreamingSettingsService:
    return StreamingSettingsService(db)
