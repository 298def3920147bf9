# backend/app/api/dependencies/__init__.py
"""
Central export point for all dependencies.

This module re-exports all dependencies from submodules
for convenient access throughout the application.
"""

from .auth import get_current_actor, get_optional_actor
from .database import get_db
from .services import (
    get_booking_service,
    get_content_access_service,
    get_content_service,
    get_conversation_service,
    get_notification_service,
    get_purchase_service,
    get_streaming_session_service,
    get_streaming_settings_service,
    get_subscription_service,
)

__all__ = [
    # Auth
    "get_current_actor",
    "get_optional_actor",
    # Database
    "get_db",
    # Services
    "get_booking_service",
    "get_content_access_service",
    "get_content_service",
    "get_conversation_service",
    "get_notification_service",
    "get_purchase_service",
    "get_streaming_session_service",
    "get_streaming_settings_service",
    "get_subscription_service",
]
