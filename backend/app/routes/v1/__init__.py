# backend/app/routes/v1/__init__.py
"""
API v1 Routes

Versioned API endpoints under /api/v1.
"""

from . import (
    bookings,
    content,
    conversations,
    streaming_sessions,
    streaming_settings,
    subscriptions,
)

__all__ = [
    "bookings",
    "content",
    "conversations",
    "streaming_sessions",
    "streaming_settings",
    "subscriptions",
]
