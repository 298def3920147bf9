# backend/app/services/messaging/__init__.py
"""
Messaging helpers.

- ``PendingMessageLog`` tracks optimistic sends until the stored message
  is confirmed by its ``client_ref``.
"""

from app.services.messaging.pending import PendingMessage, PendingMessageLog, PendingState

__all__ = [
    "PendingMessage",
    "PendingMessageLog",
    "PendingState",
]
