"""
Database models for the HubContent platform.

This module exports all SQLAlchemy models used in the application.
The models are organized by functionality:
- Profiles (admins, influencers, subscribers)
- Content posts, purchases and subscriptions
- Live streaming settings, bookings and sessions
- Conversations and messages
- Settled payments
"""

from .booking import TERMINAL_BOOKING_STATUSES, BookingStatus, StreamingBooking
from .content import ContentPost, ContentStatus
from .conversation import Conversation, make_pair_key
from .message import Message
from .payment import PAYMENT_STATUS_COMPLETED, Payment
from .profile import Profile
from .purchase import UserPurchasedContent
from .streaming_session import SessionEndReason, StreamingSession
from .streaming_settings import PRICE_COLUMNS, StreamingSettings
from .subscription import Subscription, SubscriptionStatus

__all__ = [
    # Profiles
    "Profile",
    # Content
    "ContentPost",
    "ContentStatus",
    "UserPurchasedContent",
    "Subscription",
    "SubscriptionStatus",
    # Live streaming
    "StreamingSettings",
    "PRICE_COLUMNS",
    "StreamingBooking",
    "BookingStatus",
    "TERMINAL_BOOKING_STATUSES",
    "StreamingSession",
    "SessionEndReason",
    # Messaging
    "Conversation",
    "Message",
    "make_pair_key",
    # Payments
    "Payment",
    "PAYMENT_STATUS_COMPLETED",
]
