# backend/app/schemas/__init__.py
"""
Pydantic schemas for the HubContent platform.

Request models forbid unknown fields; response models are built from ORM
rows and serialize money as floats.
"""

from .base import Money, StandardizedModel, StrictRequestModel

# Content, purchases and subscriptions
from .content import (
    ContentAccessResponse,
    ContentCreate,
    ContentItemView,
    ContentPostResponse,
    ContentReviewRequest,
    PaymentRequest,
    PurchaseResponse,
    SubscribeRequest,
    SubscriptionResponse,
)

# Conversation schemas
from .conversation import (
    ConversationCreate,
    ConversationCreateResponse,
    ConversationResponse,
    ConversationSummaryResponse,
    MarkReadResponse,
    MessageCreate,
    MessageResponse,
)

# Live streaming
from .streaming_booking import (
    BookingCreate,
    BookingReasonRequest,
    BookingResponse,
    BookingViewResponse,
    EarningsSummaryResponse,
)
from .streaming_session import (
    SessionJoinResponse,
    SessionStatusResponse,
    SessionTickResponse,
    StreamingSessionResponse,
)
from .streaming_settings import StreamingSettingsResponse, StreamingSettingsUpdate

__all__ = [
    # Base
    "Money",
    "StandardizedModel",
    "StrictRequestModel",
    # Content
    "ContentCreate",
    "ContentReviewRequest",
    "ContentPostResponse",
    "ContentAccessResponse",
    "ContentItemView",
    "PaymentRequest",
    "PurchaseResponse",
    "SubscribeRequest",
    "SubscriptionResponse",
    # Conversations
    "ConversationCreate",
    "ConversationCreateResponse",
    "ConversationResponse",
    "ConversationSummaryResponse",
    "MessageCreate",
    "MessageResponse",
    "MarkReadResponse",
    # Bookings
    "BookingCreate",
    "BookingReasonRequest",
    "BookingResponse",
    "BookingViewResponse",
    "EarningsSummaryResponse",
    # Sessions
    "StreamingSessionResponse",
    "SessionJoinResponse",
    "SessionTickResponse",
    "SessionStatusResponse",
    # Settings
    "StreamingSettingsUpdate",
    "StreamingSettingsResponse",
]
