"""Application-wide constants for the HubContent platform."""

from __future__ import annotations

BRAND_NAME = "HubContent"
API_TITLE = f"{BRAND_NAME} API"
API_DESCRIPTION = "Subscriptions, paid content and private live sessions between influencers and subscribers"
API_VERSION = "1.0.0"

# Text constraints
MAX_REASON_LENGTH = 500
MAX_MESSAGE_LENGTH = 4000
MAX_NOTES_LENGTH = 1000

# Query limits
DEFAULT_QUERY_LIMIT = 100

# Money is stored with two decimal places
MONEY_QUANT = "0.01"

# Session tokens carry this prefix so they are easy to spot in logs
SESSION_TOKEN_PREFIX = "session_"
