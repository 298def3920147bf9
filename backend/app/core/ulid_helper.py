"""ULID generation helper utilities."""

import secrets

import ulid

from .constants import SESSION_TOKEN_PREFIX


def generate_ulid() -> str:
    """Generate a new ULID string."""
    return str(ulid.ULID())


def generate_session_token() -> str:
    """Generate an unguessable live-session token."""
    return f"{SESSION_TOKEN_PREFIX}{generate_ulid().lower()}_{secrets.token_hex(8)}"
