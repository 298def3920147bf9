# backend/app/core/enums.py
"""
Core enums for the HubContent platform.

This module contains enumeration types used throughout the application
for type safety and consistency. Status enums that belong to a single
table live next to their model.
"""

from enum import Enum


class RoleName(str, Enum):
    """
    Account types a profile can hold.

    The role is derived from the stored profile (``user_type``), never
    asserted by the client.
    """

    ADMIN = "admin"
    INFLUENCER = "influencer"
    SUBSCRIBER = "subscriber"


class AccountStatus(str, Enum):
    """Profile account status (KYC-aware)."""

    ACTIVE = "active"
    PENDING_KYC = "pending_kyc"
    SUSPENDED = "suspended"
