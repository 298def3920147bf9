# backend/tests/conftest.py
"""
Pytest configuration for the HubContent backend.

Every test runs against a fresh in-memory SQLite database built from the
model metadata. Settings are switched to testing mode and outbound email is
patched out BEFORE any app import.
"""

import os
import sys

# CRITICAL: Set testing mode BEFORE any app imports!
os.environ["IS_TESTING"] = "true"
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["EMAIL_PROVIDER"] = "console"

# CRITICAL: Mock Resend API globally to prevent real emails in ANY test
import unittest.mock

global_resend_mock = unittest.mock.patch("resend.Emails.send")
mocked_send = global_resend_mock.start()
mocked_send.return_value = {"id": "test-email-id"}

# Add the backend directory to Python path so imports work
backend_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, backend_dir)

from app.core.config import settings

settings.is_testing = True

from fastapi.testclient import TestClient
import pytest
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.dependencies.database import get_db as api_get_db
from app.core.enums import RoleName
from app.database import Base, build_engine, get_db
import app.models  # noqa: F401  (registers every table on Base.metadata)
from app.main import app as fastapi_app
from app.models.profile import Profile
from app.principal import ActorContext
from tests.factories.streaming_builders import create_profile, enable_streaming

# ============================================================================
# TEST DATABASE CONFIGURATION
# ============================================================================

# One shared connection so every session sees the same in-memory database
test_engine = build_engine("sqlite+pysqlite:///:memory:", poolclass=StaticPool)
TestSessionLocal = sessionmaker(
    autocommit=False, autoflush=False, bind=test_engine, expire_on_commit=False
)


@pytest.fixture
def db() -> Session:
    """Fresh schema and session per test."""
    Base.metadata.create_all(bind=test_engine)
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """TestClient whose requests share the test session."""

    def override_get_db():
        yield db

    fastapi_app.dependency_overrides[get_db] = override_get_db
    fastapi_app.dependency_overrides[api_get_db] = override_get_db
    try:
        yield TestClient(fastapi_app)
    finally:
        fastapi_app.dependency_overrides.clear()


# ============================================================================
# PROFILES
# ============================================================================


@pytest.fixture
def influencer(db: Session) -> Profile:
    """Influencer with streaming enabled and the default price list."""
    profile = create_profile(db, RoleName.INFLUENCER, full_name="Ivy Influencer")
    enable_streaming(db, profile)
    return profile


@pytest.fixture
def subscriber(db: Session) -> Profile:
    return create_profile(db, RoleName.SUBSCRIBER, full_name="Sam Subscriber")


@pytest.fixture
def other_subscriber(db: Session) -> Profile:
    return create_profile(db, RoleName.SUBSCRIBER, full_name="Olive Outsider")


@pytest.fixture
def admin(db: Session) -> Profile:
    return create_profile(db, RoleName.ADMIN, full_name="Ada Admin")


@pytest.fixture
def influencer_actor(influencer: Profile) -> ActorContext:
    return ActorContext.from_profile(influencer)


@pytest.fixture
def subscriber_actor(subscriber: Profile) -> ActorContext:
    return ActorContext.from_profile(subscriber)


@pytest.fixture
def other_actor(other_subscriber: Profile) -> ActorContext:
    return ActorContext.from_profile(other_subscriber)


@pytest.fixture
def admin_actor(admin: Profile) -> ActorContext:
    return ActorContext.from_profile(admin)
