# backend/app/core/config.py
import logging
import os
from pathlib import Path
from typing import Annotated, Literal, Optional, Set, Tuple

from dotenv import load_dotenv
from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from .constants import BRAND_NAME


def is_running_tests() -> bool:
    """
    Detect if code is running under pytest.

    PYTEST_CURRENT_TEST is set automatically by pytest during test runs, and is
    not expected to be present in production environments.
    """
    return os.getenv("PYTEST_CURRENT_TEST") is not None


logger = logging.getLogger(__name__)

# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = Path(__file__).parent.parent.parent / ".env"  # Goes up to backend/.env
    logger.debug(f"[CONFIG] Looking for .env at: {env_path}")
    load_dotenv(env_path)


PROD_ENVIRONMENTS: Set[str] = {"prod", "production"}


class Settings(BaseSettings):
    app_name: str = BRAND_NAME
    environment: str = Field(default="development", alias="ENVIRONMENT")
    is_testing: bool = Field(default=False, alias="IS_TESTING")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Store
    database_url: str = Field(
        default="sqlite:///./hubcontent.db",
        alias="DATABASE_URL",
        description="SQLAlchemy URL of the primary store",
    )
    database_echo: bool = Field(default=False, alias="DATABASE_ECHO")

    cors_origins: Annotated[Tuple[str, ...], NoDecode] = Field(
        default=("http://localhost:5173",),
        alias="CORS_ORIGINS",
        description="Comma separated origins allowed to call the API",
    )

    # Actor identity (JWT bearer tokens issued by the auth provider)
    secret_key: SecretStr = Field(
        default=SecretStr("dev-secret-key-change-me"),
        alias="SECRET_KEY",
        description="Secret key for JWT tokens",
    )
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 720  # 12 hours

    # Commercial rules
    platform_fee_rate: float = Field(
        default=0.10,
        alias="PLATFORM_FEE_RATE",
        description="Share of every settled payment retained by the platform",
    )
    subscription_period_days: int = Field(default=30, alias="SUBSCRIPTION_PERIOD_DAYS")

    # Streaming booking windows (minutes)
    booking_min_lead_minutes: int = Field(default=5, alias="BOOKING_MIN_LEAD_MINUTES")
    influencer_early_join_minutes: int = Field(default=5, alias="INFLUENCER_EARLY_JOIN_MINUTES")
    influencer_late_join_minutes: int = Field(default=10, alias="INFLUENCER_LATE_JOIN_MINUTES")
    subscriber_early_join_minutes: int = Field(default=5, alias="SUBSCRIBER_EARLY_JOIN_MINUTES")
    allowed_durations: Annotated[Tuple[int, ...], NoDecode] = Field(
        default=(5, 10, 15, 30, 45, 60),
        alias="ALLOWED_DURATIONS",
        description="Session lengths (minutes) a subscriber may book",
    )
    booking_timezone: str = Field(
        default="UTC",
        alias="BOOKING_TIMEZONE",
        description="IANA zone used to interpret scheduled_date/scheduled_time",
    )

    # Notifications
    notifications_enabled: bool = Field(default=True, alias="NOTIFICATIONS_ENABLED")
    email_provider: Literal["console", "resend"] = Field(
        default="console",
        alias="EMAIL_PROVIDER",
        description="Email provider name",
    )
    resend_api_key: Optional[str] = Field(
        default=None,
        alias="RESEND_API_KEY",
        description="API key for Resend provider (optional)",
    )
    from_email: str = Field(default="HubContent <hello@hubcontent.app>", alias="FROM_EMAIL")

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("platform_fee_rate")
    @classmethod
    def _validate_fee_rate(cls, value: float) -> float:
        if value < 0 or value >= 1:
            raise ValueError("platform_fee_rate must be in [0, 1)")
        return value

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _parse_origins(cls, value: object) -> object:
        if isinstance(value, str):
            return tuple(token.strip() for token in value.split(",") if token.strip())
        return value

    @field_validator("allowed_durations", mode="before")
    @classmethod
    def _parse_durations(cls, value: object) -> object:
        if isinstance(value, str):
            return tuple(int(token) for token in value.split(",") if token.strip())
        return value

    @field_validator("allowed_durations")
    @classmethod
    def _validate_durations(cls, value: Tuple[int, ...]) -> Tuple[int, ...]:
        if not value:
            raise ValueError("allowed_durations must not be empty")
        if any(duration <= 0 for duration in value):
            raise ValueError("allowed_durations must be positive")
        return tuple(sorted(set(value)))

    @field_validator("email_provider", mode="before")
    @classmethod
    def _normalize_provider(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @model_validator(mode="after")
    def _detect_testing(self) -> "Settings":
        if is_running_tests():
            self.is_testing = True
        return self

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() in PROD_ENVIRONMENTS

    def get_database_url(self) -> str:
        """Get the database URL for the current context."""
        return self.database_url


settings = Settings()
