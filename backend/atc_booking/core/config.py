# backend/atc_booking/core/config.py
import logging
import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv
from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


def is_running_tests() -> bool:
    """
    Detect if code is running under pytest.

    PYTEST_CURRENT_TEST is set automatically by pytest during test runs, and is
    not expected to be present in production environments.
    """
    return os.getenv("PYTEST_CURRENT_TEST") is not None


# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = Path(__file__).parent.parent.parent / ".env"  # Goes up to backend/.env
    logger.debug(f"[CONFIG] Looking for .env at: {env_path}")
    load_dotenv(env_path)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    environment: str = Field(default="local", alias="ENVIRONMENT")
    is_testing: bool = False  # Set to True when running tests
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Session tokens
    secret_key: SecretStr = Field(
        default=SecretStr("dev-secret-change-me"),
        validation_alias=AliasChoices("SECRET_KEY", "TOKEN_SECRET"),
    )
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 720  # 12 hours

    # Database
    database_url: str = Field(default="sqlite:///./atc_booking.db", alias="DATABASE_URL")

    # Admission rules
    max_future_bookings_per_user: int = Field(
        default=3,
        ge=1,
        alias="MAX_FUTURE_BOOKINGS_PER_USER",
        description="Maximum number of not-yet-ended bookings a single controller may hold",
    )
    booking_lock_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        alias="BOOKING_LOCK_TIMEOUT_SECONDS",
        description="Upper bound on waiting for the per-position admission lock",
    )

    # Position catalog
    catalog_cache_ttl_seconds: int = Field(
        default=300,
        ge=0,
        alias="CATALOG_CACHE_TTL_SECONDS",
        description="Staleness window for cached position capacity and rating requirements",
    )
    seed_on_startup: bool = Field(default=True, alias="SEED_ON_STARTUP")

    # IVAO identity authority
    ivao_api_base: str = Field(default="https://api.ivao.aero/v2", alias="IVAO_API_BASE")
    ivao_api_key: SecretStr = Field(default=SecretStr(""), alias="IVAO_API_KEY")
    ivao_timeout_seconds: float = Field(default=5.0, gt=0, alias="IVAO_TIMEOUT_SECONDS")
    ivao_fake: bool = Field(
        default=False,
        alias="IVAO_FAKE",
        description="Use the in-memory IVAO client (local development only)",
    )
    identity_fallback_placeholder: bool = Field(
        default=True,
        alias="IDENTITY_FALLBACK_PLACEHOLDER",
        description="Create a NO_RATING placeholder user when IVAO is rate limited or down",
    )

    # Comma-separated origins for CORS. If empty, uses localhost defaults.
    cors_origins: str = Field(default="", alias="CORS_ORIGINS")

    @field_validator("database_url", mode="after")
    @classmethod
    def normalize_database_url(cls, v: str) -> str:
        """Render and others give postgres://; SQLAlchemy expects postgresql+psycopg2://."""
        if v and v.startswith("postgres://"):
            return "postgresql+psycopg2://" + v[len("postgres://") :]
        return v

    @property
    def allowed_origins(self) -> List[str]:
        if self.cors_origins:
            return [o.strip() for o in self.cors_origins.split(",") if o.strip()]
        return ["http://localhost:3000", "http://127.0.0.1:3000"]


settings = Settings()
