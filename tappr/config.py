"""
Tappr — Application Configuration

Loads all configuration from environment variables (and an optional .env file)
using Pydantic Settings.  A cached ``get_settings()`` helper is provided so that
FastAPI dependency-injection (and any other call-site) always receives the same
validated instance without re-parsing the environment on every request.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

STORE_BACKENDS = ("memory", "sql", "firestore")


class Settings(BaseSettings):
    """Central configuration for the Tappr service."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------ #
    # Document store
    # ------------------------------------------------------------------ #
    STORE_BACKEND: str = "memory"

    # SQL backend – Cloud SQL via Unix socket or a plain DATABASE_URL
    DATABASE_URL: str = ""
    DB_USER: str = "tappr_user"
    DB_PASSWORD: str = ""
    DB_NAME: str = "tappr"
    CLOUD_SQL_INSTANCE_CONNECTION: str = ""
    CLOUD_SQL_USE_UNIX_SOCKET: bool = False

    # Firestore backend
    FIREBASE_CREDENTIALS_PATH: str = ""
    FIREBASE_PROJECT_ID: str = ""

    # ------------------------------------------------------------------ #
    # Compatibility discovery
    # ------------------------------------------------------------------ #
    DISCOVERY_QUESTION_COUNT: int = 5
    DISCOVERY_SESSION_TTL_HOURS: int = 48
    EXPIRY_SWEEP_INTERVAL_SECONDS: int = 900  # 0 disables the background sweep

    # ------------------------------------------------------------------ #
    # Cards
    # ------------------------------------------------------------------ #
    CARD_BASE_URL: str = "https://tappr.uk/c"

    # ------------------------------------------------------------------ #
    # Runtime environment
    # ------------------------------------------------------------------ #
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # ------------------------------------------------------------------ #
    # CORS
    # ------------------------------------------------------------------ #
    ALLOWED_ORIGINS: str = "*"

    # ------------------------------------------------------------------ #
    # Derived helpers
    # ------------------------------------------------------------------ #
    @property
    def allowed_origins_list(self) -> list[str]:
        """Return ALLOWED_ORIGINS as a list split on commas."""
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",")]

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @field_validator("STORE_BACKEND")
    @classmethod
    def _backend_must_be_known(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in STORE_BACKENDS:
            raise ValueError(
                f"STORE_BACKEND must be one of {', '.join(STORE_BACKENDS)}, got {v!r}"
            )
        return v

    @field_validator("DISCOVERY_QUESTION_COUNT", "DISCOVERY_SESSION_TTL_HOURS")
    @classmethod
    def _must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"Value must be at least 1, got {v}")
        return v

    @field_validator("EXPIRY_SWEEP_INTERVAL_SECONDS")
    @classmethod
    def _must_not_be_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"Sweep interval cannot be negative, got {v}")
        return v


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached, validated ``Settings`` instance.

    Using ``@lru_cache`` guarantees the .env file is read and validated
    exactly once per process lifetime::

        from tappr.config import get_settings
        settings = get_settings()
    """
    return Settings()
