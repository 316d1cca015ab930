# slotbook/core/config.py
import logging
import os
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

_PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = _PROJECT_ROOT / ".env"
    logger.debug("[CONFIG] Looking for .env at: %s (exists=%s)", env_path, env_path.exists())
    load_dotenv(env_path)


class Settings(BaseSettings):
    environment: Literal["development", "test", "production"] = Field(
        default="development",
        description="Deployment environment name",
    )

    # Database
    database_url: str = Field(
        default="sqlite+pysqlite:///./slotbook.db",
        description="SQLAlchemy URL for the bookings store",
    )
    db_pool_size: int = Field(default=5, description="Connections kept open per process")
    db_max_overflow: int = Field(default=5, description="Extra connections allowed under load")
    db_pool_timeout: int = Field(default=5, description="Seconds to wait for a pooled connection")
    db_statement_timeout_ms: int = Field(
        default=15000,
        description="PostgreSQL statement_timeout applied to every connection",
    )
    sqlite_busy_timeout_seconds: float = Field(
        default=30.0,
        description="How long a SQLite writer waits for the write lock before failing",
    )
    sql_echo: bool = Field(default=False, description="Echo SQL statements to the log")

    # Slot generation
    slot_step_minutes: int = Field(
        default=30,
        description="Spacing between candidate start times, counted from opening time",
    )
    default_horizon_days: int = Field(
        default=30,
        description="Number of days (starting today) scanned for available slots",
    )
    max_horizon_days: int = Field(
        default=365,
        description="Upper bound accepted for a caller-supplied horizon",
    )

    # Listing
    default_page_size: int = Field(default=20, description="Page size for a user's bookings")
    admin_page_size: int = Field(default=50, description="Page size for the all-bookings view")

    log_level: str = Field(default="INFO", description="Root log level")

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator(
        "slot_step_minutes",
        "default_horizon_days",
        "max_horizon_days",
        "default_page_size",
        "admin_page_size",
    )
    @classmethod
    def _must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be >= 1")
        return v

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, v: str) -> str:
        level = (v or "INFO").strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {v!r}")
        return level

    @model_validator(mode="after")
    def _check_horizon_bounds(self) -> "Settings":
        if self.default_horizon_days > self.max_horizon_days:
            raise ValueError(
                f"default_horizon_days ({self.default_horizon_days}) exceeds "
                f"max_horizon_days ({self.max_horizon_days})"
            )
        return self

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.lower().startswith("sqlite")

    def get_database_url(self) -> str:
        """Return the configured database URL."""
        return self.database_url


settings = Settings()
