# salon_booking/core/config.py
"""
Runtime configuration for the salon booking backend.

Values come from the environment (and a local ``.env`` outside CI).
This module only holds configuration; engines and sessions are built
explicitly by ``salon_booking.database`` and passed to services.
"""

from datetime import time
import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = Path(__file__).resolve().parents[2] / ".env"
    if env_path.exists():
        logger.debug("[CONFIG] Loading .env from %s", env_path)
        load_dotenv(env_path)


def is_running_tests() -> bool:
    """Detect if code is running under pytest."""
    return os.getenv("PYTEST_CURRENT_TEST") is not None


class Settings(BaseSettings):
    model_config = SettingsConfigDict(extra="ignore", case_sensitive=False)

    environment: str = Field(default="development", alias="SALON_ENV")

    # Database
    database_url: str = Field(default="sqlite:///./salon.db", alias="DATABASE_URL")
    test_database_url: Optional[str] = Field(default=None, alias="TEST_DATABASE_URL")
    db_echo: bool = Field(default=False, alias="DB_ECHO")
    db_pool_size: int = Field(default=5, ge=1, alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=10, ge=0, alias="DB_MAX_OVERFLOW")
    db_pool_timeout: int = Field(default=10, ge=1, alias="DB_POOL_TIMEOUT")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Booking rules
    slot_grid_start: time = Field(default=time(9, 0), alias="SLOT_GRID_START")
    slot_grid_end: time = Field(default=time(20, 0), alias="SLOT_GRID_END")
    slot_step_minutes: int = Field(default=30, gt=0, alias="SLOT_STEP_MINUTES")
    loyalty_points_divisor: int = Field(default=10000, gt=0, alias="LOYALTY_POINTS_DIVISOR")

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unsupported log level: {v}")
        return level

    @model_validator(mode="after")
    def _check_slot_grid(self) -> "Settings":
        if self.slot_grid_end <= self.slot_grid_start:
            raise ValueError("SLOT_GRID_END must be after SLOT_GRID_START")
        return self

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() in {"prod", "production"}

    def get_database_url(self) -> str:
        """Return the URL for the current process, preferring the test DB under pytest."""
        if is_running_tests() and self.test_database_url:
            return self.test_database_url
        return self.database_url


settings = Settings()
