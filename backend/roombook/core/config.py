# backend/roombook/core/config.py
from datetime import tzinfo
import logging
import os
from pathlib import Path
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import pytz

from .constants import BRAND_NAME, DEFAULT_RESERVATION_LIMIT, MAX_RESERVATION_LIMIT


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


class Settings(BaseSettings):
    environment: Literal["development", "test", "staging", "production"] = Field(
        default="development",
        alias="ENVIRONMENT",
    )
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    database_url: str = Field(
        default="sqlite:///./roombook.db",
        alias="DATABASE_URL",
        description="SQLAlchemy database URL",
    )
    database_echo: bool = Field(default=False, alias="DATABASE_ECHO")
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        alias="REDIS_URL",
        description="Broker used by Celery for notification and maintenance tasks",
    )

    email_provider: Literal["console", "resend"] = Field(
        default="console",
        alias="EMAIL_PROVIDER",
        description="Email provider name",
    )
    resend_api_key: SecretStr | None = Field(
        default=None,
        alias="RESEND_API_KEY",
        description="API key for Resend provider (required when EMAIL_PROVIDER=resend)",
    )
    email_from_address: str = Field(default="noreply@roombook.local", alias="EMAIL_FROM_ADDRESS")
    email_from_name: str = Field(default=BRAND_NAME, alias="EMAIL_FROM_NAME")
    admin_email: str = Field(default="admin@roombook.local", alias="ADMIN_EMAIL")
    email_max_retries: int = Field(default=3, ge=1, alias="EMAIL_MAX_RETRIES")
    email_retry_delay_seconds: float = Field(default=2.0, ge=0, alias="EMAIL_RETRY_DELAY_SECONDS")

    scheduler_enabled: bool = Field(
        default=True,
        description="Enable the in-process sweep scheduler (disabled automatically during tests)",
    )
    sweep_interval_seconds: int = Field(
        default=3600,
        ge=1,
        description="Seconds between passed-reservation sweeps",
    )
    reminders_enabled: bool = Field(default=True, alias="REMINDERS_ENABLED")
    booking_timezone: str = Field(
        default="UTC",
        alias="BOOKING_TIMEZONE",
        description="Timezone in which availability rules (weekdays, opening hours) are evaluated",
    )

    reservation_list_default_limit: int = Field(default=DEFAULT_RESERVATION_LIMIT, ge=1)
    reservation_list_max_limit: int = Field(default=MAX_RESERVATION_LIMIT, ge=1)

    frontend_url: str = Field(default="http://localhost:3000", alias="FRONTEND_URL")

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> str:
        if value is None:
            return "INFO"
        return str(value).strip().upper()

    @field_validator("booking_timezone")
    @classmethod
    def _validate_timezone(cls, value: str) -> str:
        try:
            pytz.timezone(value)
        except pytz.UnknownTimeZoneError as exc:
            raise ValueError(f"Unknown BOOKING_TIMEZONE: {value}") from exc
        return value

    @model_validator(mode="after")
    def _disable_scheduler_under_tests(self) -> "Settings":
        if is_running_tests():
            self.scheduler_enabled = False
        if self.email_provider == "resend" and not self.resend_api_key:
            logger.warning("EMAIL_PROVIDER=resend but RESEND_API_KEY is not set")
        return self

    @property
    def booking_tz(self) -> tzinfo:
        return pytz.timezone(self.booking_timezone)

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @property
    def email_sender(self) -> str:
        return f"{self.email_from_name} <{self.email_from_address}>"

    def resend_key_value(self) -> Optional[str]:
        return self.resend_api_key.get_secret_value() if self.resend_api_key else None


settings = Settings()
