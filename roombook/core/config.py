# roombook/core/config.py
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def parse_csv(value: str | None) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    """
    Global application configuration.

    Values are loaded from environment variables (or a local `.env` file)
    at runtime and cover:
    - DB connection
    - the bookable room set and business-hour rules
    - API keys protecting the meeting endpoints (booking and read-only)
    - SMTP delivery of meeting notifications
    """

    APP_NAME: str = "RoomBook"
    APP_ENV: str = Field("local", description="Environment name: local/test/dev/stage/prod")
    LOG_LEVEL: str = Field("INFO", description="Root log level for the service.")

    DB_URL: str = Field(
        "sqlite+aiosqlite:///./roombook.db",
        description="SQLAlchemy-compatible async database URL",
    )

    API_KEY: str | None = Field(
        default=None,
        description="Booking key: read and write access to /meetings.",
    )
    READONLY_API_KEY: str | None = Field(
        default=None,
        description="Display key: read-only access to /meetings (no booking, editing or cancelling).",
    )

    ROOMS: str = Field(
        "Room A,Room B",
        description="Comma-separated list of bookable rooms.",
    )

    # --- Booking rules ---
    BUSINESS_DAY_START_HOUR: int = Field(
        default=8,
        description="Earliest hour a meeting may start or end.",
    )
    LAST_START_HOUR: int = Field(
        default=16,
        description="Latest hour a meeting may start.",
    )
    BUSINESS_DAY_END_HOUR: int = Field(
        default=17,
        description="Latest hour a meeting may end.",
    )
    SLOT_MINUTES: int = Field(
        default=15,
        description="Granularity of start/end minutes.",
    )
    NOTE_MAX_LENGTH: int = Field(
        default=2000,
        description="Maximum length of the free-text meeting note.",
    )
    ENFORCE_ROOM_AVAILABILITY: bool = Field(
        default=True,
        description=(
            "Re-check room occupancy inside the write transaction and reject "
            "double-bookings. When false, writes trust the caller's prior check."
        ),
    )

    # --- Notifications ---
    NOTIFICATIONS_ENABLED: bool = Field(
        default=True,
        description="Whether create/update/cancel send meeting emails.",
    )

    # --- SMTP / Email configuration ---
    SMTP_HOST: str | None = Field(
        default=None,
        description="SMTP server hostname for sending emails.",
    )
    SMTP_PORT: int = Field(
        default=587,
        description="SMTP server port (usually 587 for TLS).",
    )
    SMTP_USERNAME: str | None = Field(
        default=None,
        description="SMTP username (if authentication is required).",
    )
    SMTP_PASSWORD: str | None = Field(
        default=None,
        description="SMTP password (if authentication is required).",
    )
    SMTP_USE_TLS: bool = Field(
        default=True,
        description="Whether to use STARTTLS when connecting to SMTP.",
    )
    SMTP_FROM_ADDRESS: str | None = Field(
        default=None,
        description="From address used in meeting notification emails.",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    @property
    def room_names(self) -> list[str]:
        return parse_csv(self.ROOMS)


@lru_cache()
def get_settings() -> Settings:
    """
    Cached accessor for application settings.

    Using LRU cache ensures settings are read and validated only once,
    while still being easily importable across the app.
    """
    return Settings()
