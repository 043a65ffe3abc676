"""
Centralized configuration for the notification service.

Values come from environment variables (loaded from .env files at startup)
and are gathered into an explicit NotifyConfig that callers construct and
pass around. Nothing here is cached globally.
"""

import os
from dataclasses import dataclass

DEFAULT_DELIVERED_HISTORY_LIMIT = 64


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").lower() in ("true", "1", "yes")


def get_database_url() -> str:
    """
    Get the sync database URL for the APScheduler job store.

    Uses NOTIFY_DATABASE_URL, falling back to DATABASE_URL. Empty string means
    jobs are kept in memory only.
    """
    database_url = os.environ.get("NOTIFY_DATABASE_URL") or os.environ.get(
        "DATABASE_URL", ""
    )
    # APScheduler needs sync URL (not asyncpg)
    if "postgresql+asyncpg://" in database_url:
        database_url = database_url.replace("postgresql+asyncpg://", "postgresql://")

    # Add connection timeout to prevent hanging when DB is unavailable
    if database_url.startswith("postgresql://"):
        if "?" not in database_url:
            database_url += "?connect_timeout=5"
        elif "connect_timeout" not in database_url:
            database_url += "&connect_timeout=5"

    return database_url


def get_timezone_name() -> str:
    """Wall-clock timezone used for calendar triggers."""
    return os.getenv("NOTIFY_TIMEZONE", "UTC")


def get_delivered_history_limit() -> int:
    """How many delivered notifications the center remembers."""
    return int(
        os.getenv("NOTIFY_DELIVERED_HISTORY_LIMIT", str(DEFAULT_DELIVERED_HISTORY_LIMIT))
    )


def get_discord_channel_id() -> str | None:
    """Discord channel that receives delivered notifications, if any."""
    return os.environ.get("NOTIFY_DISCORD_CHANNEL_ID") or None


def get_discord_bot_token() -> str | None:
    return os.environ.get("DISCORD_BOT_TOKEN") or None


def is_discord_bot_disabled() -> bool:
    """Check if the Discord bot is disabled (--no-bot flag or DISABLE_DISCORD_BOT env)."""
    return _env_flag("DISABLE_DISCORD_BOT")


def get_api_port() -> int:
    """Get API server port from env or default."""
    return int(os.getenv("API_PORT", "8000"))


def get_sentry_dsn() -> str | None:
    return os.environ.get("SENTRY_DSN") or None


@dataclass(frozen=True)
class NotifyConfig:
    """Settings for building a notification center and client."""

    database_url: str = ""
    timezone_name: str = "UTC"
    delivered_history_limit: int = DEFAULT_DELIVERED_HISTORY_LIMIT
    discord_channel_id: str | None = None

    def __post_init__(self):
        if self.delivered_history_limit < 1:
            raise ValueError(
                f"delivered_history_limit must be positive, got {self.delivered_history_limit}"
            )

    @classmethod
    def from_env(cls) -> "NotifyConfig":
        return cls(
            database_url=get_database_url(),
            timezone_name=get_timezone_name(),
            delivered_history_limit=get_delivered_history_limit(),
            discord_channel_id=get_discord_channel_id(),
        )
