"""Application configuration settings.

This module defines the ``Settings`` class using ``pydantic-settings`` to
load configuration from environment variables (and an optional ``.env``
file). It centralises all runtime configuration for the application, such
as the calendar feed URL, the Discord token and HTTP fetch limits.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Configuration values loaded from environment variables.

    Environment variable names map to fields by alias. Only the feed URL is
    mandatory; the Discord token is needed only when running the chat bot.
    """

    # Calendar feed
    feed_url: str = Field(..., alias="FEED_URL")
    fetch_timeout_seconds: float = Field(
        default=30.0,
        alias="FETCH_TIMEOUT_SECONDS",
        description="Timeout (in seconds) of each HTTP request to the calendar feed.",
    )
    fetch_max_retries: int = Field(
        default=3,
        alias="FETCH_MAX_RETRIES",
        description="Number of retries on transient feed errors (timeouts, 429 and 5xx).",
    )
    location_prefix: str = Field(
        default="DLST-",
        alias="LOCATION_PREFIX",
        description="Only events whose LOCATION starts with this marker are room bookings.",
    )

    # Chat bot
    discord_token: str = Field(default="", alias="DISCORD_TOKEN")

    # HTTP API
    host: str = Field(default="127.0.0.1", alias="HOST")
    port: int = Field(default=8000, alias="PORT")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    class Config:
        env_file = ".env"
        extra = "ignore"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings, reading the environment on first use."""
    return Settings()
