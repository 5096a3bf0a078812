"""Configuration management for the twtxt feed reader."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from twtfeed.models import Link


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="TWT_", extra="ignore")

    # Local feed
    twtxt_path: str = Field(default="")
    nick: str = Field(default="")
    feed_url: str = Field(default="")

    # Followed feeds, as a JSON list of {"text": nick, "url": feed url}
    follows: list[Link] = Field(default_factory=list)

    # Fetching
    fetch_timeout_seconds: float = 15.0
    user_agent: str = "twtfeed/1.0 (+https://twtxt.dev)"

    # Redis
    redis_url: str = "redis://localhost:6379/0"

    # Feed cache
    feed_ttl_seconds: int = 300  # 5 minutes
    feed_ttl_splay_max: int = 60  # up to 1 minute randomized
    feed_stale_ttl_seconds: int = 86400  # validators kept for a day

    # Pagination
    page_size_default: int = 24
    page_size_max: int = 100

    # CORS
    frontend_origin: str = "http://localhost:5173"

    # Environment
    env: str = Field(default="dev", pattern="^(dev|prod)$")
    log_level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR)$")


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get cached settings instance (singleton pattern)."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
