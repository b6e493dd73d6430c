"""
Configuration management for the News Pulse frontend.
Uses Pydantic Settings to load configuration from environment variables.
"""
from typing import Optional
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Backend REST API
    api_base: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("api_base", "newspulse_api_base", "backend_url"),
        description="Origin of the backend REST API (news, ads, settings, broadcast)"
    )
    community_api_base: Optional[str] = Field(
        default=None,
        description="Origin for community reporter endpoints (defaults to api_base)"
    )
    upstream_timeout_seconds: float = Field(
        default=10.0,
        description="HTTP timeout for backend calls"
    )
    stories_upstream_timeout_seconds: float = Field(
        default=10.0,
        description="HTTP timeout for the public stories listing, which is slow upstream"
    )

    # Caching of low-volatility settings endpoints (ad settings, public mode)
    settings_cache_ttl_seconds: float = Field(
        default=60.0,
        description="TTL for in-memory settings caches"
    )

    # Category pages
    category_news_limit: int = Field(
        default=30,
        description="Default number of articles requested for a category feed"
    )

    # =========================================================================
    # Breaking ticker polling
    # =========================================================================

    ticker_polling_enabled: bool = Field(
        default=False,
        description="Poll the broadcast endpoint in the background for the breaking ticker"
    )
    ticker_poll_interval_seconds: float = Field(
        default=300.0,
        description="Interval between ticker polls (5 minutes)"
    )
    ticker_retry_base_seconds: float = Field(
        default=5.0,
        description="Base delay for ticker retries; multiplied by the attempt number"
    )
    ticker_max_retries: int = Field(
        default=3,
        description="Maximum retries when the ticker fetch comes back empty"
    )

    # Server
    log_level: str = Field(default="INFO", description="Root log level")
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=3000, description="Server port")
    debug: bool = Field(default=False, description="Debug mode")

    @property
    def community_origin(self) -> Optional[str]:
        """Origin used by community reporter proxies."""
        return self.community_api_base or self.api_base


def get_settings() -> Settings:
    """
    Read settings from the environment.

    Used as a FastAPI dependency so the backend origin is resolved at request
    time rather than frozen at import.
    """
    return Settings()


# Global settings instance
settings = Settings()
