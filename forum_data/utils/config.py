"""
Configuration Management

Uses Pydantic Settings for environment-based configuration.
Loads from .env file automatically.
"""

from typing import Optional
from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Site connection (required to talk to a live site)
    SITE_URL: Optional[str] = None
    WS_TOKEN: Optional[str] = None
    SITE_ID: Optional[str] = None

    # Application Settings
    LOG_LEVEL: str = "INFO"

    # Timeouts
    API_TIMEOUT: int = 30

    # Forum behaviour
    FORUM_DISCUSSIONS_PER_PAGE: int = 10
    ALL_PARTICIPANTS_LABEL: str = "All participants"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"
        case_sensitive = False


@lru_cache
def get_settings() -> Settings:
    """Get or create cached settings instance."""
    return Settings()
