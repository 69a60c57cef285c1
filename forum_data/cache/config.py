"""
Cache Configuration

Centralized configuration for the web-service response cache.

Settings can be overridden via environment variables:
- CACHE_NAMESPACE: Prefix for all Redis keys
- CACHE_ENABLED: Enable/disable response caching globally
- CACHE_EXPIRATION_SECONDS: How long a response stays fresh
- CACHE_RETENTION_SECONDS: How long a response is kept at all (expired
  entries stay readable for forced-cache reads until then)
- REDIS_URL: Redis connection URL (only used by RedisResponseCache)
"""

import os
from dataclasses import dataclass, field
from datetime import timedelta
from functools import lru_cache


@dataclass
class ResponseCacheConfig:
    """Main response cache configuration."""

    # Cache namespace (for key prefixes)
    namespace: str = field(default_factory=lambda: os.getenv(
        "CACHE_NAMESPACE",
        "forum_data"
    ))

    # Global cache toggle
    enabled: bool = field(default_factory=lambda: os.getenv(
        "CACHE_ENABLED",
        "true"
    ).lower() == "true")

    # Freshness window for stored responses
    expiration_seconds: int = field(default_factory=lambda: int(os.getenv(
        "CACHE_EXPIRATION_SECONDS",
        "300"
    )))

    # How long entries are kept once stored, fresh or not
    retention_seconds: int = field(default_factory=lambda: int(os.getenv(
        "CACHE_RETENTION_SECONDS",
        "604800"
    )))

    # Redis settings
    redis_url: str = field(default_factory=lambda: os.getenv(
        "REDIS_URL",
        "redis://localhost:6379/0"
    ))
    redis_max_connections: int = field(default_factory=lambda: int(os.getenv(
        "REDIS_MAX_CONNECTIONS",
        "20"
    )))
    redis_socket_timeout: float = field(default_factory=lambda: float(os.getenv(
        "REDIS_SOCKET_TIMEOUT",
        "5.0"
    )))

    @property
    def expiration(self) -> timedelta:
        return timedelta(seconds=self.expiration_seconds)

    @property
    def retention(self) -> timedelta:
        # Never shorter than the freshness window
        return timedelta(seconds=max(self.retention_seconds, self.expiration_seconds))


@lru_cache(maxsize=1)
def get_cache_config() -> ResponseCacheConfig:
    """Get singleton cache configuration."""
    return ResponseCacheConfig()
