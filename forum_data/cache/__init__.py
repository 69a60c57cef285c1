"""
Response Caching Layer

Caches web-service responses so repeated queries are served locally:
- ResponseCache: backend interface (exact and prefix invalidation)
- MemoryResponseCache: process-local backend
- RedisResponseCache: shared backend on redis.asyncio

Usage:
    cache = RedisResponseCache()
    await cache.save("mod_forum_get_forum_discussion_posts", params, data, cache_key)

    # Expire a whole partition
    await cache.invalidate_by_prefix("mmaModForum:canadddiscussion:12")
"""

from forum_data.cache.config import ResponseCacheConfig, get_cache_config
from forum_data.cache.response_cache import (
    CacheEntry,
    ResponseCache,
    ResponseCacheError,
    MemoryResponseCache,
    RedisResponseCache,
    make_entry_id,
    matches_prefix,
)

__all__ = [
    # Config
    "ResponseCacheConfig",
    "get_cache_config",
    # Backends
    "CacheEntry",
    "ResponseCache",
    "ResponseCacheError",
    "MemoryResponseCache",
    "RedisResponseCache",
    "make_entry_id",
    "matches_prefix",
]
