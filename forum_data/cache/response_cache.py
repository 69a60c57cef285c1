"""
Web-Service Response Cache

Stores web-service responses keyed by request identity (function + params)
and indexed by a logical cache key, so that whole partitions of responses
can be invalidated together.

Entry ids have the form ``<cache_key>:#<request_hash>``. Cache keys are
hierarchical (segments joined by ``:``), which gives two invalidation modes:
- exact: every entry stored under one cache key
- prefix: every entry whose cache key is the prefix or extends it by
  further segments

Invalidation marks entries as expired instead of deleting them. Expired
entries are still served to reads that ask to always prefer the cache,
until the retention window of the entry runs out and the backend drops it.
"""

import asyncio
import copy
import hashlib
import json
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

from redis.asyncio import Redis, ConnectionPool
from redis.exceptions import RedisError

from forum_data.cache.config import ResponseCacheConfig, get_cache_config


logger = logging.getLogger(__name__)

KEY_SEPARATOR = ":"
HASH_MARKER = "#"

# Glob metacharacters understood by Redis SCAN MATCH
_GLOB_SPECIAL = "\\*?[]"


class ResponseCacheError(Exception):
    """Raised when the cache backend cannot apply an invalidation."""

    def __init__(self, message: str, key: Optional[str] = None):
        super().__init__(message)
        self.key = key


@dataclass
class CacheEntry:
    """A cached web-service response."""
    data: Any
    expires_at: float
    cache_key: Optional[str] = None

    def is_expired(self, now: Optional[float] = None) -> bool:
        """Check if entry has expired."""
        now = time.time() if now is None else now
        return now >= self.expires_at


def hash_request(wsfunction: str, params: Optional[Dict[str, Any]]) -> str:
    """Create a stable hash identifying one request."""
    payload = json.dumps(
        {"wsfunction": wsfunction, "params": params or {}},
        sort_keys=True,
        default=str,
    )
    return hashlib.md5(payload.encode()).hexdigest()[:16]


def make_entry_id(
    wsfunction: str,
    params: Optional[Dict[str, Any]],
    cache_key: Optional[str] = None,
) -> str:
    """Build the storage id for a request, grouped under its cache key."""
    prefix = cache_key if cache_key else HASH_MARKER
    return f"{prefix}{KEY_SEPARATOR}{HASH_MARKER}{hash_request(wsfunction, params)}"


def matches_prefix(cache_key: Optional[str], prefix: str) -> bool:
    """True if cache_key is prefix itself or a narrower key below it."""
    if not cache_key:
        return False
    return cache_key == prefix or cache_key.startswith(prefix + KEY_SEPARATOR)


class ResponseCache(ABC):
    """Abstract base class for response cache backends."""

    def __init__(self, config: Optional[ResponseCacheConfig] = None):
        self.config = config or get_cache_config()

    def _expiry(self) -> float:
        return time.time() + self.config.expiration.total_seconds()

    @abstractmethod
    async def get_entry(
        self,
        wsfunction: str,
        params: Optional[Dict[str, Any]],
        cache_key: Optional[str] = None,
    ) -> Optional[CacheEntry]:
        """Get the stored entry for a request, expired or not."""
        pass

    @abstractmethod
    async def save(
        self,
        wsfunction: str,
        params: Optional[Dict[str, Any]],
        data: Any,
        cache_key: Optional[str] = None,
    ) -> bool:
        """Store a response. Returns False if it could not be stored."""
        pass

    @abstractmethod
    async def invalidate(self, cache_key: str) -> int:
        """Expire every entry stored under exactly this cache key."""
        pass

    @abstractmethod
    async def invalidate_by_prefix(self, prefix: str) -> int:
        """Expire every entry whose cache key starts with prefix."""
        pass

    async def close(self):
        """Release backend resources."""
        pass


class MemoryResponseCache(ResponseCache):
    """
    Process-local response cache.

    Data is copied on save and on read, so callers may mutate what they get
    back (the post helpers sort and pop in place) without touching the
    stored response.
    """

    def __init__(self, config: Optional[ResponseCacheConfig] = None):
        super().__init__(config)
        self._entries: Dict[str, CacheEntry] = {}
        self._retain_until: Dict[str, float] = {}

    def _prune(self, now: float):
        """Drop entries whose retention window has run out."""
        dropped = [
            entry_id for entry_id, deadline in self._retain_until.items()
            if now >= deadline
        ]
        for entry_id in dropped:
            del self._entries[entry_id]
            del self._retain_until[entry_id]
        if dropped:
            logger.debug(f"Dropped {len(dropped)} entries past retention")

    async def get_entry(self, wsfunction, params, cache_key=None):
        if not self.config.enabled:
            return None

        entry_id = make_entry_id(wsfunction, params, cache_key)
        deadline = self._retain_until.get(entry_id)
        if deadline is None:
            return None
        if time.time() >= deadline:
            del self._entries[entry_id]
            del self._retain_until[entry_id]
            return None

        entry = self._entries[entry_id]
        return CacheEntry(
            data=copy.deepcopy(entry.data),
            expires_at=entry.expires_at,
            cache_key=entry.cache_key,
        )

    async def save(self, wsfunction, params, data, cache_key=None):
        if not self.config.enabled:
            return False

        now = time.time()
        self._prune(now)

        entry_id = make_entry_id(wsfunction, params, cache_key)
        self._entries[entry_id] = CacheEntry(
            data=copy.deepcopy(data),
            expires_at=self._expiry(),
            cache_key=cache_key,
        )
        self._retain_until[entry_id] = now + self.config.retention.total_seconds()
        return True

    async def invalidate(self, cache_key: str) -> int:
        count = 0
        for entry in self._entries.values():
            if entry.cache_key == cache_key:
                entry.expires_at = 0
                count += 1
        logger.debug(f"Invalidated {count} entries for {cache_key}")
        return count

    async def invalidate_by_prefix(self, prefix: str) -> int:
        count = 0
        for entry in self._entries.values():
            if matches_prefix(entry.cache_key, prefix):
                entry.expires_at = 0
                count += 1
        logger.debug(f"Invalidated {count} entries starting with {prefix}")
        return count

    def clear(self):
        self._entries.clear()
        self._retain_until.clear()

    def __len__(self) -> int:
        return len(self._entries)


def _escape_glob(value: str) -> str:
    return "".join(f"\\{c}" if c in _GLOB_SPECIAL else c for c in value)


class RedisResponseCache(ResponseCache):
    """
    Redis-backed response cache.

    Each entry is a hash with fields ``data`` (JSON), ``expires_at`` and
    ``cache_key``, with a Redis TTL set to the retention window. Reads and
    saves degrade gracefully (a Redis failure is a miss or a dropped save). Invalidation failures raise ResponseCacheError,
    since a silently skipped invalidation leaves stale data behind.
    """

    def __init__(
        self,
        config: Optional[ResponseCacheConfig] = None,
        redis: Optional[Redis] = None,
    ):
        super().__init__(config)
        self._pool: Optional[ConnectionPool] = None
        self._redis: Optional[Redis] = redis
        self._initialized = redis is not None
        self._lock = asyncio.Lock()

    async def initialize(self):
        """Initialize Redis connection pool."""
        if self._initialized:
            return

        async with self._lock:
            if self._initialized:
                return

            try:
                self._pool = ConnectionPool.from_url(
                    self.config.redis_url,
                    max_connections=self.config.redis_max_connections,
                    socket_timeout=self.config.redis_socket_timeout,
                    decode_responses=True,
                )
                self._redis = Redis(connection_pool=self._pool)

                await self._redis.ping()
                self._initialized = True
                logger.info(f"Redis response cache initialized: {self.config.redis_url}")

            except Exception as e:
                logger.error(f"Failed to initialize Redis: {e}")
                self._initialized = False
                raise

    async def close(self):
        """Close Redis connection pool."""
        if self._redis:
            await self._redis.close()
        if self._pool:
            await self._pool.disconnect()
        self._initialized = False
        logger.info("Redis response cache closed")

    def _make_key(self, entry_id: str) -> str:
        """Create namespaced Redis key."""
        return f"{self.config.namespace}{KEY_SEPARATOR}{entry_id}"

    async def get_entry(self, wsfunction, params, cache_key=None):
        if not self.config.enabled:
            return None

        key = self._make_key(make_entry_id(wsfunction, params, cache_key))
        try:
            await self.initialize()
            stored = await self._redis.hgetall(key)
        except (RedisError, OSError) as e:
            logger.error(f"Cache get error for {key}: {e}")
            return None

        if not stored:
            return None

        try:
            return CacheEntry(
                data=json.loads(stored["data"]),
                expires_at=float(stored.get("expires_at", 0)),
                cache_key=stored.get("cache_key") or None,
            )
        except (KeyError, ValueError) as e:
            logger.warning(f"Discarding unreadable cache entry {key}: {e}")
            return None

    async def save(self, wsfunction, params, data, cache_key=None):
        if not self.config.enabled:
            return False

        key = self._make_key(make_entry_id(wsfunction, params, cache_key))
        try:
            await self.initialize()
            await self._redis.hset(key, mapping={
                "data": json.dumps(data, default=str),
                "expires_at": self._expiry(),
                "cache_key": cache_key or "",
            })
            await self._redis.expire(key, self.config.retention)
            return True
        except (RedisError, OSError, TypeError) as e:
            logger.error(f"Cache save error for {key}: {e}")
            return False

    async def _expire_matching(self, pattern: str) -> int:
        await self.initialize()
        count = 0
        async for key in self._redis.scan_iter(match=pattern, count=100):
            await self._redis.hset(key, "expires_at", 0)
            count += 1
        return count

    async def invalidate(self, cache_key: str) -> int:
        pattern = self._make_key(
            f"{_escape_glob(cache_key)}{KEY_SEPARATOR}{HASH_MARKER}*"
        )
        try:
            count = await self._expire_matching(pattern)
        except (RedisError, OSError) as e:
            logger.error(f"Cache invalidation error for {cache_key}: {e}")
            raise ResponseCacheError(f"Could not invalidate {cache_key}: {e}", key=cache_key) from e

        logger.debug(f"Invalidated {count} entries for {cache_key}")
        return count

    async def invalidate_by_prefix(self, prefix: str) -> int:
        # Matches the prefix's own entries and every narrower key below it
        pattern = self._make_key(f"{_escape_glob(prefix)}{KEY_SEPARATOR}*")
        try:
            count = await self._expire_matching(pattern)
        except (RedisError, OSError) as e:
            logger.error(f"Cache prefix invalidation error for {prefix}: {e}")
            raise ResponseCacheError(f"Could not invalidate {prefix}*: {e}", key=prefix) from e

        logger.debug(f"Invalidated {count} entries starting with {prefix}")
        return count
