"""
Tests for the response cache backends.

Redis tests require a running Redis instance and are skipped otherwise.
"""

import time
from datetime import timedelta

import pytest
import pytest_asyncio
from unittest.mock import AsyncMock, patch

from forum_data.cache.config import ResponseCacheConfig, get_cache_config
from forum_data.cache.response_cache import (
    CacheEntry,
    MemoryResponseCache,
    RedisResponseCache,
    make_entry_id,
    matches_prefix,
)


# =============================================================================
# KEY HELPERS
# =============================================================================

class TestEntryIds:
    """Test entry id derivation."""

    def test_same_request_same_id(self):
        a = make_entry_id("fn", {"a": 1, "b": [1, 2]}, "k:1")
        b = make_entry_id("fn", {"b": [1, 2], "a": 1}, "k:1")
        assert a == b

    def test_params_distinguish_entries(self):
        assert make_entry_id("fn", {"page": 0}, "k:1") != make_entry_id("fn", {"page": 1}, "k:1")

    def test_grouped_under_cache_key(self):
        assert make_entry_id("fn", {}, "k:1").startswith("k:1:#")

    def test_matches_prefix_on_segment_boundary(self):
        assert matches_prefix("mmaModForum:canadddiscussion:5", "mmaModForum:canadddiscussion:5")
        assert matches_prefix("mmaModForum:canadddiscussion:5:3", "mmaModForum:canadddiscussion:5")
        assert not matches_prefix("mmaModForum:canadddiscussion:55:3", "mmaModForum:canadddiscussion:5")
        assert not matches_prefix(None, "mmaModForum")


class TestCacheEntry:
    """Test entry expiry."""

    def test_expiry(self):
        entry = CacheEntry(data={}, expires_at=100.0)
        assert entry.is_expired(now=100.0)
        assert not entry.is_expired(now=99.0)

    def test_fresh_entry(self):
        entry = CacheEntry(data={}, expires_at=time.time() + 60)
        assert not entry.is_expired()


class TestResponseCacheConfig:
    """Test cache configuration."""

    def test_config_defaults(self):
        config = ResponseCacheConfig()
        assert config.enabled is True
        assert config.expiration_seconds == 300
        assert config.retention_seconds == 604800
        assert config.namespace == "forum_data"

    @patch.dict('os.environ', {'CACHE_ENABLED': 'false', 'CACHE_EXPIRATION_SECONDS': '60'})
    def test_config_from_env(self):
        get_cache_config.cache_clear()
        config = ResponseCacheConfig()
        assert config.enabled is False
        assert config.expiration.total_seconds() == 60
        get_cache_config.cache_clear()

    @patch.dict('os.environ', {'CACHE_RETENTION_SECONDS': '86400'})
    def test_retention_from_env(self):
        config = ResponseCacheConfig()
        assert config.retention == timedelta(days=1)

    def test_retention_never_shorter_than_expiration(self):
        config = ResponseCacheConfig(expiration_seconds=600, retention_seconds=60)
        assert config.retention.total_seconds() == 600


# =============================================================================
# MEMORY BACKEND
# =============================================================================

@pytest.mark.asyncio
class TestMemoryResponseCache:
    """Test the in-memory backend."""

    async def test_save_and_get(self):
        cache = MemoryResponseCache(ResponseCacheConfig())
        await cache.save("fn", {"a": 1}, {"value": 42}, "k:1")

        entry = await cache.get_entry("fn", {"a": 1}, "k:1")

        assert entry.data == {"value": 42}
        assert entry.cache_key == "k:1"
        assert not entry.is_expired()

    async def test_missing_entry(self):
        cache = MemoryResponseCache(ResponseCacheConfig())
        assert await cache.get_entry("fn", {"a": 1}, "k:1") is None

    async def test_invalidate_expires_without_deleting(self):
        cache = MemoryResponseCache(ResponseCacheConfig())
        await cache.save("fn", {"page": 0}, "p0", "k:1")
        await cache.save("fn", {"page": 1}, "p1", "k:1")
        await cache.save("fn", {"page": 0}, "other", "k:2")

        count = await cache.invalidate("k:1")

        assert count == 2
        assert (await cache.get_entry("fn", {"page": 1}, "k:1")).is_expired()
        assert not (await cache.get_entry("fn", {"page": 0}, "k:2")).is_expired()
        assert len(cache) == 3

    async def test_invalidate_is_exact(self):
        cache = MemoryResponseCache(ResponseCacheConfig())
        await cache.save("fn", {}, "child", "k:1:2")

        assert await cache.invalidate("k:1") == 0

    async def test_invalidate_by_prefix(self):
        cache = MemoryResponseCache(ResponseCacheConfig())
        await cache.save("fn", {"g": -1}, True, "k:5:-1")
        await cache.save("fn", {"g": 3}, True, "k:5:3")
        await cache.save("fn", {"g": 3}, True, "k:55:3")

        count = await cache.invalidate_by_prefix("k:5")

        assert count == 2
        assert not (await cache.get_entry("fn", {"g": 3}, "k:55:3")).is_expired()

    async def test_disabled_cache(self):
        config = ResponseCacheConfig()
        config.enabled = False
        cache = MemoryResponseCache(config)

        assert await cache.save("fn", {}, 1, "k") is False
        assert await cache.get_entry("fn", {}, "k") is None

    async def test_mutating_read_data_leaves_entry_intact(self):
        cache = MemoryResponseCache(ResponseCacheConfig())
        await cache.save("fn", {}, {"posts": [{"id": 2}, {"id": 1}]}, "k:1")

        entry = await cache.get_entry("fn", {}, "k:1")
        entry.data["posts"].pop()

        again = await cache.get_entry("fn", {}, "k:1")
        assert [post["id"] for post in again.data["posts"]] == [2, 1]

    async def test_mutating_saved_data_leaves_entry_intact(self):
        cache = MemoryResponseCache(ResponseCacheConfig())
        data = {"posts": [{"id": 2}, {"id": 1}]}
        await cache.save("fn", {}, data, "k:1")

        data["posts"].sort(key=lambda post: post["id"])

        entry = await cache.get_entry("fn", {}, "k:1")
        assert [post["id"] for post in entry.data["posts"]] == [2, 1]

    async def test_entry_dropped_after_retention(self):
        config = ResponseCacheConfig(expiration_seconds=5, retention_seconds=10)
        cache = MemoryResponseCache(config)

        with patch("forum_data.cache.response_cache.time.time", return_value=1000.0):
            await cache.save("fn", {}, "data", "k:1")

        with patch("forum_data.cache.response_cache.time.time", return_value=1009.0):
            entry = await cache.get_entry("fn", {}, "k:1")
            assert entry.data == "data"
            assert entry.is_expired()

        with patch("forum_data.cache.response_cache.time.time", return_value=1010.0):
            assert await cache.get_entry("fn", {}, "k:1") is None
        assert len(cache) == 0

    async def test_save_prunes_entries_past_retention(self):
        config = ResponseCacheConfig(expiration_seconds=5, retention_seconds=10)
        cache = MemoryResponseCache(config)

        with patch("forum_data.cache.response_cache.time.time", return_value=1000.0):
            await cache.save("fn", {"page": 0}, "old", "k:1")
            await cache.save("fn", {"page": 1}, "old", "k:1")

        with patch("forum_data.cache.response_cache.time.time", return_value=1020.0):
            await cache.save("fn", {"page": 0}, "new", "k:2")

        assert len(cache) == 1


# =============================================================================
# REDIS BACKEND (Unit - mocked client)
# =============================================================================

@pytest.mark.asyncio
class TestRedisResponseCacheCommands:
    """Test the commands the Redis backend issues."""

    async def test_save_sets_retention_ttl(self):
        config = ResponseCacheConfig(namespace="ns", expiration_seconds=300, retention_seconds=3600)
        redis = AsyncMock()
        cache = RedisResponseCache(config, redis=redis)

        assert await cache.save("fn", {"a": 1}, {"value": 1}, "k:1") is True

        key = f"ns:{make_entry_id('fn', {'a': 1}, 'k:1')}"
        redis.hset.assert_awaited_once()
        assert redis.hset.await_args.args[0] == key
        redis.expire.assert_awaited_once_with(key, timedelta(seconds=3600))


# =============================================================================
# REDIS BACKEND (Integration - requires Redis)
# =============================================================================

@pytest.mark.asyncio
class TestRedisResponseCache:
    """
    Integration tests for the Redis backend.

    These require a running Redis instance.
    Skip if Redis is not available.
    """

    @pytest_asyncio.fixture
    async def cache(self):
        config = ResponseCacheConfig()
        config.namespace = "forum_data_test"
        cache = RedisResponseCache(config)
        try:
            await cache.initialize()
        except Exception:
            pytest.skip("Redis not available")
        yield cache
        async for key in cache._redis.scan_iter(match="forum_data_test:*"):
            await cache._redis.delete(key)
        await cache.close()

    async def test_save_and_get(self, cache):
        await cache.save("fn", {"a": 1}, {"hello": "world"}, "k:1")

        entry = await cache.get_entry("fn", {"a": 1}, "k:1")

        assert entry.data == {"hello": "world"}
        assert entry.cache_key == "k:1"
        assert not entry.is_expired()

    async def test_saved_entry_has_retention_ttl(self, cache):
        await cache.save("fn", {"a": 1}, {"hello": "world"}, "k:1")

        ttl = await cache._redis.ttl(cache._make_key(make_entry_id("fn", {"a": 1}, "k:1")))

        assert 0 < ttl <= cache.config.retention.total_seconds()

    async def test_invalidate(self, cache):
        await cache.save("fn", {"page": 0}, "p0", "k:1")
        await cache.save("fn", {"page": 0}, "child", "k:1:2")

        assert await cache.invalidate("k:1") == 1
        assert (await cache.get_entry("fn", {"page": 0}, "k:1")).is_expired()
        assert not (await cache.get_entry("fn", {"page": 0}, "k:1:2")).is_expired()

    async def test_invalidate_by_prefix(self, cache):
        await cache.save("fn", {"g": 3}, True, "k:5:3")
        await cache.save("fn", {"g": 3}, True, "k:55:3")

        assert await cache.invalidate_by_prefix("k:5") == 1
        assert not (await cache.get_entry("fn", {"g": 3}, "k:55:3")).is_expired()
