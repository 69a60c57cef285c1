"""
Web Service Site

Concrete Site handle combining the REST client, the response cache and
the user store for one site/token pair.

Read policy:
1. A cached entry that is fresh (or any entry, when the caller asks to
   always prefer the cache) is returned without a network call.
2. Otherwise the service is called and the response stored.
3. If the call fails at transport level and an expired entry exists,
   the stale entry is served instead of failing.
"""

import logging
from typing import Any, Dict, Iterable, Optional

from forum_data.cache import MemoryResponseCache, ResponseCache
from forum_data.site.base import CacheOptions, Site, UserStore
from forum_data.site.client import MoodleWSClient, WebServiceError
from forum_data.site.users import MemoryUserStore
from forum_data.utils.config import Settings, get_settings

logger = logging.getLogger(__name__)


class WebServiceSite(Site):
    """
    Site backed by the REST web service.

    Usage:
        site = WebServiceSite.from_settings(cache=RedisResponseCache())
        await site.load_site_info()

        forum = await get_forum(site, course_id=2, cmid=14)

        await site.close()
    """

    def __init__(
        self,
        site_id: str,
        client: MoodleWSClient,
        cache: Optional[ResponseCache] = None,
        user_store: Optional[UserStore] = None,
        functions: Optional[Iterable[str]] = None,
    ):
        super().__init__(site_id, user_store or MemoryUserStore())
        self.client = client
        self.cache = cache or MemoryResponseCache()
        self._functions = set(functions or [])
        self.site_info: Dict[str, Any] = {}

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        cache: Optional[ResponseCache] = None,
        user_store: Optional[UserStore] = None,
    ) -> "WebServiceSite":
        """Build a site from SITE_URL / WS_TOKEN settings."""
        settings = settings or get_settings()
        if not settings.SITE_URL or not settings.WS_TOKEN:
            raise ValueError("SITE_URL and WS_TOKEN must be configured")

        client = MoodleWSClient(
            site_url=settings.SITE_URL,
            token=settings.WS_TOKEN,
            timeout=settings.API_TIMEOUT,
        )
        return cls(
            site_id=settings.SITE_ID or settings.SITE_URL,
            client=client,
            cache=cache,
            user_store=user_store,
        )

    async def load_site_info(self) -> Dict[str, Any]:
        """Fetch site info and refresh the list of supported functions."""
        self.site_info = await self.client.get_site_info() or {}
        self._functions = {
            f["name"] for f in self.site_info.get("functions", []) if f.get("name")
        }
        logger.info(f"Site {self.site_id}: {len(self._functions)} web-service functions available")
        return self.site_info

    async def read(self, wsfunction, params, options=None):
        options = options or CacheOptions()

        entry = await self.cache.get_entry(wsfunction, params, options.cache_key)
        if entry is not None and (options.always_prefer_cache or not entry.is_expired()):
            logger.debug(f"Cache hit for {wsfunction} ({options.cache_key})")
            return entry.data

        try:
            data = await self.client.call(wsfunction, params)
        except WebServiceError as e:
            # A rejection by the service itself is not a connectivity problem
            if entry is None or e.errorcode:
                raise
            logger.warning(f"{wsfunction} failed ({e}), serving stale cached response")
            return entry.data

        if options.save_to_cache:
            await self.cache.save(wsfunction, params, data, options.cache_key)

        return data

    async def write(self, wsfunction, params):
        return await self.client.call(wsfunction, params, retry=False)

    async def invalidate(self, cache_key):
        await self.cache.invalidate(cache_key)

    async def invalidate_by_prefix(self, prefix):
        await self.cache.invalidate_by_prefix(prefix)

    def supports(self, wsfunction):
        return wsfunction in self._functions

    async def close(self):
        await self.client.close()
        await self.cache.close()
