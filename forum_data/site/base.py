"""
Site Interfaces

Abstract collaborators used by the forum operations. A Site is the
explicit session handle passed to every operation: it reads and writes
through the remote web service, owns the response cache partitions, and
knows which web-service functions the backend supports.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional


@dataclass
class CacheOptions:
    """Per-read caching instructions."""
    cache_key: Optional[str] = None
    # Serve a cached entry even if it has expired
    always_prefer_cache: bool = False
    save_to_cache: bool = True


class UserStore(ABC):
    """Keeps user profiles referenced by forum content."""

    @abstractmethod
    async def store_user(
        self,
        user_id: int,
        fullname: Optional[str] = None,
        profile_image_url: Optional[str] = None,
    ) -> None:
        """Insert or update a user profile. Idempotent."""
        pass


class GroupsProvider(ABC):
    """Resolves the groups a user may see in an activity."""

    @abstractmethod
    async def get_activity_allowed_groups(self, cmid: int) -> List[Dict[str, Any]]:
        """Return the allowed groups (each with id and name) for a course module."""
        pass


class Site(ABC):
    """Session handle for one site and one user token."""

    def __init__(self, site_id: str, user_store: UserStore):
        self.site_id = site_id
        self.user_store = user_store

    @abstractmethod
    async def read(
        self,
        wsfunction: str,
        params: Dict[str, Any],
        options: Optional[CacheOptions] = None,
    ) -> Any:
        """Call a read-only web-service function, using the cache."""
        pass

    @abstractmethod
    async def write(self, wsfunction: str, params: Dict[str, Any]) -> Any:
        """Call a web-service function that changes data. Never cached."""
        pass

    @abstractmethod
    async def invalidate(self, cache_key: str) -> None:
        """Invalidate cached responses stored under exactly cache_key."""
        pass

    @abstractmethod
    async def invalidate_by_prefix(self, prefix: str) -> None:
        """Invalidate cached responses whose key starts with prefix."""
        pass

    @abstractmethod
    def supports(self, wsfunction: str) -> bool:
        """Check if the backend exposes a web-service function."""
        pass

    def __repr__(self):
        return f"{self.__class__.__name__}(site_id={self.site_id!r})"
