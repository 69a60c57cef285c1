"""
Site Package

The session handle every forum operation receives, plus its collaborators:
- Site / CacheOptions: read, write, invalidate and capability checks
- MoodleWSClient: REST web-service transport
- WebServiceSite: cached site on top of the client
- UserStore / MemoryUserStore: user profile storage
- GroupsProvider / WebServiceGroupsProvider: activity group lookup
"""

from .base import CacheOptions, GroupsProvider, Site, UserStore
from .client import MoodleWSClient, RetryConfig, WebServiceError, flatten_params
from .groups import WebServiceGroupsProvider
from .site import WebServiceSite
from .users import MemoryUserStore, UserProfile

__all__ = [
    # Interfaces
    "Site",
    "CacheOptions",
    "UserStore",
    "GroupsProvider",

    # Transport
    "MoodleWSClient",
    "RetryConfig",
    "WebServiceError",
    "flatten_params",

    # Implementations
    "WebServiceSite",
    "WebServiceGroupsProvider",
    "MemoryUserStore",
    "UserProfile",
]
