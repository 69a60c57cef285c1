"""
Pytest Configuration and Shared Fixtures

Provides a scripted in-memory Site and common forum payloads.
"""

import pytest
from typing import Any, Dict, List

from forum_data.site.base import Site, UserStore


# ============================================================================
# Fakes
# ============================================================================

class RecordingUserStore(UserStore):
    """User store that records every call."""

    def __init__(self):
        self.calls = []

    async def store_user(self, user_id, fullname=None, profile_image_url=None):
        self.calls.append((user_id, fullname, profile_image_url))

    @property
    def stored_ids(self) -> List[int]:
        return [call[0] for call in self.calls]


class FakeSite(Site):
    """
    Site with scripted responses.

    A response registered with `on()` can be a value, an exception instance
    (raised), or a callable taking the params (its result is returned, or
    whatever it raises propagates).
    """

    def __init__(self, functions=None):
        super().__init__("fake-site", RecordingUserStore())
        self.handlers: Dict[str, Any] = {}
        self.functions = set(functions or [])
        self.reads = []
        self.writes = []
        self.invalidated = []
        self.invalidated_prefixes = []
        self.failing_keys = set()

    def on(self, wsfunction: str, response):
        self.handlers[wsfunction] = response
        return self

    def _respond(self, wsfunction, params):
        handler = self.handlers.get(wsfunction)
        if isinstance(handler, Exception):
            raise handler
        if callable(handler):
            return handler(params)
        return handler

    async def read(self, wsfunction, params, options=None):
        self.reads.append((wsfunction, params, options))
        return self._respond(wsfunction, params)

    async def write(self, wsfunction, params):
        self.writes.append((wsfunction, params))
        return self._respond(wsfunction, params)

    async def invalidate(self, cache_key):
        self.invalidated.append(cache_key)
        if cache_key in self.failing_keys:
            raise RuntimeError(f"cannot invalidate {cache_key}")

    async def invalidate_by_prefix(self, prefix):
        self.invalidated_prefixes.append(prefix)
        if prefix in self.failing_keys:
            raise RuntimeError(f"cannot invalidate {prefix}")

    def supports(self, wsfunction):
        return wsfunction in self.functions


def make_discussions(count: int, start: int = 1) -> List[Dict[str, Any]]:
    """Discussion records as returned by the paginated discussions call."""
    return [
        {
            "id": 1000 + i,
            "discussion": i,
            "name": f"Discussion {i}",
            "groupid": -1,
            "userid": 100 + i,
            "userfullname": f"User {100 + i}",
            "userpictureurl": f"https://school.example/u/{100 + i}.png",
            "usermodified": 100 + i,
            "timemodified": 1700000000 - i,
        }
        for i in range(start, start + count)
    ]


def paged_discussions(pages: List[Any]):
    """
    Build a handler serving the given pages in order of the `page` param.

    Each item is a list of discussions or an exception to raise.
    """
    def handler(params):
        page = pages[params["page"]]
        if isinstance(page, Exception):
            raise page
        return {"discussions": page, "warnings": []}
    return handler


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def site() -> FakeSite:
    return FakeSite()


@pytest.fixture
def forums_payload() -> List[Dict[str, Any]]:
    """Forums of course 2."""
    return [
        {"id": 5, "cmid": 14, "course": 2, "name": "News forum"},
        {"id": 6, "cmid": 15, "course": 2, "name": "Class discussion"},
    ]
