"""
Groups lookup through the web service.
"""

from typing import Any, Dict, List

from forum_data.site.base import CacheOptions, GroupsProvider, Site

ALLOWED_GROUPS_FUNCTION = "core_group_get_activity_allowed_groups"


def activity_allowed_groups_cache_key(cmid: int) -> str:
    return f"mmGroups:allowedgroups:{cmid}"


class WebServiceGroupsProvider(GroupsProvider):
    """Reads a course module's allowed groups through a Site."""

    def __init__(self, site: Site):
        self.site = site

    async def get_activity_allowed_groups(self, cmid: int) -> List[Dict[str, Any]]:
        response = await self.site.read(
            ALLOWED_GROUPS_FUNCTION,
            {"cmid": cmid},
            CacheOptions(cache_key=activity_allowed_groups_cache_key(cmid)),
        )
        if not response or "groups" not in response:
            raise ValueError(f"No groups returned for course module {cmid}")
        return response["groups"]
