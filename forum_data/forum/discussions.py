"""
Forum Discussions

Paginated discussion fetching:
- get_discussions: one page, flagged with whether more pages likely exist
- get_discussions_in_pages: walks pages in order, keeping what was
  collected if a later page fails
- format_discussions_groups: adds display group names
"""

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from forum_data.forum.constants import (
    ALL_GROUPS,
    DISCUSSIONS_PER_PAGE,
    WS_GET_DISCUSSIONS_PAGINATED,
)
from forum_data.forum.errors import EmptyResponseError
from forum_data.forum.keys import discussions_list_cache_key
from forum_data.forum.users import store_user_data
from forum_data.site.base import CacheOptions, GroupsProvider
from forum_data.site.groups import WebServiceGroupsProvider
from forum_data.utils.config import get_settings

logger = logging.getLogger(__name__)


@dataclass
class DiscussionsPage:
    """One page of discussions."""
    discussions: List[Dict[str, Any]]
    # True when the page was full, so another page probably exists
    can_load_more: bool


@dataclass
class DiscussionsResult:
    """Discussions collected across several pages."""
    discussions: List[Dict[str, Any]] = field(default_factory=list)
    error: bool = False


def _per_page(per_page: Optional[int]) -> int:
    if per_page:
        return per_page
    return get_settings().FORUM_DISCUSSIONS_PER_PAGE or DISCUSSIONS_PER_PAGE


async def get_discussions(
    site,
    forum_id: int,
    page: int = 0,
    force_cache: bool = False,
    per_page: Optional[int] = None,
) -> DiscussionsPage:
    """
    Get one page of forum discussions, most recently modified first.

    Args:
        site: Site handle
        forum_id: Forum ID
        page: Zero-based page number
        force_cache: Return cached data even if expired
        per_page: Page size (defaults to FORUM_DISCUSSIONS_PER_PAGE)

    Returns:
        DiscussionsPage

    Raises:
        EmptyResponseError: The service returned no discussions payload
    """
    per_page = _per_page(per_page)
    params = {
        "forumid": forum_id,
        "sortby": "timemodified",
        "sortdirection": "DESC",
        "page": page or 0,
        "perpage": per_page,
    }
    options = CacheOptions(
        cache_key=discussions_list_cache_key(forum_id),
        always_prefer_cache=force_cache,
    )

    response = await site.read(WS_GET_DISCUSSIONS_PAGINATED, params, options)
    if not response or response.get("discussions") is None:
        raise EmptyResponseError(
            f"No discussions returned for forum {forum_id} page {page}",
            response=response,
        )

    discussions = response["discussions"]
    await store_user_data(site, discussions)

    return DiscussionsPage(
        discussions=discussions,
        can_load_more=len(discussions) >= per_page,
    )


async def get_discussions_in_pages(
    site,
    forum_id: int,
    force_cache: bool = False,
    num_pages: Optional[int] = None,
    start_page: int = 0,
) -> DiscussionsResult:
    """
    Get forum discussions across several pages.

    Pages are fetched one at a time: whether page N+1 is needed is only
    known once page N has been read. If a page fails, the discussions
    collected so far are returned with error=True.

    Args:
        site: Site handle
        forum_id: Forum ID
        force_cache: Return cached data even if expired
        num_pages: Number of pages to get. None (or negative) for all pages.
        start_page: Page to start from

    Returns:
        DiscussionsResult
    """
    result = DiscussionsResult()
    remaining = -1 if num_pages is None else int(num_pages)

    if remaining == 0:
        return result

    page = start_page or 0
    while True:
        try:
            response = await get_discussions(site, forum_id, page, force_cache)
        except Exception as e:
            logger.warning(f"Failed to get discussions page {page} of forum {forum_id}: {e}")
            result.error = True
            return result

        result.discussions.extend(response.discussions)
        remaining -= 1

        if not response.can_load_more or remaining == 0:
            return result
        page += 1


async def format_discussions_groups(
    site,
    cmid: int,
    discussions: List[Dict[str, Any]],
    groups_provider: Optional[GroupsProvider] = None,
    all_participants_label: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    Add a groupname to discussions whose group is known.

    The input list is not modified; formatted copies are returned. If the
    groups cannot be retrieved the copies are returned unformatted.
    """
    discussions = copy.deepcopy(discussions)
    groups_provider = groups_provider or WebServiceGroupsProvider(site)
    if all_participants_label is None:
        all_participants_label = get_settings().ALL_PARTICIPANTS_LABEL

    try:
        forum_groups = await groups_provider.get_activity_allowed_groups(cmid)
    except Exception as e:
        logger.warning(f"Could not get groups for course module {cmid}: {e}")
        return discussions

    groups = {group["id"]: group for group in forum_groups or []}

    for discussion in discussions:
        group_id = discussion.get("groupid")
        if group_id == ALL_GROUPS:
            discussion["groupname"] = all_participants_label
        elif group_id in groups:
            discussion["groupname"] = groups[group_id]["name"]

    return discussions
