"""
Forums

Forum lookup, discussion creation, posting permissions and feature
availability for a site.
"""

import logging
from typing import Any, Dict, Optional

from forum_data.forum.constants import (
    ALL_GROUPS,
    WS_ADD_DISCUSSION,
    WS_ADD_DISCUSSION_POST,
    WS_CAN_ADD_DISCUSSION,
    WS_GET_ACTIVITY_ALLOWED_GROUPS,
    WS_GET_ACTIVITY_GROUPMODE,
    WS_GET_DISCUSSION_POSTS,
    WS_GET_DISCUSSIONS_PAGINATED,
    WS_GET_FORUMS_BY_COURSES,
    WS_VIEW_FORUM,
)
from forum_data.forum.errors import (
    CreateRejectedError,
    ForumError,
    ForumNotFoundError,
    StatusUnavailableError,
)
from forum_data.forum.keys import can_add_discussion_cache_key, forum_data_cache_key
from forum_data.forum.users import parse_id
from forum_data.site.base import CacheOptions

logger = logging.getLogger(__name__)


async def get_forum(site, course_id: int, cmid: int) -> Dict[str, Any]:
    """
    Get the forum of a course module.

    Args:
        site: Site handle
        course_id: Course ID
        cmid: Course module ID of the forum

    Raises:
        ForumNotFoundError: The course has no forum with that module id
    """
    forums = await site.read(
        WS_GET_FORUMS_BY_COURSES,
        {"courseids": [course_id]},
        CacheOptions(cache_key=forum_data_cache_key(course_id)),
    )

    target = parse_id(cmid)
    current_forum = None
    for forum in forums or []:
        if target is not None and parse_id(forum.get("cmid")) == target:
            current_forum = forum

    if current_forum is None:
        raise ForumNotFoundError(f"Forum with cmid {cmid} not found in course {course_id}")

    return current_forum


async def add_new_discussion(
    site,
    forum_id: int,
    subject: str,
    message: str,
    subscribe: bool,
    group_id: Optional[int] = None,
) -> int:
    """
    Add a new discussion to a forum.

    Returns:
        ID of the new discussion

    Raises:
        CreateRejectedError: The service did not return a discussion id
    """
    params = {
        "forumid": forum_id,
        "subject": subject,
        "message": message,
        "options": [
            {
                "name": "discussionsubscribe",
                "value": bool(subscribe),
            }
        ],
    }
    if group_id:
        params["groupid"] = group_id

    response = await site.write(WS_ADD_DISCUSSION, params)
    if not response or not response.get("discussionid"):
        raise CreateRejectedError(
            f"Discussion was not created in forum {forum_id}",
            response=response,
        )

    logger.info(f"Created discussion {response['discussionid']} in forum {forum_id}")
    return response["discussionid"]


async def can_add_discussion(site, forum_id: int, group_id: int) -> bool:
    """
    Check if the user can start a discussion in a forum group.

    Raises:
        StatusUnavailableError: The service returned no status
    """
    result = await site.read(
        WS_CAN_ADD_DISCUSSION,
        {"forumid": forum_id, "groupid": group_id},
        CacheOptions(cache_key=can_add_discussion_cache_key(forum_id, group_id)),
    )
    if not result:
        raise StatusUnavailableError(
            f"No can-add-discussion status for forum {forum_id} group {group_id}"
        )
    return bool(result.get("status"))


async def can_add_discussion_to_all(site, forum_id: int) -> bool:
    """Check if the user can start a discussion for all participants."""
    return await can_add_discussion(site, forum_id, ALL_GROUPS)


def is_can_add_discussion_available(site) -> bool:
    return site.supports(WS_CAN_ADD_DISCUSSION)


def is_create_discussion_enabled(site) -> bool:
    """Check if the site allows creating new discussions."""
    return (
        site.supports(WS_GET_ACTIVITY_GROUPMODE)
        and site.supports(WS_GET_ACTIVITY_ALLOWED_GROUPS)
        and site.supports(WS_ADD_DISCUSSION)
    )


def is_reply_post_enabled(site) -> bool:
    return site.supports(WS_ADD_DISCUSSION_POST)


def is_plugin_enabled(site) -> bool:
    """Forums are usable when the read web services are available."""
    return (
        site.supports(WS_GET_FORUMS_BY_COURSES)
        and site.supports(WS_GET_DISCUSSIONS_PAGINATED)
        and site.supports(WS_GET_DISCUSSION_POSTS)
    )


async def log_view(site, forum_id: int) -> Any:
    """Report a forum as being viewed."""
    if not forum_id:
        raise ForumError("A forum id is required to log a view")
    return await site.write(WS_VIEW_FORUM, {"forumid": forum_id})
