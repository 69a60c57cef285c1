"""
Forum Cache Invalidation

Invalidating a forum must also invalidate everything derived from it:
the forum data of its course, its discussion list, every
can-add-discussion check of the forum, and the posts of each of its
discussions.
"""

import asyncio
import logging

from forum_data.forum.discussions import get_discussions_in_pages
from forum_data.forum.forums import get_forum
from forum_data.forum.keys import (
    common_can_add_discussion_cache_key,
    discussion_posts_cache_key,
    discussions_list_cache_key,
    forum_data_cache_key,
)

logger = logging.getLogger(__name__)


async def invalidate_forum_data(site, course_id: int) -> None:
    await site.invalidate(forum_data_cache_key(course_id))


async def invalidate_discussions_list(site, forum_id: int) -> None:
    await site.invalidate(discussions_list_cache_key(forum_id))


async def invalidate_discussion_posts(site, discussion_id: int) -> None:
    await site.invalidate(discussion_posts_cache_key(discussion_id))


async def invalidate_can_add_discussion(site, forum_id: int) -> None:
    """Invalidate the can-add-discussion checks of every group of a forum."""
    await site.invalidate_by_prefix(common_can_add_discussion_cache_key(forum_id))


async def invalidate_content(site, module_id: int, course_id: int) -> None:
    """
    Invalidate all cached content of a forum.

    The discussion list is read from cache (even if expired) to find every
    discussion whose posts must be invalidated. All invalidations run
    concurrently; if any of them fails, this fails.

    Args:
        site: Site handle
        module_id: Course module ID of the forum
        course_id: Course ID

    Raises:
        ForumNotFoundError: The course has no forum with that module id
    """
    forum = await get_forum(site, course_id, module_id)
    response = await get_discussions_in_pages(site, forum["id"], force_cache=True)
    if response.error:
        logger.warning(
            f"Discussion list of forum {forum['id']} is incomplete, "
            f"invalidating {len(response.discussions)} known discussions"
        )

    tasks = [
        invalidate_forum_data(site, course_id),
        invalidate_discussions_list(site, forum["id"]),
        invalidate_can_add_discussion(site, forum["id"]),
    ]
    tasks.extend(
        invalidate_discussion_posts(site, discussion["discussion"])
        for discussion in response.discussions
    )

    await asyncio.gather(*tasks)

    logger.info(
        f"Invalidated forum {forum['id']} (course {course_id}): "
        f"{len(response.discussions)} discussions"
    )
