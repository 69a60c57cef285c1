"""
Forum Posts

Reading, ordering and replying to discussion posts.
"""

import logging
from typing import Any, Dict, List, Optional

from forum_data.forum.constants import WS_ADD_DISCUSSION_POST, WS_GET_DISCUSSION_POSTS
from forum_data.forum.errors import EmptyResponseError, ReplyRejectedError
from forum_data.forum.keys import discussion_posts_cache_key
from forum_data.forum.users import parse_id, store_user_data
from forum_data.site.base import CacheOptions

logger = logging.getLogger(__name__)


async def get_discussion_posts(site, discussion_id: int) -> List[Dict[str, Any]]:
    """
    Get the posts of a discussion.

    Raises:
        EmptyResponseError: The service returned nothing
    """
    response = await site.read(
        WS_GET_DISCUSSION_POSTS,
        {"discussionid": discussion_id},
        CacheOptions(cache_key=discussion_posts_cache_key(discussion_id)),
    )
    if not response:
        raise EmptyResponseError(f"No posts returned for discussion {discussion_id}")

    posts = response.get("posts", [])
    await store_user_data(site, posts)
    return posts


def sort_discussion_posts(posts: List[Dict[str, Any]], direction: str = "ASC") -> List[Dict[str, Any]]:
    """Sort posts in place by creation time. Any direction but ASC is descending."""
    posts.sort(key=lambda post: int(post["created"]), reverse=direction != "ASC")
    return posts


def extract_starting_post(posts: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """
    Remove the starting post (parent 0) from posts and return it.

    The last post is checked first, since posts usually come ordered by
    creation time. Returns None if there is no starting post.
    """
    if not posts:
        return None

    if parse_id(posts[-1].get("parent")) == 0:
        return posts.pop()

    for index, post in enumerate(posts):
        if parse_id(post.get("parent")) == 0:
            return posts.pop(index)

    return None


async def reply_post(site, post_id: int, subject: str, message: str) -> int:
    """
    Reply to a post.

    Returns:
        ID of the new post

    Raises:
        ReplyRejectedError: The service did not return a post id
    """
    response = await site.write(WS_ADD_DISCUSSION_POST, {
        "postid": post_id,
        "subject": subject,
        "message": message,
    })

    if not response or not response.get("postid"):
        raise ReplyRejectedError(f"Reply to post {post_id} was not created", response=response)

    logger.info(f"Created post {response['postid']} replying to {post_id}")
    return response["postid"]
