"""
Forum Package

Data access for course forums. Every operation takes the Site handle as
its first argument.

- keys: cache keys for each response partition
- discussions: paginated discussion fetching and aggregation
- posts: discussion posts and replies
- forums: forum lookup, new discussions, permissions, availability
- invalidation: cascading cache invalidation for a forum
"""

from .discussions import (
    DiscussionsPage,
    DiscussionsResult,
    format_discussions_groups,
    get_discussions,
    get_discussions_in_pages,
)
from .errors import (
    CreateRejectedError,
    EmptyResponseError,
    ForumError,
    ForumNotFoundError,
    ReplyRejectedError,
    StatusUnavailableError,
)
from .forums import (
    add_new_discussion,
    can_add_discussion,
    can_add_discussion_to_all,
    get_forum,
    is_can_add_discussion_available,
    is_create_discussion_enabled,
    is_plugin_enabled,
    is_reply_post_enabled,
    log_view,
)
from .invalidation import (
    invalidate_can_add_discussion,
    invalidate_content,
    invalidate_discussion_posts,
    invalidate_discussions_list,
    invalidate_forum_data,
)
from .posts import (
    extract_starting_post,
    get_discussion_posts,
    reply_post,
    sort_discussion_posts,
)
from .users import store_user_data

__all__ = [
    # Discussions
    "DiscussionsPage",
    "DiscussionsResult",
    "get_discussions",
    "get_discussions_in_pages",
    "format_discussions_groups",

    # Posts
    "get_discussion_posts",
    "sort_discussion_posts",
    "extract_starting_post",
    "reply_post",

    # Forums
    "get_forum",
    "add_new_discussion",
    "can_add_discussion",
    "can_add_discussion_to_all",
    "is_can_add_discussion_available",
    "is_create_discussion_enabled",
    "is_reply_post_enabled",
    "is_plugin_enabled",
    "log_view",

    # Invalidation
    "invalidate_content",
    "invalidate_forum_data",
    "invalidate_discussions_list",
    "invalidate_discussion_posts",
    "invalidate_can_add_discussion",

    # Users
    "store_user_data",

    # Errors
    "ForumError",
    "EmptyResponseError",
    "ForumNotFoundError",
    "CreateRejectedError",
    "ReplyRejectedError",
    "StatusUnavailableError",
]
