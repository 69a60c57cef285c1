"""
Cache Key Builder

Deterministic cache keys for forum web-service responses.

Keys are hierarchical: segments joined by KEY_DELIMITER, broadest first.
A narrower key is always a broader key plus the delimiter plus further
segments, so invalidating by a broader key as prefix expires every
narrower partition below it and nothing outside it.
"""

from forum_data.forum.constants import COMPONENT

KEY_DELIMITER = ":"


def _key(*parts) -> str:
    return KEY_DELIMITER.join(str(p) for p in (COMPONENT,) + parts)


def forum_data_cache_key(course_id: int) -> str:
    """Key for the forums of a course."""
    return _key("forum", course_id)


def discussion_posts_cache_key(discussion_id: int) -> str:
    """Key for the posts of a discussion."""
    return _key("discussion", discussion_id)


def discussions_list_cache_key(forum_id: int) -> str:
    """Key for every page of a forum's discussion list."""
    return _key("discussions", forum_id)


def common_can_add_discussion_cache_key(forum_id: int) -> str:
    """Common prefix of all can-add-discussion keys of a forum."""
    return _key("canadddiscussion", forum_id)


def can_add_discussion_cache_key(forum_id: int, group_id: int) -> str:
    """Key for the can-add-discussion check of one forum group."""
    return common_can_add_discussion_cache_key(forum_id) + KEY_DELIMITER + str(group_id)
