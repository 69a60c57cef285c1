"""Web-service function names and defaults for the forum module."""

COMPONENT = "mmaModForum"

DISCUSSIONS_PER_PAGE = 10

# Sentinel group id meaning "all participants"
ALL_GROUPS = -1

# Web-service functions
WS_GET_FORUMS_BY_COURSES = "mod_forum_get_forums_by_courses"
WS_GET_DISCUSSIONS_PAGINATED = "mod_forum_get_forum_discussions_paginated"
WS_GET_DISCUSSION_POSTS = "mod_forum_get_forum_discussion_posts"
WS_ADD_DISCUSSION = "mod_forum_add_discussion"
WS_ADD_DISCUSSION_POST = "mod_forum_add_discussion_post"
WS_CAN_ADD_DISCUSSION = "mod_forum_can_add_discussion"
WS_VIEW_FORUM = "mod_forum_view_forum"
WS_GET_ACTIVITY_GROUPMODE = "core_group_get_activity_groupmode"
WS_GET_ACTIVITY_ALLOWED_GROUPS = "core_group_get_activity_allowed_groups"
