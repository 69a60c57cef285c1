"""
In-memory user profile store.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from forum_data.site.base import UserStore

logger = logging.getLogger(__name__)


@dataclass
class UserProfile:
    """Display data for a user referenced by forum content."""
    id: int
    fullname: Optional[str] = None
    profile_image_url: Optional[str] = None


class MemoryUserStore(UserStore):
    """Keeps user profiles by id for the lifetime of the process."""

    def __init__(self):
        self._users: Dict[int, UserProfile] = {}

    async def store_user(self, user_id, fullname=None, profile_image_url=None):
        self._users[user_id] = UserProfile(
            id=user_id,
            fullname=fullname,
            profile_image_url=profile_image_url,
        )
        logger.debug(f"Stored user {user_id}")

    def get_user(self, user_id: int) -> Optional[UserProfile]:
        return self._users.get(user_id)

    def __len__(self) -> int:
        return len(self._users)
