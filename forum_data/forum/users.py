"""
User Reference Collector

Stores the users referenced by a batch of posts or discussions so that
their names and pictures can be shown without further requests.
"""

import logging
from typing import Any, Dict, Iterable, Optional

logger = logging.getLogger(__name__)

# (id field, fullname field, picture field)
USER_FIELDS = ("userid", "userfullname", "userpictureurl")
MODIFIER_FIELDS = ("usermodified", "usermodifiedfullname", "usermodifiedpictureurl")


def parse_id(value: Any) -> Optional[int]:
    """Read a numeric id the service may send as a number or a string."""
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


async def store_user_data(site, entries: Iterable[Dict[str, Any]]) -> None:
    """
    Store the author and last modifier of each entry.

    Every distinct numeric user id in the batch is stored exactly once,
    in first-seen order. Missing or non-numeric ids are skipped. A failing
    store is logged and does not interrupt the batch.

    Args:
        site: Site whose user_store receives the profiles
        entries: Posts or discussions as returned by the service
    """
    seen = set()

    for entry in entries or []:
        field_sets = [USER_FIELDS]
        if "usermodified" in entry:
            field_sets.append(MODIFIER_FIELDS)

        for id_field, name_field, picture_field in field_sets:
            user_id = parse_id(entry.get(id_field))
            if user_id is None or user_id in seen:
                continue

            seen.add(user_id)
            try:
                await site.user_store.store_user(
                    user_id,
                    entry.get(name_field),
                    entry.get(picture_field),
                )
            except Exception as e:
                logger.warning(f"Could not store user {user_id}: {e}")
