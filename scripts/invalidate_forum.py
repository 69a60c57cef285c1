#!/usr/bin/env python3
"""
Forum Cache Tool

Lists or invalidates the cached content of one forum.

Usage:
    # Set environment variables first:
    export SITE_URL=https://school.example
    export WS_TOKEN=your_token

    # Invalidate everything cached for the forum of course module 14:
    python scripts/invalidate_forum.py 2 14 --redis

    # List every discussion currently known for it:
    python scripts/invalidate_forum.py 2 14 --redis --list
"""

import asyncio
import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

from forum_data.cache import MemoryResponseCache, RedisResponseCache
from forum_data.forum import get_discussions_in_pages, get_forum, invalidate_content
from forum_data.site import WebServiceSite
from forum_data.utils.config import get_settings

logger = logging.getLogger(__name__)


async def run(course_id: int, cmid: int, list_only: bool, use_redis: bool) -> int:
    settings = get_settings()
    cache = RedisResponseCache() if use_redis else MemoryResponseCache()
    site = WebServiceSite.from_settings(settings, cache=cache)

    try:
        await site.load_site_info()

        if list_only:
            forum = await get_forum(site, course_id, cmid)
            result = await get_discussions_in_pages(site, forum["id"], force_cache=True)
            for discussion in result.discussions:
                print(f"{discussion['discussion']}\t{discussion.get('name', '')}")
            if result.error:
                logger.warning("Discussion list is incomplete (a page failed)")
                return 1
            return 0

        await invalidate_content(site, cmid, course_id)
        logger.info(f"Invalidated forum content for course {course_id}, module {cmid}")
        return 0

    finally:
        await site.close()


def main():
    load_dotenv()

    parser = argparse.ArgumentParser(description="List or invalidate cached forum content")
    parser.add_argument("course_id", type=int, help="Course ID")
    parser.add_argument("cmid", type=int, help="Course module ID of the forum")
    parser.add_argument("--list", action="store_true", help="List discussions instead of invalidating")
    parser.add_argument("--redis", action="store_true", help="Use the Redis response cache")
    args = parser.parse_args()

    logging.basicConfig(
        level=get_settings().LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    sys.exit(asyncio.run(run(args.course_id, args.cmid, args.list, args.redis)))


if __name__ == "__main__":
    main()
