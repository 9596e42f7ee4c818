"""
Downstream Cache Invalidation

After a sync, team-related entries of the dashboard read cache (Redis) are dropped so
read paths stop serving stale aggregate counts.
"""

from typing import Optional

import redis.asyncio as redis
from loguru import logger

TEAM_ALL_KEY = "team:all"
TEAM_KEY_PATTERN = "team:*"


class DownstreamCache:
    """
    Key-value cache shared with the dashboard read paths.

    Args:
        redis_url: Redis URL; when neither it nor ``client`` is given every call is a no-op
        client: Ready redis.asyncio client (used by tests)
    """

    def __init__(self, redis_url: Optional[str] = None, client: Optional[redis.Redis] = None):
        if client is None and redis_url:
            client = redis.from_url(redis_url, decode_responses=True)
        self._client = client

    @property
    def enabled(self) -> bool:
        return self._client is not None

    async def invalidate_team_cache(self) -> int:
        """
        Delete ``team:all`` and every ``team:*`` key.

        Returns:
            Number of keys deleted
        """
        if self._client is None:
            logger.debug("Downstream cache not configured, skipping invalidation")
            return 0

        keys = [TEAM_ALL_KEY]
        async for key in self._client.scan_iter(match=TEAM_KEY_PATTERN):
            if key not in keys:
                keys.append(key)

        deleted = await self._client.delete(*keys)
        logger.info("Team cache invalidated", keys_deleted=deleted)
        return deleted

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
