"""Shared Redis client for the notification pub/sub channels."""
import logging

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from workforce.core.config import settings

logger = logging.getLogger(__name__)

_client: aioredis.Redis | None = None


async def get_redis() -> aioredis.Redis:
    global _client
    if _client is None:
        _client = aioredis.from_url(settings.REDIS_URL, encoding="utf-8", decode_responses=True)
    return _client


async def redis_available() -> bool:
    try:
        return bool(await (await get_redis()).ping())
    except (RedisError, OSError) as exc:
        logger.warning("Redis at %s unreachable: %s", settings.REDIS_URL, exc)
        return False


async def close_redis() -> None:
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
