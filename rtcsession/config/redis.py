from typing import Optional
import redis.asyncio as redis
from rtcsession.config.settings import settings

_redis: Optional[redis.Redis] = None


def build_redis_url() -> str:
    """Build the connection URL from settings, including the password if set."""
    if settings.REDIS_PASSWORD:
        return f"redis://:{settings.REDIS_PASSWORD}@{settings.REDIS_HOST}:{settings.REDIS_PORT}"
    return f"redis://{settings.REDIS_HOST}:{settings.REDIS_PORT}"


async def get_redis() -> redis.Redis:
    global _redis
    if _redis is None:
        _redis = redis.Redis.from_url(build_redis_url(), decode_responses=False)
    return _redis


async def close_redis():
    global _redis
    if _redis is not None:
        await _redis.aclose()
        _redis = None
