"""Redis client helper -- provides async Redis connection."""
import logging

from redis.asyncio import Redis, from_url

from portfolio_api.config import settings

logger = logging.getLogger(__name__)

_redis: Redis | None = None


async def get_redis() -> Redis:
    """Get or create async Redis client. Raises if Redis cannot be reached."""
    global _redis
    if _redis is None:
        client = from_url(settings.REDIS_URL, decode_responses=True, socket_connect_timeout=1)
        try:
            await client.ping()
        except Exception:
            await client.aclose()
            raise
        _redis = client
        logger.info("Redis connected: %s", settings.REDIS_URL)
    return _redis


async def close_redis():
    global _redis
    if _redis:
        await _redis.aclose()
        _redis = None
