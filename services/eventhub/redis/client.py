"""
Redis client management for the EventHub authorization service.

Provides the async Redis client used by the Redis credential store, plus a
health check for the readiness probe.
"""

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from eventhub.config import settings
from eventhub.logging_config import get_logger

logger = get_logger(__name__)

# Module-level client reference, initialized in lifespan
_redis: aioredis.Redis | None = None


async def init_redis() -> None:
    """Initialize Redis connection pool."""
    global _redis  # noqa: PLW0603
    logger.info("Initializing Redis connection")
    _redis = aioredis.from_url(
        str(settings.redis_url),
        decode_responses=True,
    )
    await _redis.ping()
    logger.info("Redis connection established")


async def close_redis() -> None:
    """Close Redis connection pool."""
    global _redis  # noqa: PLW0603
    if _redis is not None:
        logger.info("Closing Redis connection pool")
        await _redis.aclose()
        _redis = None


def get_redis_client() -> aioredis.Redis:
    """Return the Redis client. Raises if not initialized."""
    if _redis is None:
        raise RuntimeError("Redis client not initialized, call init_redis() first")
    return _redis


async def get_redis_health() -> bool:
    """Check Redis health for readiness probe."""
    if _redis is None:
        return False
    try:
        await _redis.ping()
    except (RedisError, OSError) as e:
        logger.error("Redis health check failed", error=str(e))
        return False
    return True
