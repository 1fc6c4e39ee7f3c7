"""
Optional Redis connection, used by the rate limiter.

An empty REDIS_URL, or a server that does not answer at startup, leaves
the client unset; callers treat that as "no Redis" and carry on.
"""

from typing import Optional

import redis.asyncio as redis

from billboard_api.core.config import settings
from billboard_api.core.logging import get_logger

logger = get_logger(__name__)

_client: Optional[redis.Redis] = None


def get_redis() -> Optional[redis.Redis]:
    return _client


async def init_redis(url: Optional[str] = None) -> Optional[redis.Redis]:
    global _client

    url = settings.redis_url if url is None else url
    if not url:
        logger.info("redis_disabled")
        return None

    client = redis.from_url(
        url,
        decode_responses=True,
        socket_connect_timeout=5,
        socket_timeout=5,
        retry_on_timeout=True,
    )
    try:
        await client.ping()
    except redis.RedisError as e:
        logger.warning("redis_unavailable", error=str(e))
        await client.aclose()
        return None

    _client = client
    logger.info("redis_connected")
    return _client


async def close_redis() -> None:
    global _client

    if _client is None:
        return
    try:
        await _client.aclose()
        logger.info("redis_connection_closed")
    except redis.RedisError as e:
        logger.warning("redis_close_failed", error=str(e))
    finally:
        _client = None


async def is_redis_healthy() -> bool:
    """Ping the server; False when Redis is disabled or unreachable."""
    if _client is None:
        return False
    try:
        return bool(await _client.ping())
    except redis.RedisError:
        return False
