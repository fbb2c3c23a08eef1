"""
Redis client management

One shared client serves the short-lived counter and rate-limit commands;
long-lived streams open their own pub/sub connection from it.
"""
import logging
from typing import Optional

from fastapi import Request
from redis.asyncio import Redis
from redis.exceptions import RedisError

from adwarden.core.config import settings

logger = logging.getLogger(__name__)


def create_redis_client(url: Optional[str] = None) -> Optional[Redis]:
    """Build the shared client, or None when Redis is not configured"""
    url = url or settings.REDIS_URL
    if not url:
        logger.info("REDIS_URL not set, realtime features disabled")
        return None
    return Redis.from_url(
        url,
        decode_responses=True,
        socket_connect_timeout=settings.REDIS_CONNECT_TIMEOUT_SECONDS,
    )


async def close_redis_client(client: Optional[Redis]) -> None:
    if client is None:
        return
    try:
        await client.aclose()
    except RedisError as e:
        logger.warning(f"Error closing Redis client: {e}")


def get_redis(request: Request) -> Optional[Redis]:
    """Dependency returning the app-wide Redis client (None when disabled)"""
    return getattr(request.app.state, "redis", None)
