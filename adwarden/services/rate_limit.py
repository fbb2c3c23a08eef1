"""
Fixed-window rate limiting per client IP, backed by Redis

Without Redis (or on a Redis error) requests are allowed.
"""
import logging
from typing import Optional

from fastapi import Request
from redis.asyncio import Redis
from redis.exceptions import RedisError

from adwarden.core.exceptions import RateLimitExceeded

logger = logging.getLogger(__name__)


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    if request.client:
        return request.client.host
    return "unknown"


async def hit(redis: Optional[Redis], key: str, window_seconds: int) -> Optional[int]:
    """Count one hit in the current window; None when it could not be counted"""
    if redis is None:
        return None
    try:
        count = await redis.incr(key)
        if count == 1:
            await redis.expire(key, window_seconds)
        return count
    except (RedisError, OSError) as e:
        logger.warning(f"Rate limit check skipped for {key}: {e}")
        return None


async def enforce_rate_limit(
    redis: Optional[Redis],
    bucket: str,
    identifier: str,
    limit: int,
    window_seconds: int,
    error: str = "Too many requests. Please try again later.",
) -> None:
    count = await hit(redis, f"ratelimit:{bucket}:{identifier}", window_seconds)
    if count is not None and count > limit:
        logger.info(f"Rate limit exceeded: bucket={bucket} ip={identifier} count={count}")
        raise RateLimitExceeded(error)
