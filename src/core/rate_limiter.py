# src/core/rate_limiter.py
import logging
from typing import Optional, Tuple

import redis.asyncio as redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)


def _rate_key(identifier: str) -> str:
    return f"rate_limit:{identifier}"


class RateLimiter:
    """Fixed-window request counter per client, backed by Redis."""

    def __init__(self, redis_url: str, max_calls: int, period: int = 60):
        """
        Args:
            redis_url: Redis connection URL
            max_calls: allowed calls per window
            period: window in seconds
        """
        self.max_calls = max_calls
        self.period = period
        self.r = redis.from_url(redis_url, decode_responses=True)

    async def hit(self, identifier: str) -> Tuple[bool, Optional[int]]:
        """
        Count one request for `identifier`.
        Returns (allowed, retry_after_seconds_or_None).
        """
        key = _rate_key(identifier)
        try:
            current = await self.r.incr(key)
            if current == 1:
                # first increment, set expiry for the window
                await self.r.expire(key, self.period)

            if current > self.max_calls:
                ttl = await self.r.ttl(key)
                return False, ttl if ttl and ttl > 0 else self.period
        except RedisError as e:
            # Allow if Redis is not available
            logger.warning(f"Rate limiter unavailable, allowing request: {e}")
        return True, None

    async def close(self) -> None:
        await self.r.aclose()
