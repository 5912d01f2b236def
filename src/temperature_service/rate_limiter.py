"""Rate limiting implementation."""

import logging
import math
import time
from typing import Callable, Optional

import redis.asyncio as redis

from temperature_service.config import (
    REDIS_URL,
    RATE_LIMIT_REDIS_KEY_PREFIX,
    RATE_LIMIT_WINDOW_SECONDS
)

logger = logging.getLogger(__name__)


class RateLimiter:
    """Sliding-window rate limiter using a Redis sorted set per client.

    Allows requests if Redis is unavailable.
    """

    def __init__(
        self,
        scope: str,
        max_requests: int,
        window_seconds: float = RATE_LIMIT_WINDOW_SECONDS,
        redis_client: Optional[redis.Redis] = None,
        time_func: Callable[[], float] = time.time
    ):
        """Initialize rate limiter.

        Args:
            scope: Name distinguishing this limit's keys from other limits
            max_requests: Requests allowed per client within the window
            window_seconds: Length of the sliding window
            redis_client: Optional Redis client. If None, creates new client.
            time_func: Callable returning the current Unix time in seconds
        """
        self.redis_client = redis_client if redis_client is not None else redis.from_url(REDIS_URL)
        self.scope = scope
        self.max_requests = max_requests
        self.window_size = window_seconds
        self.key_prefix = f"{RATE_LIMIT_REDIS_KEY_PREFIX}:{scope}"
        self.time_func = time_func

    async def is_allowed(self, client_id: str) -> tuple[bool, int]:
        """Check if a request is allowed under the rate limit.

        Args:
            client_id: Identifier of the caller, usually its IP address

        Returns:
            Tuple of (is_allowed, retry_after_seconds)
            - is_allowed: True if request should be allowed
            - retry_after_seconds: Seconds to wait before retrying (0 if allowed)
        """
        key = f"{self.key_prefix}:{client_id}"
        try:
            current_time = self.time_func()
            # Use microseconds
            current_timestamp = int(current_time * 1000000)
            window_start = (current_time - self.window_size) * 1000000

            pipe = self.redis_client.pipeline()
            pipe.zremrangebyscore(key, 0, window_start)
            pipe.zcard(key)
            pipe.zrange(key, 0, 0, withscores=True)
            _, request_count, oldest = await pipe.execute()

            if request_count >= self.max_requests:
                # Rejected requests are not recorded
                retry_after = self._retry_after(oldest, current_time)
                logger.debug(f"Rate limited {key}: count={request_count}, max={self.max_requests}, retry_after={retry_after}")
                return False, retry_after

            pipe = self.redis_client.pipeline()
            pipe.zadd(key, {str(current_timestamp): current_timestamp})
            pipe.expire(key, math.ceil(self.window_size))
            await pipe.execute()

            logger.debug(f"Not rate limited {key}: count={request_count + 1}, max={self.max_requests}")
            return True, 0

        except Exception as e:
            # Allow request if Redis is down
            logger.error(f"Rate limiter error: {e}")
            return True, 0

    def _retry_after(self, oldest: list, current_time: float) -> int:
        """Seconds until the oldest request in the window leaves it."""
        if not oldest:
            return math.ceil(self.window_size)
        oldest_time = oldest[0][1] / 1000000
        return max(1, math.ceil(oldest_time + self.window_size - current_time))

    async def close(self):
        """Close Redis connection."""
        if self.redis_client:
            await self.redis_client.aclose()
