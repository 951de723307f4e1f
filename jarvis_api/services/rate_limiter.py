"""
RateLimiter - Fixed-window request counter guarding outbound calls.

Each bucket counts requests until its window resets:
- Bucket is (re)started when missing or once now > window_reset_at
- Acquire fails while count >= max_requests, reporting time until reset
- Otherwise count is incremented and the request may proceed
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from loguru import logger

from jarvis_api.services.errors import RateLimitExceededError

GLOBAL_WINDOW = "global"


@dataclass
class RateLimitBucket:
    """Request count for one window."""

    window_key: str
    count: int
    window_reset_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "window_key": self.window_key,
            "count": self.count,
            "window_reset_at": self.window_reset_at.isoformat(),
        }


class RateLimiter:
    """
    Fixed-window rate limiter shared by every request of one client.

    Usage:
        limiter = RateLimiter(max_requests=60, window=timedelta(minutes=1))

        await limiter.try_acquire()  # raises RateLimitExceededError when full
    """

    def __init__(
        self,
        max_requests: int,
        window: timedelta,
    ):
        self.max_requests = max_requests
        self.window = window

        self._buckets: dict[str, RateLimitBucket] = {}
        self._lock = asyncio.Lock()

    async def try_acquire(self, window_key: str = GLOBAL_WINDOW) -> None:
        """
        Consume one request from the window.

        Raises:
            RateLimitExceededError: If the window is already full
        """
        async with self._lock:
            now = datetime.now()
            bucket = self._buckets.get(window_key)

            if bucket is None or now > bucket.window_reset_at:
                bucket = RateLimitBucket(
                    window_key=window_key,
                    count=0,
                    window_reset_at=now + self.window,
                )
                self._buckets[window_key] = bucket

            if bucket.count >= self.max_requests:
                wait_ms = (bucket.window_reset_at - now).total_seconds() * 1000
                logger.warning(
                    f"Rate limit reached for '{window_key}' "
                    f"({bucket.count}/{self.max_requests}), resets in {wait_ms:.0f}ms"
                )
                raise RateLimitExceededError(wait_ms)

            bucket.count += 1

    def get_bucket(self, window_key: str = GLOBAL_WINDOW) -> RateLimitBucket | None:
        """Get the current bucket for a window, if one was started."""
        return self._buckets.get(window_key)

    def get_status(self) -> dict[str, Any]:
        """Get limiter state as dictionary."""
        return {
            "max_requests": self.max_requests,
            "window_ms": self.window.total_seconds() * 1000,
            "buckets": {k: b.to_dict() for k, b in self._buckets.items()},
        }

    def reset(self) -> None:
        """Drop all buckets."""
        self._buckets.clear()
        logger.info("Rate limiter reset")
