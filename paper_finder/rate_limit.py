"""Minimum-interval rate limiter for upstream APIs."""

import asyncio
import time


class RateLimiter:
    """Rate limiter enforcing a minimum delay between requests."""

    def __init__(self, min_interval: float):
        """
        Initialize rate limiter.

        Args:
            min_interval: Minimum seconds between requests (0 disables limiting)
        """
        self._min_interval = min_interval
        self._last_request_time: float = 0.0
        self._lock = asyncio.Lock()

    @classmethod
    def per_second(cls, requests_per_second: float) -> "RateLimiter":
        return cls(1.0 / requests_per_second if requests_per_second > 0 else 0.0)

    async def acquire(self) -> None:
        """Acquire rate limit slot, waiting if necessary."""
        async with self._lock:
            now = time.monotonic()
            elapsed = now - self._last_request_time
            if elapsed < self._min_interval:
                await asyncio.sleep(self._min_interval - elapsed)
            self._last_request_time = time.monotonic()
