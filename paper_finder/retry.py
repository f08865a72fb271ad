"""Bounded retry with exponential backoff for async operations."""

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from .errors import RetryExhausted

logger = logging.getLogger(__name__)

T = TypeVar("T")


def backoff_delay(attempt: int, base_delay: float) -> float:
    """Delay before the attempt following ``attempt`` (1-indexed)."""
    return base_delay * (2 ** (attempt - 1))


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    base_delay: float = 1.0,
    *,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """
    Run an async operation, retrying on failure with exponential backoff.

    Waits ``base_delay * 2 ** (attempt - 1)`` seconds after each failed attempt
    except the last. No jitter is applied.

    Args:
        operation: Zero-argument callable returning an awaitable
        max_attempts: Total number of attempts (>= 1)
        base_delay: Delay in seconds after the first failure
        sleep: Awaitable sleep function (replaceable in tests)

    Returns:
        The operation's result

    Raises:
        RetryExhausted: If every attempt failed; chained from the last error
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    last_error: Exception | None = None

    for attempt in range(1, max_attempts + 1):
        try:
            return await operation()
        except Exception as e:
            last_error = e
            if attempt == max_attempts:
                break

            delay = backoff_delay(attempt, base_delay)
            logger.warning(
                f"Attempt {attempt}/{max_attempts} failed ({e}), retrying in {delay:.2f}s"
            )
            await sleep(delay)

    logger.error(f"Operation failed after {max_attempts} attempts")
    raise RetryExhausted(max_attempts, last_error) from last_error


class RetryExecutor:
    """
    Retry policy object passed to the components that call remote services.

    Usage:
        retry = RetryExecutor(max_attempts=3, base_delay=1.0)
        response = await retry.run(lambda: client.get(url))
    """

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self._sleep = sleep

    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Run operation under this policy. Raises RetryExhausted on failure."""
        return await with_retry(
            operation,
            self.max_attempts,
            self.base_delay,
            sleep=self._sleep,
        )
