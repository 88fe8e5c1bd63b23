"""Common retry utilities for backend calls."""

import asyncio
import random
from typing import Any, Awaitable, Callable, Optional, TypeVar

from ..io.logger import get_logger

T = TypeVar("T")

logger = get_logger("retry")


def compute_backoff_delay(
    attempt: int, base_delay: float, max_delay: float, jitter: bool = False
) -> float:
    """Capped exponential backoff delay for a zero-based attempt number.

    With jitter the delay is scaled into [50%, 100%] of its nominal value.
    """
    delay = min(base_delay * (2 ** max(0, attempt)), max_delay)
    if jitter:
        delay = delay * (0.5 + 0.5 * random.random())
    return delay


async def retry_with_exponential_backoff(
    func: Callable[..., Awaitable[T]],
    *args: Any,
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    jitter: bool = True,
    retry_on: Optional[tuple[type[Exception], ...]] = None,
    sleep: Optional[Callable[[float], Awaitable[Any]]] = None,
    **kwargs: Any,
) -> T:
    """
    Retry an async function with exponential backoff.

    Args:
        func: The coroutine function to retry
        max_retries: Maximum number of attempts
        base_delay: Initial delay in seconds
        max_delay: Maximum delay in seconds
        jitter: Whether to add random jitter to delays
        retry_on: Tuple of exception types to retry on (default: all exceptions)
        sleep: Awaitable sleep used between attempts (default: asyncio.sleep)
        *args: Positional arguments for func
        **kwargs: Keyword arguments for func

    Returns:
        The value returned by func

    Raises:
        The last exception if all retries fail
    """
    sleep = sleep or asyncio.sleep

    for attempt in range(max_retries):
        try:
            return await func(*args, **kwargs)

        except Exception as e:
            if retry_on and not isinstance(e, retry_on):
                raise

            if attempt >= max_retries - 1:
                raise

            delay = compute_backoff_delay(attempt, base_delay, max_delay, jitter)
            logger.debug(
                f"Retrying in {delay:.1f}s due to error: {str(e)[:80]} "
                f"(attempt {attempt + 1}/{max_retries})"
            )
            await sleep(delay)

    raise RuntimeError("retry_with_exponential_backoff called with max_retries < 1")


def is_throttling_error(error: Exception) -> bool:
    """Check if an error message indicates request throttling."""
    error_str = str(error).lower()
    return any(
        indicator in error_str
        for indicator in [
            "throttl",
            "rate exceeded",
            "rate limit",
            "too many requests",
            "limit exceeded",
            "429",
        ]
    )


def is_retryable_error(error: Exception) -> bool:
    """Check if an error is a transient failure worth retrying."""
    error_str = str(error).lower()

    if is_throttling_error(error):
        return True

    retryable_patterns = [
        "timeout",
        "timed out",
        "read timeout",
        "connection",
        "network",
        "temporar",
        "unavailable",
        "gateway",
        "internal failure",
        "500",
        "502",
        "503",
        "504",
    ]

    return any(pattern in error_str for pattern in retryable_patterns)
