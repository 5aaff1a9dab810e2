"""Retry logic with exponential backoff.

The delay before retry n (n >= 1) is initial_backoff * multiplier ** (n - 1),
optionally capped at max_backoff.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

from chunkup.core.config import DEFAULT_MAX_RETRIES, DEFAULT_RETRY_DELAY

logger = logging.getLogger(__name__)

DEFAULT_BACKOFF_MULTIPLIER = 2.0

# Called before each backoff wait with (retry_number, error, delay)
RetryCallback = Callable[[int, Exception, float], None]


def backoff_delay(
    retry: int,
    initial_backoff: float = DEFAULT_RETRY_DELAY,
    backoff_multiplier: float = DEFAULT_BACKOFF_MULTIPLIER,
    max_backoff: float | None = None,
) -> float:
    """Return the wait before the given retry (1-based)."""
    delay = initial_backoff * backoff_multiplier ** (retry - 1)
    if max_backoff is not None:
        delay = min(delay, max_backoff)
    return delay


def retry_with_backoff(
    func: Callable[[], Any],
    max_retries: int = DEFAULT_MAX_RETRIES,
    initial_backoff: float = DEFAULT_RETRY_DELAY,
    backoff_multiplier: float = DEFAULT_BACKOFF_MULTIPLIER,
    max_backoff: float | None = None,
    retryable_exceptions: tuple[type[Exception], ...] = (Exception,),
    on_retry: RetryCallback | None = None,
) -> Any:
    """Execute a function with exponential backoff retry.

    The function runs at most max_retries + 1 times. Exceptions outside
    retryable_exceptions propagate immediately.

    Args:
        func: Function to execute.
        max_retries: Maximum number of retry attempts.
        initial_backoff: Backoff before the first retry, in seconds.
        backoff_multiplier: Multiplier applied for each further retry.
        max_backoff: Optional cap on a single backoff, in seconds.
        retryable_exceptions: Tuple of exception types to retry on.
        on_retry: Optional callback invoked before each backoff wait.

    Returns:
        Result of the function.

    Raises:
        The last exception if all retries fail.
    """
    retry = 0
    while True:
        try:
            return func()
        except retryable_exceptions as e:
            if retry == max_retries:
                logger.error(f"All {max_retries + 1} attempts failed: {e}")
                raise

            retry += 1
            delay = backoff_delay(retry, initial_backoff, backoff_multiplier, max_backoff)
            logger.warning(
                f"Attempt {retry}/{max_retries + 1} failed: {e}. "
                f"Retrying in {delay:.1f}s..."
            )
            if on_retry:
                on_retry(retry, e, delay)
            time.sleep(delay)
