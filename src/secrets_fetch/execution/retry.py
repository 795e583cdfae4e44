"""Retry engine with exponential backoff and full jitter.

Runs an asynchronous operation until it succeeds, fails with an error the
classifier deems final, or runs out of attempts. The delay before attempt
``n + 1`` is::

    base_delay * 2 ** n + uniform(0, base_delay)

so with the defaults (5 attempts, 0.5s base) the waits are roughly 1s, 2s,
4s and 8s, each plus up to half a second of jitter.

Example usage:
    from functools import partial

    from secrets_fetch.execution.retry import with_retry

    secrets = await with_retry(partial(fetch_once, token, project, config))
"""

from __future__ import annotations

import asyncio
import random
from collections.abc import Awaitable, Callable
from typing import TypeVar

from secrets_fetch.core.constants import BASE_DELAY_SECONDS, MAX_ATTEMPTS
from secrets_fetch.core.errors import should_retry
from secrets_fetch.core.logging import get_logger

T = TypeVar("T")

# Module-level logger
_logger = get_logger("retry")


def compute_backoff_delay(attempt: int, base_delay: float, jitter: float) -> float:
    """Compute the wait after a failed attempt.

    Args:
        attempt: The 1-indexed attempt that just failed.
        base_delay: Base delay in seconds.
        jitter: Random fraction in [0, 1) scaling the added jitter.

    Returns:
        Delay in seconds, in [base * 2**attempt, base * 2**attempt + base).
    """
    return base_delay * (2 ** attempt) + jitter * base_delay


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = MAX_ATTEMPTS,
    base_delay: float = BASE_DELAY_SECONDS,
) -> T:
    """Run ``operation`` with retries on retriable failures.

    Each attempt completes before the next begins. The classifier is not
    consulted after the final attempt; its error is raised as-is.

    Args:
        operation: Zero-argument callable producing a fresh awaitable per call.
        max_attempts: Maximum number of executions of ``operation``.
        base_delay: Base backoff delay in seconds.

    Returns:
        The result of the first successful attempt.

    Raises:
        ValueError: If max_attempts < 1 or base_delay < 0.
        Exception: The error of the last attempt, unchanged.
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
    if base_delay < 0:
        raise ValueError(f"base_delay must be >= 0, got {base_delay}")

    attempt = 1
    while True:
        try:
            return await operation()
        except Exception as e:
            if attempt == max_attempts:
                _logger.warning(
                    "retry.exhausted",
                    attempts=attempt,
                    error=str(e),
                )
                raise

            if not should_retry(e):
                _logger.debug(
                    "retry.not_retriable",
                    attempt=attempt,
                    error_type=type(e).__name__,
                    error=str(e),
                )
                raise

            delay = compute_backoff_delay(attempt, base_delay, random.random())
            _logger.info(
                "retry.scheduled",
                attempt=attempt,
                max_attempts=max_attempts,
                delay_seconds=round(delay, 3),
                status_code=getattr(e, "status_code", None),
                error=str(e),
            )
            await asyncio.sleep(delay)
            attempt += 1


__all__ = [
    "compute_backoff_delay",
    "with_retry",
]
