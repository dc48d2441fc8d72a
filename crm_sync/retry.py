"""Tenacity retry wrapper driven by RetryConfig."""

from __future__ import annotations

from collections.abc import Callable

from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from .config import RetryConfig


def with_retry(
    config: RetryConfig,
    *,
    retry_on: Callable[[BaseException], bool] = lambda exc: isinstance(exc, Exception),
) -> Callable:
    """Return a tenacity retry decorator configured from *config*.

    *retry_on* decides per exception whether another attempt is made; the
    last exception is re-raised once attempts are exhausted.

    Usage::

        @with_retry(config.retry, retry_on=is_transient)
        async def fetch() -> list[Record]: ...
    """
    return retry(
        stop=stop_after_attempt(config.max_attempts),
        wait=wait_exponential(
            multiplier=config.multiplier,
            min=config.initial_wait_seconds,
            max=config.max_wait_seconds,
        ),
        retry=retry_if_exception(retry_on),
        reraise=True,
    )
