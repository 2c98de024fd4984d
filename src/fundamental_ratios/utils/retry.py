"""
retry.py – Caller-side retry decorator with exponential backoff.

The fetch client never retries on its own: a ``FetchError`` is terminal for
the step that raised it. Callers that want resilience (the CLI's
``--retries`` option) wrap a whole unit of work with ``with_retry``.

Uses tenacity under the hood. Only 429, transient 5xx and network-level
faults are retried.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, TypeVar

from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from fundamental_ratios.exceptions import FetchError

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

RETRYABLE_STATUS_CODES: frozenset[int] = frozenset({429, 500, 502, 503, 504})


def is_retryable(exc: BaseException) -> bool:
    """True for FetchErrors worth another attempt."""
    if isinstance(exc, FetchError):
        return exc.status_code is None or exc.status_code in RETRYABLE_STATUS_CODES
    return False


def with_retry(
    max_attempts: int = 3,
    min_wait: float = 1.0,
    max_wait: float = 60.0,
) -> Callable[[F], F]:
    """
    Decorator factory that applies tenacity retry logic.

    Parameters
    ----------
    max_attempts:
        Maximum number of total attempts (including first). 1 disables retry.
    min_wait:
        Minimum wait between retries in seconds.
    max_wait:
        Maximum wait between retries in seconds.

    Usage
    -----
    >>> @with_retry(max_attempts=3)
    ... def fetch_something() -> dict:
    ...     ...
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
    return retry(  # type: ignore[return-value]
        retry=retry_if_exception(is_retryable),
        wait=wait_exponential(multiplier=1, min=min_wait, max=max_wait),
        stop=stop_after_attempt(max_attempts),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
