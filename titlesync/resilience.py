"""Bounded retry for transport-level failures.

Only `TransportError` (connection failures, timeouts, HTTP 5xx) is retried.
Application errors such as 4xx responses surface on the first attempt.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, TypeVar

from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from .errors import TransportError

logger = logging.getLogger(__name__)

T = TypeVar("T")


# Startup lookups against the ledger node: 2s, 4s, 8s, 16s between attempts.
service_startup_retry = retry(
    stop=stop_after_attempt(5),
    wait=wait_exponential(multiplier=1, min=2, max=16),
    retry=retry_if_exception_type(TransportError),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)


def create_transport_retry(
    max_attempts: int = 3,
    min_wait: float = 1.0,
    max_wait: float = 8.0,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Create a retry decorator for outbound HTTP calls."""
    return retry(
        stop=stop_after_attempt(max(1, max_attempts)),
        wait=wait_exponential(multiplier=1, min=min_wait, max=max_wait),
        retry=retry_if_exception_type(TransportError),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )


def call_with_transport_retry(
    fn: Callable[..., T],
    *args: Any,
    max_attempts: int,
    min_wait: float,
    max_wait: float,
    **kwargs: Any,
) -> T:
    retrying = create_transport_retry(max_attempts, min_wait, max_wait)
    return retrying(fn)(*args, **kwargs)
