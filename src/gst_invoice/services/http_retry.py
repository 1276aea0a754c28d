"""Retry rules for calls to the customer/invoice record store.

Reads (``GET``) are idempotent and ride out transport failures as well as the
gateway's throttling and overload replies. Creates and updates are retried only
when the connection failed before the store saw the request, so a slow write
never lands twice.
"""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TypeVar

import requests.exceptions

T = TypeVar("T")

logger = logging.getLogger(__name__)


class RetryableHTTPError(requests.exceptions.HTTPError):
    """The record store answered 429/502/503/504 to a lookup.

    *retry_after* holds the seconds from the store's ``Retry-After`` header,
    when it sent one.
    """

    def __init__(self, message: str, *, retry_after: float | None = None):
        super().__init__(message)
        self.retry_after = retry_after


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int
    base_delay: float
    max_delay: float
    backoff_factor: float
    jitter: float
    retryable_exceptions: tuple[type[Exception], ...]
    retryable_status_codes: frozenset[int] = field(default_factory=frozenset)

    def is_retryable_status(self, status_code: int) -> bool:
        return status_code in self.retryable_status_codes


RECORDS_READ = RetryPolicy(
    max_attempts=4,
    base_delay=0.5,
    max_delay=8.0,
    backoff_factor=2.0,
    jitter=0.25,
    retryable_exceptions=(
        requests.exceptions.ConnectionError,
        requests.exceptions.Timeout,
        RetryableHTTPError,
    ),
    retryable_status_codes=frozenset({429, 502, 503, 504}),
)

# A timed-out create may already be stored; only refused connections retry
RECORDS_WRITE = RetryPolicy(
    max_attempts=2,
    base_delay=1.0,
    max_delay=4.0,
    backoff_factor=2.0,
    jitter=0.25,
    retryable_exceptions=(requests.exceptions.ConnectionError,),
)


def policy_for(method: str) -> RetryPolicy:
    """Policy for a record-store call made with HTTP *method*."""
    return RECORDS_READ if method.upper() == "GET" else RECORDS_WRITE


def parse_retry_after(value: str | None) -> float | None:
    """Seconds from a ``Retry-After`` header; HTTP-date forms are ignored."""
    if not value or not value.strip().isdigit():
        return None
    return float(value.strip())


def _calc_delay(attempt: int, policy: RetryPolicy, retry_after: float | None = None) -> float:
    """Backoff before retry number *attempt* + 1 (*attempt* is 0-indexed).

    A store-supplied *retry_after* wins over the computed backoff but is still
    capped at ``policy.max_delay``.
    """
    if retry_after is not None:
        return min(retry_after, policy.max_delay)
    delay = min(policy.base_delay * (policy.backoff_factor**attempt), policy.max_delay)
    jitter_range = delay * policy.jitter
    return max(0.0, delay + random.uniform(-jitter_range, jitter_range))


def retry_call(
    func: Callable[[], T],
    policy: RetryPolicy,
    *,
    sleep_func: Callable[[float], object] = time.sleep,
    description: str = "record store call",
) -> T:
    """Call *func()* until it succeeds or *policy* runs out of attempts.

    Only ``policy.retryable_exceptions`` are retried; the last one is re-raised
    once attempts are exhausted. *description* names the store action in logs.
    """
    attempt = 0
    while True:
        try:
            return func()
        except policy.retryable_exceptions as exc:
            attempt += 1
            if attempt >= policy.max_attempts:
                logger.error(
                    "%s failed after %d attempts: %s", description, attempt, type(exc).__name__
                )
                raise
            delay = _calc_delay(attempt - 1, policy, getattr(exc, "retry_after", None))
            logger.warning(
                "Record store busy during %s (%d/%d, %s); retrying in %.1fs",
                description,
                attempt,
                policy.max_attempts,
                type(exc).__name__,
                delay,
            )
            sleep_func(delay)
