"""Retry helpers for feed downloads, built on tenacity."""

from __future__ import annotations

import logging

import httpx
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger("topic_radar")

RETRYABLE_STATUS = {429, 500, 502, 503, 504}


def is_transient_http_error(exc: BaseException) -> bool:
    """True for network failures and throttling/5xx responses."""
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in RETRYABLE_STATUS
    return isinstance(exc, (httpx.TransportError, ConnectionError))


def with_retry(
    max_attempts: int = 3,
    min_wait: float = 1,
    max_wait: float = 30,
    should_retry=is_transient_http_error,
):
    """Decorator factory: exponential backoff while ``should_retry(exc)`` holds."""
    return retry(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=1, min=min_wait, max=max_wait),
        retry=retry_if_exception(should_retry),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
