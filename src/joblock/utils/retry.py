"""Opt-in retry policy for callers that want to ride out backend blips.

The lock engine never retries on its own; a connection error surfaces to
whoever called it. Wrap the call site in :func:`backend_retrying` to add a
bounded retry.
"""

from __future__ import annotations

from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential_jitter

BACKEND_ERRORS = (RedisConnectionError, RedisTimeoutError, ConnectionError)


def backend_retrying(attempts: int = 3, *, max_wait: float = 2.0) -> AsyncRetrying:
    """``async for`` retry loop that only retries backend connection errors."""
    return AsyncRetrying(
        stop=stop_after_attempt(max(1, attempts)),
        wait=wait_exponential_jitter(initial=0.1, max=max_wait, jitter=0.1),
        retry=retry_if_exception_type(BACKEND_ERRORS),
        reraise=True,
    )
