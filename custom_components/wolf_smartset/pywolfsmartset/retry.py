from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable
from typing import Callable, TypeVar

from .exceptions import ProtocolError, TransportError

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


def is_retryable_error(error: Exception) -> bool:
    """
    Determine if an error is retryable.

    Retryable errors:
    - Transport errors (connect, TLS, timeout)
    - HTTP 5xx answers from the portal

    Non-retryable errors:
    - HTTP 401/403 (session problem) - should trigger re-login instead
    - Other 4xx answers
    - Decode errors and everything else
    """
    if isinstance(error, ProtocolError):
        return error.status is not None and 500 <= error.status < 600

    if isinstance(error, (TransportError, asyncio.TimeoutError)):
        return True

    return False


def is_auth_error(error: Exception) -> bool:
    """Check if error is an authorization-shaped HTTP answer (401/403)."""
    return isinstance(error, ProtocolError) and error.status in (401, 403)


async def async_retry_with_backoff(
    func: Callable[[], Awaitable[T]],
    max_retries: int = 2,
    initial_delay: float = 1.0,
    max_delay: float = 10.0,
    exponential_base: float = 2.0,
    jitter: bool = True,
    context: str = "",
) -> T:
    """
    Retry an async function with exponential backoff.

    Args:
        func: Async function to retry (no arguments)
        max_retries: Maximum number of retry attempts (default: 2)
        initial_delay: Initial delay in seconds (default: 1.0)
        max_delay: Maximum delay in seconds (default: 10.0)
        exponential_base: Base for exponential backoff (default: 2.0)
        jitter: Add random jitter to prevent thundering herd (default: True)
        context: Context string for logging (default: "")

    Returns:
        Result of the function call

    Raises:
        The last error once retries are exhausted, or the first
        non-retryable error immediately
    """
    prefix = f"{context}: " if context else ""

    for attempt in range(max_retries + 1):
        try:
            return await func()
        except Exception as err:
            if not is_retryable_error(err):
                _LOGGER.debug(
                    "%sNon-retryable error on attempt %d/%d: %s",
                    prefix,
                    attempt + 1,
                    max_retries + 1,
                    err,
                )
                raise

            if attempt >= max_retries:
                _LOGGER.warning(
                    "%sMax retries (%d) exceeded, giving up: %s",
                    prefix,
                    max_retries + 1,
                    err,
                )
                raise

            delay = min(initial_delay * (exponential_base**attempt), max_delay)
            if jitter:
                delay += delay * 0.25 * random.random()

            _LOGGER.debug(
                "%sRetryable error on attempt %d/%d, retrying in %.2fs: %s",
                prefix,
                attempt + 1,
                max_retries + 1,
                delay,
                err,
            )
            await asyncio.sleep(delay)

    raise RuntimeError("Unexpected error in retry logic")
