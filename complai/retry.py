"""
Retry Decorator — Exponential Backoff for Transient Upstream Failures

Wraps plain functions and coroutine functions alike. Used by the upstream
providers only: the orchestrator makes a single bounded call and never
retries on its own.
"""

import asyncio
import inspect
import logging
import time
from functools import wraps

logger = logging.getLogger(__name__)


def backoff_delay(attempt: int, base_delay: float, max_delay: float) -> float:
    """Delay before retry number ``attempt + 1``, capped at ``max_delay``."""
    return min(base_delay * (2 ** attempt), max_delay)


def retry_with_backoff(
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    retryable_exceptions: tuple = (Exception,),
):
    """
    Decorator that retries a function with exponential backoff.

    Args:
        max_retries: Maximum number of retry attempts (not counting the first call).
        base_delay: Initial delay in seconds between retries.
        max_delay: Maximum delay in seconds (caps exponential growth).
        retryable_exceptions: Tuple of exception types to catch and retry.
    """
    def log_retry(func, attempt, error, delay):
        logger.warning(
            "Retry %d/%d for %s after error: %s. Waiting %.1fs",
            attempt + 1, max_retries, func.__name__, error, delay,
        )

    def decorator(func):
        if inspect.iscoroutinefunction(func):
            @wraps(func)
            async def async_wrapper(*args, **kwargs):
                for attempt in range(max_retries + 1):
                    try:
                        return await func(*args, **kwargs)
                    except retryable_exceptions as e:
                        if attempt >= max_retries:
                            raise
                        delay = backoff_delay(attempt, base_delay, max_delay)
                        log_retry(func, attempt, e, delay)
                        await asyncio.sleep(delay)
            return async_wrapper

        @wraps(func)
        def wrapper(*args, **kwargs):
            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except retryable_exceptions as e:
                    if attempt >= max_retries:
                        raise
                    delay = backoff_delay(attempt, base_delay, max_delay)
                    log_retry(func, attempt, e, delay)
                    time.sleep(delay)
        return wrapper
    return decorator
