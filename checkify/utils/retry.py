"""Retry utility with exponential backoff."""

import asyncio
import logging
import random
from typing import Any, Awaitable, Callable, TypeVar

import httpx

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


def is_retryable_http_error(exc: BaseException) -> bool:
    """Rate limiting, upstream 5xx and transport failures are worth another attempt."""
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in RETRYABLE_STATUS_CODES
    return isinstance(exc, httpx.TransportError)


async def with_retry(
    func: Callable[..., Awaitable[T]],
    *args: Any,
    max_attempts: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    retry_if: Callable[[BaseException], bool] = is_retryable_http_error,
    **kwargs: Any,
) -> T:
    """
    Execute an async function with exponential backoff retry.

    Args:
        func: The async function to execute
        *args: Positional arguments to pass to func
        max_attempts: Maximum number of attempts; 1 disables retrying
        base_delay: Initial delay in seconds (default 1.0)
        max_delay: Maximum delay between retries (default 30.0)
        retry_if: Predicate deciding whether an exception is retried
        **kwargs: Keyword arguments to pass to func

    Returns:
        The result of the function call

    Raises:
        The last exception if all attempts fail, or the first one
        retry_if rejects
    """
    for attempt in range(1, max_attempts + 1):
        try:
            return await func(*args, **kwargs)
        except Exception as e:
            if attempt == max_attempts or not retry_if(e):
                if max_attempts > 1:
                    logger.error(
                        f"Giving up on {func.__name__} after attempt {attempt}/{max_attempts}: {e}"
                    )
                raise

            # Calculate delay with exponential backoff and jitter
            delay = min(base_delay * (2 ** (attempt - 1)), max_delay)
            # Add jitter (0-25% of delay)
            jitter = delay * random.uniform(0, 0.25)
            actual_delay = delay + jitter

            logger.warning(
                f"Attempt {attempt}/{max_attempts} failed for {func.__name__}: {e}. "
                f"Retrying in {actual_delay:.2f}s..."
            )
            await asyncio.sleep(actual_delay)

    raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
