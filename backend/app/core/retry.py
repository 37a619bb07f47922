# app/core/retry.py
"""
Bounded retry with exponential backoff for outbound calls.
"""
import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

logger = logging.getLogger("uvicorn.error")

T = TypeVar("T")


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    base_delay: float = 1.0,
    label: str = "operation",
) -> T:
    """
    Await `operation()` until it succeeds or `max_attempts` attempts have failed.

    Between attempt i and i+1 (0-based) waits `base_delay * 2**i` seconds.
    There is no wait after the final attempt; its exception is re-raised.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")

    last_error: Exception | None = None
    for attempt in range(max_attempts):
        try:
            return await operation()
        except Exception as e:
            last_error = e
            logger.warning("[retry] %s: attempt %d/%d failed: %r", label, attempt + 1, max_attempts, e)
            if attempt < max_attempts - 1:
                await asyncio.sleep(base_delay * (2 ** attempt))

    raise last_error
