"""Async retry decorator with exponential backoff and jitter."""

from __future__ import annotations

import asyncio
from functools import wraps
import logging
import random
from typing import TYPE_CHECKING, ParamSpec, TypeVar

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

P = ParamSpec("P")
R = TypeVar("R")


def retry(
    max_attempts: int = 3,
    initial_delay: float = 1.0,
    max_delay: float = 30.0,
    exponential_base: float = 2.0,
    jitter: bool = True,
    exceptions: tuple[type[Exception], ...] = (Exception,),
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Retry an async callable on the given exception types.

    Args:
        max_attempts: Total attempts including the first call.
        initial_delay: Delay before the second attempt, in seconds.
        max_delay: Upper bound on any single delay.
        exponential_base: Multiplier applied to the delay after each failure.
        jitter: Scale each delay by a random factor in [0.5, 1.5].
        exceptions: Exception types that trigger a retry. Anything else
            propagates immediately.

    Returns:
        Decorator wrapping the coroutine function.

    Example:
        @retry(max_attempts=5, exceptions=(ConnectionError,))
        async def connect() -> None: ...
    """

    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            delay = initial_delay
            for attempt in range(1, max_attempts + 1):
                try:
                    return await func(*args, **kwargs)
                except exceptions as e:
                    if attempt >= max_attempts:
                        logger.error(
                            "Retries exhausted for %s",
                            func.__name__,
                            extra={"function": func.__name__, "attempts": attempt, "error": str(e)},
                        )
                        raise
                    sleep_for = min(delay, max_delay)
                    if jitter:
                        sleep_for *= random.uniform(0.5, 1.5)
                    logger.warning(
                        "Retrying %s after failure",
                        func.__name__,
                        extra={
                            "function": func.__name__,
                            "attempt": attempt,
                            "delay": round(sleep_for, 3),
                            "error": str(e),
                        },
                    )
                    await asyncio.sleep(sleep_for)
                    delay *= exponential_base
            msg = "max_attempts must be at least 1"
            raise ValueError(msg)

        return wrapper

    return decorator
