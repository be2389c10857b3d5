"""Simple exponential backoff helpers."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterator
from random import SystemRandom
from typing import TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


def exponential_backoff(
    *,
    max_attempts: int = 5,
    base_delay: float = 1.0,
    factor: float = 2.0,
    max_delay: float = 30.0,
    jitter: float = 0.25,
) -> Iterator[tuple[int, float]]:
    """Yield (attempt, delay_seconds) pairs for exponential backoff with jitter."""
    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")
    if base_delay <= 0:
        raise ValueError("base_delay must be > 0")
    if factor < 1:
        raise ValueError("factor must be >= 1")
    if max_delay <= 0:
        raise ValueError("max_delay must be > 0")
    if jitter < 0:
        raise ValueError("jitter must be >= 0")

    rng = SystemRandom()
    delay = base_delay
    for attempt in range(1, max_attempts + 1):
        jitter_offset = rng.uniform(0, delay * jitter) if jitter > 0 else 0.0
        yield attempt, min(delay + jitter_offset, max_delay)
        delay = min(delay * factor, max_delay)


async def retry_async(
    func: Callable[[], Awaitable[T]],
    *,
    attempts: int = 3,
    retry_on: tuple[type[Exception], ...] = (Exception,),
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Await `func` until it succeeds, sleeping between failed attempts.

    The last exception is re-raised once the attempt budget is spent.
    """
    for attempt, delay in exponential_backoff(
        max_attempts=attempts, base_delay=base_delay, max_delay=max_delay
    ):
        try:
            return await func()
        except retry_on as exc:
            if attempt >= attempts:
                raise
            logger.info(
                "retry.scheduled",
                extra={"attempt": attempt, "delay": round(delay, 2), "error": type(exc).__name__},
            )
            await sleep(delay)
    raise RuntimeError("unreachable")  # pragma: no cover
