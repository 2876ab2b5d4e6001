"""Bounded retry combinator for async operations."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

import structlog

log = structlog.get_logger(__name__)

T = TypeVar("T")

SleepFn = Callable[[float], Awaitable[None]]


async def retry(
    fn: Callable[[], Awaitable[T]],
    *,
    max_attempts: int,
    interval: float,
    retry_on: type[BaseException] | tuple[type[BaseException], ...],
    sleep: SleepFn = asyncio.sleep,
) -> T:
    """Call *fn* until it succeeds or *max_attempts* calls were made.

    Only exceptions matching *retry_on* trigger another attempt; anything
    else propagates immediately. Sleeps *interval* seconds between attempts,
    never after the last one. When all attempts fail, the last exception is
    re-raised.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")

    for attempt in range(1, max_attempts + 1):
        try:
            return await fn()
        except retry_on as exc:
            if attempt == max_attempts:
                log.debug("retry_exhausted", attempts=attempt, error=str(exc))
                raise
            log.debug(
                "retry_scheduled",
                attempt=attempt,
                max_attempts=max_attempts,
                delay=interval,
            )
            await sleep(interval)

    raise AssertionError("unreachable")  # pragma: no cover
