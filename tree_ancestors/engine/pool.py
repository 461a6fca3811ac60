"""Bounded-concurrency task runner."""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Iterable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

_SKIPPED = object()


async def map_limit(
    items: Iterable[T],
    limit: int,
    func: Callable[[T], Awaitable[R]],
    stop_on_error: bool = True,
) -> list[R]:
    """Run ``func`` over ``items`` with at most ``limit`` calls in flight.

    Results come back in input order. If any call fails, the first failure
    (in completion order) is raised once every started call has settled.

    Args:
        items: Inputs to process.
        limit: Maximum concurrent calls (>= 1).
        func: Coroutine function applied to each item.
        stop_on_error: When True, no new call starts after a failure.
            When False, every item is attempted regardless.
    """
    if limit < 1:
        raise ValueError(f"limit must be >= 1, got {limit}")

    semaphore = asyncio.Semaphore(limit)
    errors: list[BaseException] = []

    async def run(item: T) -> Any:
        async with semaphore:
            if errors and stop_on_error:
                return _SKIPPED
            try:
                return await func(item)
            except Exception as e:
                errors.append(e)
                raise

    outcomes = await asyncio.gather(*(run(item) for item in items), return_exceptions=True)

    if errors:
        skipped = sum(1 for o in outcomes if o is _SKIPPED)
        if skipped:
            logger.debug(f"Stopped after failure, {skipped} item(s) not started")
        raise errors[0]
    return list(outcomes)
