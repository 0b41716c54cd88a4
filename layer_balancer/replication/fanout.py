"""Concurrent fan-out with ordered results and first-failure cancellation."""

import asyncio
from typing import Awaitable, Iterable, List, TypeVar

T = TypeVar("T")


async def run_all(awaitables: Iterable[Awaitable[T]]) -> List[T]:
    """
    Run every awaitable as its own task and collect the results.

    Results are returned in input order regardless of completion order.
    The first task to fail cancels its siblings, waits for them to unwind
    and its exception is raised unchanged; errors raised by siblings after
    the cancellation are discarded.

    Args:
        awaitables: One awaitable per independent unit of work

    Returns:
        List where result[i] belongs to the i-th awaitable
    """
    tasks = [asyncio.ensure_future(aw) for aw in awaitables]
    if not tasks:
        return []

    try:
        for next_done in asyncio.as_completed(tasks):
            await next_done
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise

    return [task.result() for task in tasks]
