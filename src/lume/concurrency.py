"""Bounded-concurrency processing of many independent items.

The build pipeline renders pages, copies files and runs processors over
thousands of items. `concurrent` runs an async worker for each of them while
keeping at most `limit` invocations in flight.
"""

import asyncio
import functools
import itertools
import logging
from collections.abc import AsyncIterable, AsyncIterator, Awaitable, Callable, Iterable
from typing import Any, TypeVar

from lume.config.settings import LumeSettings

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_LIMIT = 200


class _SlotTable:
    """In-flight worker tasks keyed by the slot number assigned at start.

    A finished task frees its own slot from a done callback, so lookups never
    depend on task identity or equality.
    """

    def __init__(self) -> None:
        self._tasks: dict[int, asyncio.Task[Any]] = {}
        self._numbers = itertools.count()
        self._failures: list[BaseException] = []
        self.started = 0

    def __len__(self) -> int:
        return len(self._tasks)

    def start(self, awaitable: Awaitable[Any]) -> int:
        slot = next(self._numbers)
        task = asyncio.ensure_future(awaitable)
        self._tasks[slot] = task
        task.add_done_callback(functools.partial(self._release, slot))
        self.started += 1
        return slot

    def _release(self, slot: int, task: "asyncio.Task[Any]") -> None:
        del self._tasks[slot]
        if not task.cancelled() and (error := task.exception()) is not None:
            self._failures.append(error)

    def raise_failure(self) -> None:
        """Re-raise the first worker error seen so far."""
        if self._failures:
            raise self._failures[0]

    async def wait(self, return_when: str) -> None:
        if self._tasks:
            await asyncio.wait(list(self._tasks.values()), return_when=return_when)
        self.raise_failure()

    async def cancel_all(self) -> None:
        tasks = list(self._tasks.values())
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)


async def _iterate(source: Iterable[T] | AsyncIterable[T]) -> AsyncIterator[T]:
    if isinstance(source, AsyncIterable):
        async for item in source:
            yield item
    else:
        for item in source:
            yield item


async def concurrent(
    source: Iterable[T] | AsyncIterable[T],
    worker: Callable[[T], Awaitable[Any]],
    limit: int = DEFAULT_LIMIT,
    *,
    timeout: float | None = None,
) -> None:
    """Run `worker` for every item of `source` with bounded concurrency.

    Each item's worker starts as soon as the item is pulled. Once `limit`
    workers are in flight, pulling pauses until one of them finishes.
    Returns when the source is exhausted and every worker has finished.
    Completion order is not related to the order of `source`.

    Args:
        source: Items to process. May be a regular or an async iterable.
        worker: Coroutine function called once per item.
        limit: Maximum number of unfinished worker invocations.
        timeout: Optional deadline in seconds for the whole run.

    Raises:
        ValueError: If `limit` is lower than 1.
        TimeoutError: If `timeout` expires before every worker finished.
        Exception: The first error raised by a worker. It is raised the next
            time the runner waits for a worker, not necessarily right away.
            Workers still in flight are cancelled before it propagates.
    """
    if limit < 1:
        raise ValueError(f"limit must be at least 1, got {limit}")

    slots = _SlotTable()

    try:
        async with asyncio.timeout(timeout):
            async for item in _iterate(source):
                slots.start(worker(item))

                while len(slots) >= limit:
                    await slots.wait(asyncio.FIRST_COMPLETED)

            while len(slots):
                await slots.wait(asyncio.FIRST_EXCEPTION)
            slots.raise_failure()
    except BaseException:
        logger.debug("Cancelling %d in-flight workers", len(slots))
        await slots.cancel_all()
        raise

    logger.debug("Processed %d items (limit %d)", slots.started, limit)


async def run_concurrently(
    settings: LumeSettings,
    source: Iterable[T] | AsyncIterable[T],
    worker: Callable[[T], Awaitable[Any]],
    *,
    timeout: float | None = None,
) -> None:
    """Run `concurrent` with the `concurrency_limit` setting as the limit."""
    await concurrent(source, worker, settings.concurrency_limit, timeout=timeout)
