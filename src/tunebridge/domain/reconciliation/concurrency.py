"""Concurrency primitives for talking to rate-limited catalogs.

Everything here runs on a single asyncio event loop. Callers on other
threads must hop onto the loop (``loop.call_soon_threadsafe``) before
touching a token or limiter.
"""

from __future__ import annotations

import asyncio
import time
from contextlib import asynccontextmanager
from logging import getLogger
from typing import TYPE_CHECKING, cast

from tunebridge.domain.errors import BatchFatalCatalogError, ReconciliationCancelled

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Awaitable, Callable, Sequence
    from types import TracebackType

log = getLogger(__name__)

type ProgressHook = Callable[[int, int], None]


class CancellationToken:
    """Cooperative cancellation shared by every phase of a run.

    Tasks entered through :meth:`bind` are cancelled as soon as
    :meth:`cancel` is called; code that polls can use
    :meth:`raise_if_cancelled` instead.
    """

    def __init__(self) -> None:
        self._cancelled = False
        self._bound: set[asyncio.Task[object]] = set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        log.debug("Cancellation requested; cancelling %d bound task(s)", len(self._bound))
        for task in tuple(self._bound):
            task.cancel()

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise ReconciliationCancelled([])

    @asynccontextmanager
    async def bind(self) -> AsyncIterator[None]:
        """Register the current task so that :meth:`cancel` interrupts it.

        A cancellation caused by this token surfaces as
        :class:`ReconciliationCancelled`; any other ``CancelledError`` is
        propagated untouched.
        """

        self.raise_if_cancelled()
        task = asyncio.current_task()
        if task is None:
            raise RuntimeError("CancellationToken.bind() requires a running task")
        self._bound.add(task)
        try:
            yield
        except asyncio.CancelledError:
            if not self._cancelled:
                raise
            task.uncancel()
            raise ReconciliationCancelled([]) from None
        finally:
            self._bound.discard(task)


class MinIntervalRateLimiter:
    """Enforce a minimum delay between consecutive permits.

    A single lock guards the last-permit timestamp, so waiters are served in
    arrival order and bursts are spaced exactly ``min_interval`` apart.
    """

    def __init__(self, min_interval: float, *, clock: Callable[[], float] = time.monotonic) -> None:
        if min_interval < 0:
            raise ValueError("min_interval must be non-negative")
        self.min_interval = min_interval
        self._clock = clock
        self._lock = asyncio.Lock()
        self._last_permit: float | None = None

    async def acquire(self) -> None:
        async with self._lock:
            if self._last_permit is not None:
                wait = self.min_interval - (self._clock() - self._last_permit)
                if wait > 0:
                    await asyncio.sleep(wait)
            self._last_permit = self._clock()

    async def __aenter__(self) -> None:
        await self.acquire()

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        return None


async def gather_bounded[T, R](
    items: Sequence[T],
    worker: Callable[[T], Awaitable[R]],
    *,
    limit: int,
    token: CancellationToken | None = None,
    on_progress: ProgressHook | None = None,
) -> list[R]:
    """Run ``worker`` over ``items`` with at most ``limit`` calls in flight.

    Results come back in input order. Each worker task writes only the slot
    of the index it took from the queue, so a cancelled run leaves every
    finished slot intact and every other slot ``None``; those slots are
    handed over on :class:`ReconciliationCancelled`. The first worker
    exception cancels the remaining work and propagates unchanged; a
    :class:`BatchFatalCatalogError` carries the finished slots as
    ``completed``.
    """

    if limit < 1:
        raise ValueError("limit must be positive")

    total = len(items)
    results: list[R | None] = [None] * total
    if total == 0:
        return []

    pending: asyncio.Queue[int] = asyncio.Queue()
    for index in range(total):
        pending.put_nowait(index)
    completed = 0

    async def drain() -> None:
        nonlocal completed
        while True:
            try:
                index = pending.get_nowait()
            except asyncio.QueueEmpty:
                return
            results[index] = await worker(items[index])
            completed += 1
            if on_progress is not None:
                on_progress(completed, total)

    async def run_pool() -> None:
        try:
            async with asyncio.TaskGroup() as group:
                for _ in range(min(limit, total)):
                    group.create_task(drain())
        except ExceptionGroup as group_error:
            # Callers get the worker's own exception, never the group.
            first = group_error.exceptions[0]
            if isinstance(first, BatchFatalCatalogError):
                first.completed = list(results)
            raise first from None

    if token is None:
        await run_pool()
    else:
        try:
            async with token.bind():
                await run_pool()
        except ReconciliationCancelled as exc:
            raise ReconciliationCancelled(list(results)) from exc

    return cast("list[R]", results)
