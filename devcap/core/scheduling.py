"""Background dispatch and repeating timers bound to one asyncio loop.

All callbacks produced here run on the loop's thread. Under qasync that loop
is the Qt event loop, so controller state is only ever touched from the GUI
thread.
"""
from __future__ import annotations

import asyncio
import logging
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Callable, Optional, Protocol, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ScanDispatcher(Protocol):
    def submit(
        self,
        work: Callable[[], T],
        on_done: Callable[[T], None],
        on_error: Optional[Callable[[BaseException], None]] = None,
    ) -> None:
        """Run ``work`` off the loop thread.

        ``on_done`` receives the result on the loop thread; if ``work`` raises,
        ``on_error`` receives the exception there instead.
        """


class RepeatingTimer(Protocol):
    @property
    def interval(self) -> float:
        ...

    @property
    def active(self) -> bool:
        ...

    def start(self) -> None:
        ...

    def cancel(self) -> None:
        ...


TimerFactory = Callable[[float, Callable[[], None]], RepeatingTimer]


class ExecutorScanDispatcher:
    """Fire-and-forget dispatch through ``loop.run_in_executor``.

    A new submission never cancels an earlier one; overlapping work is
    sequenced by the caller.
    """

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        executor: Optional[Executor] = None,
        max_workers: int = 2,
    ) -> None:
        self._loop = loop
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="devcap-scan"
        )

    def submit(
        self,
        work: Callable[[], T],
        on_done: Callable[[T], None],
        on_error: Optional[Callable[[BaseException], None]] = None,
    ) -> None:
        future = self._loop.run_in_executor(self._executor, work)

        def deliver(fut: "asyncio.Future[T]") -> None:
            if fut.cancelled():
                logger.debug("Background work cancelled before completion")
                return
            exc = fut.exception()
            if exc is not None:
                if on_error is None:
                    logger.error("Background work failed", exc_info=exc)
                else:
                    on_error(exc)
                return
            on_done(fut.result())

        future.add_done_callback(deliver)

    def shutdown(self) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=False, cancel_futures=True)


class LoopRepeatingTimer:
    """Calls ``callback`` every ``interval`` seconds until cancelled.

    The first tick fires one interval after :meth:`start`. Once
    :meth:`cancel` returns no further tick runs.
    """

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        interval: float,
        callback: Callable[[], None],
    ) -> None:
        if interval <= 0:
            raise ValueError("Timer interval must be positive")
        self._loop = loop
        self._interval = float(interval)
        self._callback = callback
        self._handle: Optional[asyncio.TimerHandle] = None

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def active(self) -> bool:
        return self._handle is not None

    def start(self) -> None:
        if self._handle is None:
            self._schedule()

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _schedule(self) -> None:
        self._handle = self._loop.call_later(self._interval, self._tick)

    def _tick(self) -> None:
        if self._handle is None:
            return
        self._schedule()
        try:
            self._callback()
        except Exception:
            logger.exception("Timer callback failed")


def loop_timer_factory(loop: asyncio.AbstractEventLoop) -> TimerFactory:
    def factory(interval: float, callback: Callable[[], None]) -> RepeatingTimer:
        return LoopRepeatingTimer(loop, interval, callback)

    return factory


__all__ = [
    "ExecutorScanDispatcher",
    "LoopRepeatingTimer",
    "RepeatingTimer",
    "ScanDispatcher",
    "TimerFactory",
    "loop_timer_factory",
]
