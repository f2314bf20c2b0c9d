"""
Deferred Callback Schedulers
============================

The debounced memo needs exactly one primitive from its host: run a callback
after a delay, with a way to cancel it before it fires. Two implementations
are provided:

- ThreadingScheduler: wall-clock timers on daemon threads (threading.Timer)
- ManualScheduler: virtual time advanced explicitly by the host, for
  single-threaded event loops and deterministic tests

Usage:
    scheduler = ManualScheduler()
    handle = scheduler.schedule(0.3, refresh)
    scheduler.advance(0.1)   # nothing fires
    handle.cancel()          # refresh never runs
"""

import heapq
import itertools
import threading
from typing import Callable, List, Protocol, Tuple, runtime_checkable


@runtime_checkable
class ScheduledCall(Protocol):
    """Handle returned by a scheduler for one pending callback."""

    def cancel(self) -> None:
        """Prevent the callback from running if it has not run yet."""
        ...


@runtime_checkable
class Scheduler(Protocol):
    """Anything that can run a callback once after a delay in seconds."""

    def schedule(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        ...


class ThreadingScheduler:
    """Scheduler backed by threading.Timer."""

    def schedule(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return timer


class _ManualCall:
    __slots__ = ("due", "callback", "cancelled")

    def __init__(self, due: float, callback: Callable[[], None]):
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """
    Scheduler driven by virtual time.

    Callbacks run synchronously inside advance(), in due-time order, on the
    caller's thread. Callbacks scheduled while advancing are honoured if they
    fall due within the same advance() window.
    """

    def __init__(self):
        self.now = 0.0
        self._queue: List[Tuple[float, int, _ManualCall]] = []
        self._counter = itertools.count()

    def schedule(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        call = _ManualCall(self.now + delay, callback)
        heapq.heappush(self._queue, (call.due, next(self._counter), call))
        return call

    @property
    def pending(self) -> int:
        """Number of scheduled callbacks that are neither run nor cancelled."""
        return sum(1 for _, _, call in self._queue if not call.cancelled)

    def advance(self, seconds: float) -> int:
        """
        Move virtual time forward and run every callback that falls due.

        Args:
            seconds: Amount of virtual time to advance

        Returns:
            Number of callbacks that ran
        """
        target = self.now + seconds
        ran = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, call = heapq.heappop(self._queue)
            self.now = due
            if call.cancelled:
                continue
            call.callback()
            ran += 1
        self.now = target
        return ran
