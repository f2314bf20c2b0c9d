"""
Operation Profiler
==================

Times paired start/end events and aggregates duration statistics per named
operation. Durations are reported in milliseconds.

Key Features:
- At most one open timer per operation id (a second start() overwrites it)
- Cumulative count/total/min/max/average per operation
- Bounded rolling history of recent samples, oldest evicted first
- Slow-operation warnings appended to an alert log
- end() without start() never raises: it warns and returns 0

Usage:
    profiler = OperationProfiler(alert_log=AlertLog())

    profiler.start("filter-todos")
    visible = apply_filters(todos)
    profiler.end("filter-todos")

    with profiler.measure("sort-todos"):
        visible.sort(key=by_due_date)

    profiler.get_stats("filter-todos").average
"""

import functools
import logging
import threading
import time
from collections import deque
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Deque, Dict, Iterator, List, Optional

import numpy as np

from .alerts import AlertLog
from .config import DEFAULT_SLOW_THRESHOLD_MS
from .errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OperationRecord:
    """An open timer, alive between start() and end()."""

    operation_id: str
    started_at: float


@dataclass
class StatsAggregate:
    """
    Duration statistics for one operation.

    count, total, min, max and average cover every sample since the
    aggregate was created; history keeps only the most recent ones.
    """

    count: int = 0
    total: float = 0.0
    min: float = float("inf")
    max: float = 0.0
    average: float = 0.0
    history: Deque[float] = field(default_factory=lambda: deque(maxlen=100))

    def add(self, duration: float) -> None:
        self.count += 1
        self.total += duration
        self.min = min(self.min, duration)
        self.max = max(self.max, duration)
        self.average = self.total / self.count
        self.history.append(duration)

    def percentile(self, q: float) -> float:
        """q-th percentile (0-100) of the retained history, 0.0 when empty."""
        if not self.history:
            return 0.0
        return float(np.percentile(np.fromiter(self.history, dtype=float), q))

    def copy(self) -> "StatsAggregate":
        return StatsAggregate(
            count=self.count,
            total=self.total,
            min=self.min,
            max=self.max,
            average=self.average,
            history=deque(self.history, maxlen=self.history.maxlen),
        )

    def to_dict(self) -> Dict[str, object]:
        return {
            "count": self.count,
            "total": self.total,
            "min": self.min,
            "max": self.max,
            "average": self.average,
            "history": list(self.history),
        }


class OperationProfiler:
    """
    Start/end profiler with bounded rolling statistics per operation id.

    Attributes:
        slow_threshold_ms: Durations above this raise a warning alert
        history_size: Samples retained per operation
    """

    def __init__(
        self,
        alert_log: Optional[AlertLog] = None,
        slow_threshold_ms: float = DEFAULT_SLOW_THRESHOLD_MS,
        history_size: int = 100,
        clock: Callable[[], float] = time.perf_counter,
        sink=None,
    ):
        """
        Args:
            alert_log: Log receiving slow-operation and pairing warnings
            slow_threshold_ms: Threshold in milliseconds (default: one 60fps frame)
            history_size: Samples retained per operation (default: 100)
            clock: Time source in seconds
            sink: Optional InstrumentationSink notified of every duration
        """
        if history_size <= 0:
            raise ConfigurationError(
                f"history_size must be positive, got {history_size!r}"
            )
        if slow_threshold_ms < 0:
            raise ConfigurationError(
                f"slow_threshold_ms must not be negative, got {slow_threshold_ms!r}"
            )
        self.alert_log = alert_log
        self.slow_threshold_ms = slow_threshold_ms
        self.history_size = history_size
        self.sink = sink
        self._clock = clock
        self._open: Dict[str, OperationRecord] = {}
        self._stats: Dict[str, StatsAggregate] = {}
        self._lock = threading.RLock()

    def start(self, operation_id: str) -> None:
        """Open a timer for operation_id, replacing any open one."""
        with self._lock:
            if operation_id in self._open:
                logger.debug(f"Restarting open operation '{operation_id}'")
            self._open[operation_id] = OperationRecord(operation_id, self._clock())

    def end(self, operation_id: str) -> float:
        """
        Close the timer for operation_id and record its duration.

        Returns:
            Duration in milliseconds, or 0.0 if no timer was open
        """
        now = self._clock()
        with self._lock:
            record = self._open.pop(operation_id, None)
            if record is None:
                self._warn(f"No start time found for operation: {operation_id}", operation_id)
                return 0.0

            duration = (now - record.started_at) * 1000.0
            stats = self._stats.get(operation_id)
            if stats is None:
                stats = StatsAggregate(history=deque(maxlen=self.history_size))
                self._stats[operation_id] = stats
            stats.add(duration)

        if duration > self.slow_threshold_ms:
            self._warn(
                f"Slow operation: {duration:.2f}ms exceeds {self.slow_threshold_ms}ms",
                operation_id,
            )
        if self.sink is not None:
            self.sink.record_commit(operation_id, duration)
        return duration

    def _warn(self, message: str, operation_id: str) -> None:
        if self.alert_log is not None:
            self.alert_log.warning(message, source=operation_id)
        else:
            logger.warning(message)

    @contextmanager
    def measure(self, operation_id: str) -> Iterator[None]:
        """Time the enclosed block; the sample is recorded even if it raises."""
        self.start(operation_id)
        try:
            yield
        finally:
            self.end(operation_id)

    def profiled(self, operation_id: Optional[str] = None):
        """Decorator timing every call of a function."""

        def decorator(func):
            name = operation_id or func.__qualname__

            @functools.wraps(func)
            def wrapper(*args, **kwargs):
                with self.measure(name):
                    return func(*args, **kwargs)

            return wrapper

        return decorator

    def get_stats(self, operation_id: str) -> Optional[StatsAggregate]:
        """Return a copy of the statistics for operation_id, or None."""
        with self._lock:
            stats = self._stats.get(operation_id)
            return stats.copy() if stats is not None else None

    def get_all_stats(self) -> Dict[str, StatsAggregate]:
        with self._lock:
            return {op: stats.copy() for op, stats in self._stats.items()}

    def open_operations(self) -> List[str]:
        with self._lock:
            return list(self._open)

    def clear(self, operation_id: Optional[str] = None) -> None:
        """Drop the statistics and open timer of one operation, or of all."""
        with self._lock:
            if operation_id is None:
                self._stats.clear()
                self._open.clear()
            else:
                self._stats.pop(operation_id, None)
                self._open.pop(operation_id, None)
