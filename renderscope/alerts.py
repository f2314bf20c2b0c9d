"""
Alert Log
=========

A bounded, append-only record of warnings and errors raised by the profiler,
the rerender classifier and the debounced memo. When the log is full the
oldest alert is evicted first.

Every appended alert is also emitted through the logging module, at WARNING
or ERROR level, so hosts that only watch their logs still see it.

Usage:
    log = AlertLog(capacity=100)
    log.warning("Slow operation: 22.40ms", source="filter-todos")
    log.get_by_source("filter-todos")
"""

import logging
import threading
import time
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Deque, List

from .errors import ConfigurationError

logger = logging.getLogger(__name__)


class Severity(Enum):
    """How serious an alert is."""

    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Alert:
    """One entry of the alert log."""

    severity: Severity
    message: str
    source: str
    timestamp: float


class AlertLog:
    """
    Bounded FIFO log of alerts.

    Appends and reads are guarded by a lock so the capacity invariant holds
    when a deferred callback appends from a timer thread.

    Attributes:
        capacity: Maximum number of alerts retained
    """

    def __init__(self, capacity: int = 100, clock: Callable[[], float] = time.time):
        if capacity <= 0:
            raise ConfigurationError(f"capacity must be positive, got {capacity!r}")
        self.capacity = capacity
        self._clock = clock
        self._alerts: Deque[Alert] = deque(maxlen=capacity)
        self._lock = threading.RLock()

    def append(self, severity: Severity, message: str, source: str) -> Alert:
        """
        Record an alert, evicting the oldest one if the log is full.

        Args:
            severity: Severity of the alert (a Severity or its string value)
            message: Human-readable description
            source: Operation id or tracked id that raised the alert

        Returns:
            The recorded alert
        """
        severity = Severity(severity)
        alert = Alert(
            severity=severity,
            message=message,
            source=source,
            timestamp=self._clock(),
        )
        with self._lock:
            self._alerts.append(alert)

        if severity is Severity.ERROR:
            logger.error("Performance error [%s]: %s", source, message)
        else:
            logger.warning("Performance warning [%s]: %s", source, message)
        return alert

    def warning(self, message: str, source: str) -> Alert:
        return self.append(Severity.WARNING, message, source)

    def error(self, message: str, source: str) -> Alert:
        return self.append(Severity.ERROR, message, source)

    def get_all(self) -> List[Alert]:
        """Return all retained alerts, oldest first."""
        with self._lock:
            return list(self._alerts)

    def get_by_source(self, source: str) -> List[Alert]:
        """Return the retained alerts raised by one source, oldest first."""
        with self._lock:
            return [alert for alert in self._alerts if alert.source == source]

    def clear(self) -> None:
        with self._lock:
            self._alerts.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._alerts)
