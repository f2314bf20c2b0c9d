"""
Performance Registry
====================

An explicit registry object owned by the host application. It wires one
alert log, profiler, lifecycle tracker, rerender classifier and component
monitor together, and exposes the read-only query surface a diagnostics
dashboard needs.

Operations timed by the profiler and component commits are kept apart. A
host bridge (a UI framework's profiler callback) reports commits with
record_commit(), which makes the registry itself an InstrumentationSink.

Registries are independent of each other: tests and embedded hosts create
their own instead of sharing hidden global state.

Usage:
    registry = PerformanceRegistry(EngineConfig(slow_threshold_ms=8))

    registry.create("TodoList")
    registry.update("TodoList", {"todos": todos, "filter": "open"})

    with registry.profiler.measure("filter-todos"):
        visible = apply_filter(todos)

    registry.record_commit("TodoList", actual_duration_ms)
    registry.teardown("TodoList")
    registry.performance_score()
"""

import time
from typing import Any, Callable, Dict, List, Mapping, Optional

from .alerts import Alert, AlertLog
from .config import EngineConfig
from .memo import DebouncedMemo, memoize
from .monitor import ComponentProfile, PerformanceMonitor, performance_score
from .profiler import OperationProfiler, StatsAggregate
from .rerender import (
    ClassificationRecord,
    LifecycleRecord,
    LifecycleTracker,
    RerenderClassifier,
)
from .util.scheduler import Scheduler
from .windowing import WindowResult, compute_window


class PerformanceRegistry:
    """
    Owner of one set of engine components.

    Attributes:
        config: The EngineConfig the components were built from
        alerts: Bounded alert log shared by all components
        profiler: Operation profiler for named operations
        lifecycle: Lifecycle tracker fed by the classifier
        classifier: Rerender classifier
        monitor: Per-component commit aggregation, fed by record_commit()
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        clock: Callable[[], float] = time.time,
        timer: Callable[[], float] = time.perf_counter,
    ):
        """
        Args:
            config: Limits and thresholds (default: EngineConfig())
            clock: Wall-clock source for alert and record timestamps
            timer: Monotonic source for operation durations
        """
        self.config = config if config is not None else EngineConfig()
        cfg = self.config

        self.alerts = AlertLog(capacity=cfg.alert_capacity, clock=clock)
        self.monitor = PerformanceMonitor(
            slow_threshold_ms=cfg.slow_threshold_ms,
            high_frequency_cutoff=cfg.high_frequency_cutoff,
        )
        self.profiler = OperationProfiler(
            alert_log=self.alerts,
            slow_threshold_ms=cfg.slow_threshold_ms,
            history_size=cfg.stats_history_size,
            clock=timer,
        )
        self.lifecycle = LifecycleTracker(
            clock=clock, interval_history_size=cfg.interval_history_size
        )
        self.classifier = RerenderClassifier(
            alert_log=self.alerts,
            lifecycle=self.lifecycle,
            history_size=cfg.rerender_history_size,
            clock=clock,
            snapshot_history_size=cfg.snapshot_history_size,
        )

    # ========================================================================
    # TRACKED UNIT ENTRY POINTS
    # ========================================================================

    def create(self, tracked_id: str) -> LifecycleRecord:
        """Register a tracked unit and record its mount time."""
        return self.lifecycle.register(tracked_id)

    def update(self, tracked_id: str, snapshot: Mapping[str, Any]) -> ClassificationRecord:
        """Classify a render of tracked_id against its previous snapshot."""
        return self.classifier.classify(tracked_id, snapshot)

    def teardown(self, tracked_id: str) -> Optional[LifecycleRecord]:
        """Record the unmount of tracked_id and forget its snapshot baseline."""
        record = self.lifecycle.teardown(tracked_id)
        self.classifier.reset_baseline(tracked_id)
        return record

    def record_commit(self, component_name: str, duration_ms: float) -> None:
        """Record one committed render of component_name with the monitor."""
        self.monitor.record_commit(component_name, duration_ms)

    # ========================================================================
    # FACTORIES
    # ========================================================================

    def window(
        self,
        total_items: int,
        item_extent: float,
        viewport_extent: float,
        scroll_offset: float,
        overscan: Optional[int] = None,
    ) -> WindowResult:
        """compute_window() with the configured default overscan."""
        if overscan is None:
            overscan = self.config.default_overscan
        return compute_window(
            total_items, item_extent, viewport_extent, scroll_offset, overscan
        )

    def debounced_memo(
        self,
        name: str,
        delay: Optional[float] = None,
        scheduler: Optional[Scheduler] = None,
    ) -> DebouncedMemo:
        """A DebouncedMemo reporting deferred failures to this registry's alerts."""
        return DebouncedMemo(
            delay=self.config.debounce_delay if delay is None else delay,
            scheduler=scheduler,
            alert_log=self.alerts,
            name=name,
        )

    def memoize(self, fn=None, *, key=None):
        """memoize() bounded by the configured maxsize."""
        return memoize(fn, key=key, maxsize=self.config.memoize_maxsize)

    # ========================================================================
    # QUERY SURFACE
    # ========================================================================

    def get_all_stats(self) -> Dict[str, StatsAggregate]:
        return self.profiler.get_all_stats()

    def get_alerts(self) -> List[Alert]:
        return self.alerts.get_all()

    def get_components_performance_data(self) -> List[ComponentProfile]:
        return self.monitor.components_performance_data()

    def performance_score(self) -> int:
        """Score over every profiled operation."""
        return performance_score(
            self.profiler.get_all_stats().values(),
            self.config.slow_threshold_ms,
            self.config.high_frequency_cutoff,
        )

    def snapshot(self) -> Dict[str, Any]:
        """Plain-data view of the query surface, for an external reporter."""
        return {
            "performance_score": self.performance_score(),
            "operations": {
                op: stats.to_dict() for op, stats in self.get_all_stats().items()
            },
            "alerts": [
                {
                    "severity": alert.severity.value,
                    "message": alert.message,
                    "source": alert.source,
                    "timestamp": alert.timestamp,
                }
                for alert in self.get_alerts()
            ],
            "components": [vars(p) for p in self.get_components_performance_data()],
            "rerenders": {
                tracked_id: self.classifier.summary(tracked_id)
                for tracked_id in self.classifier.tracked_ids()
            },
        }

    def clear(self) -> None:
        """Reset every component of the registry."""
        self.alerts.clear()
        self.profiler.clear()
        self.classifier.clear()
        self.lifecycle.clear()
        self.monitor.reset()
