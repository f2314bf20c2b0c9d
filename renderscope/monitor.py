"""
Performance Monitor & Score
===========================

Aggregates per-component commit durations received through an
instrumentation sink, and condenses profiling data into a single 0-100
performance score.

The engine never hooks into a host framework. A host bridge (a UI
framework's profiler callback, a test harness) calls record_commit() on any
object implementing InstrumentationSink; OperationProfiler does the same when
given a sink.

Score:
    Start at 100, then subtract
    - up to 40 points for the fraction of rows averaging above the slow threshold
    - up to 30 points, 2 per millisecond the global average exceeds the threshold
    - up to 20 points for the fraction of rows called more than the
      high-frequency cutoff
    The result is floored at 0 and rounded. With no rows the score is 100;
    the lowest reachable score is 10.
"""

import threading
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Protocol, runtime_checkable

from .config import DEFAULT_SLOW_THRESHOLD_MS

SLOW_RATIO_WEIGHT = 40
AVERAGE_OVERRUN_CAP = 30
AVERAGE_OVERRUN_PER_MS = 2
HIGH_FREQUENCY_WEIGHT = 20
DEFAULT_HIGH_FREQUENCY_CUTOFF = 50


def performance_score(
    rows: Iterable[Any],
    slow_threshold_ms: float = DEFAULT_SLOW_THRESHOLD_MS,
    high_frequency_cutoff: int = DEFAULT_HIGH_FREQUENCY_CUTOFF,
) -> int:
    """
    Score a set of profiled rows from 0 (worst) to 100 (best).

    Args:
        rows: Objects exposing `average` (milliseconds) and `count`, such as
            StatsAggregate or ComponentProfile
        slow_threshold_ms: Average duration above which a row is slow
        high_frequency_cutoff: Count above which a row is high-frequency

    Returns:
        Integer score in [0, 100]
    """
    rows = list(rows)
    if not rows:
        return 100

    n = len(rows)
    slow = sum(1 for row in rows if row.average > slow_threshold_ms)
    busy = sum(1 for row in rows if row.count > high_frequency_cutoff)
    global_average = sum(row.average for row in rows) / n

    score = 100.0
    score -= (slow / n) * SLOW_RATIO_WEIGHT
    if global_average > slow_threshold_ms:
        score -= min(
            AVERAGE_OVERRUN_CAP,
            (global_average - slow_threshold_ms) * AVERAGE_OVERRUN_PER_MS,
        )
    score -= (busy / n) * HIGH_FREQUENCY_WEIGHT

    return max(0, round(score))


@runtime_checkable
class InstrumentationSink(Protocol):
    """Receives one duration per committed render or finished operation."""

    def record_commit(self, component_name: str, duration_ms: float) -> None:
        ...


@dataclass
class ComponentProfile:
    """Accumulated commit data for one component."""

    name: str
    render_count: int = 0
    total_time: float = 0.0
    average_time: float = 0.0
    last_render_time: float = 0.0
    is_slow: bool = False

    # Aliases so profiles can be scored like StatsAggregate
    @property
    def average(self) -> float:
        return self.average_time

    @property
    def count(self) -> int:
        return self.render_count


class PerformanceMonitor:
    """
    Instrumentation sink aggregating commit durations per component.

    A component is flagged slow when its latest commit exceeded the threshold.
    """

    def __init__(
        self,
        slow_threshold_ms: float = DEFAULT_SLOW_THRESHOLD_MS,
        high_frequency_cutoff: int = DEFAULT_HIGH_FREQUENCY_CUTOFF,
    ):
        self.slow_threshold_ms = slow_threshold_ms
        self.high_frequency_cutoff = high_frequency_cutoff
        self._profiles: Dict[str, ComponentProfile] = {}
        self._lock = threading.RLock()

    def record_commit(self, component_name: str, duration_ms: float) -> None:
        with self._lock:
            profile = self._profiles.get(component_name)
            if profile is None:
                profile = ComponentProfile(component_name)
                self._profiles[component_name] = profile
            profile.render_count += 1
            profile.total_time += duration_ms
            profile.last_render_time = duration_ms
            profile.average_time = profile.total_time / profile.render_count
            profile.is_slow = duration_ms > self.slow_threshold_ms

    def components_performance_data(self) -> List[ComponentProfile]:
        """All component profiles, highest total time first."""
        with self._lock:
            profiles = [
                ComponentProfile(**vars(profile)) for profile in self._profiles.values()
            ]
        return sorted(profiles, key=lambda p: p.total_time, reverse=True)

    def slow_components(self, threshold: Optional[float] = None) -> List[ComponentProfile]:
        """Profiles whose average time exceeds threshold (default: the monitor's)."""
        limit = self.slow_threshold_ms if threshold is None else threshold
        return [p for p in self.components_performance_data() if p.average_time > limit]

    def most_active_components(self, limit: int = 10) -> List[ComponentProfile]:
        profiles = sorted(
            self.components_performance_data(), key=lambda p: p.render_count, reverse=True
        )
        return profiles[:limit]

    def performance_score(self) -> int:
        return performance_score(
            self.components_performance_data(),
            self.slow_threshold_ms,
            self.high_frequency_cutoff,
        )

    def summary(self) -> Dict[str, Any]:
        components = self.components_performance_data()
        total_renders = sum(p.render_count for p in components)
        total_time = sum(p.total_time for p in components)
        slow = self.slow_components()
        return {
            "total_components": len(components),
            "total_renders": total_renders,
            "total_render_time": total_time,
            "average_render_time": total_time / total_renders if total_renders else 0.0,
            "slow_components_count": len(slow),
            "slow_components": slow[:5],
            "most_active_components": self.most_active_components(5),
            "performance_score": self.performance_score(),
        }

    def reset(self) -> None:
        with self._lock:
            self._profiles.clear()
