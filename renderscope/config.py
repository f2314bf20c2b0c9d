"""
Engine Configuration
====================

A single, typed entry point for the tunable limits of the engine. The config
flows through PerformanceRegistry into every component it creates.
"""

from dataclasses import dataclass, fields
from typing import Any, Mapping

from .errors import ConfigurationError

# 60fps frame budget
DEFAULT_SLOW_THRESHOLD_MS = 16.0


@dataclass(frozen=True)
class EngineConfig:
    """
    Limits and thresholds shared by the engine components.

    Attributes:
        alert_capacity: Maximum number of alerts kept by the alert log.
        slow_threshold_ms: Duration above which an operation is reported as slow.
        stats_history_size: Samples kept per operation in the rolling history.
        rerender_history_size: Classification records kept per tracked id.
        snapshot_history_size: Input snapshots kept per tracked id for changes().
        interval_history_size: Recent render intervals kept per tracked id.
        high_frequency_cutoff: Call count above which an operation counts as
            high-frequency in the performance score.
        debounce_delay: Seconds a debounced memo waits after the last change.
        default_overscan: Items rendered beyond each edge of the viewport.
        memoize_maxsize: Entries kept by memoize() before LRU eviction.
    """

    alert_capacity: int = 100
    slow_threshold_ms: float = DEFAULT_SLOW_THRESHOLD_MS
    stats_history_size: int = 100
    rerender_history_size: int = 20
    snapshot_history_size: int = 10
    interval_history_size: int = 50
    high_frequency_cutoff: int = 50
    debounce_delay: float = 0.3
    default_overscan: int = 5
    memoize_maxsize: int = 128

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """
        Check every field against its allowed range.

        Raises:
            ConfigurationError: If a capacity is not positive or a threshold,
                delay or overscan is negative.
        """
        for name in (
            "alert_capacity",
            "stats_history_size",
            "rerender_history_size",
            "snapshot_history_size",
            "interval_history_size",
            "memoize_maxsize",
        ):
            if getattr(self, name) <= 0:
                raise ConfigurationError(
                    f"{name} must be positive, got {getattr(self, name)!r}"
                )
        for name in (
            "slow_threshold_ms",
            "high_frequency_cutoff",
            "debounce_delay",
            "default_overscan",
        ):
            if getattr(self, name) < 0:
                raise ConfigurationError(
                    f"{name} must not be negative, got {getattr(self, name)!r}"
                )

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "EngineConfig":
        """Build a config from a plain mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in mapping.items() if k in known})
