"""
Renderscope - Render Performance Instrumentation & Windowing

Computes the facts a UI host needs to render large collections efficiently
and to diagnose slow or avoidable work: which items of a collection are in
view, whether a derived value must be recomputed, how long named operations
take, and whether a repeated render had any changed inputs.

The engine only computes facts. Painting, event handling and reporting are
left to the host.
"""

__version__ = "0.1.0"

from .alerts import Alert, AlertLog, Severity
from .config import EngineConfig
from .errors import ConfigurationError, RenderscopeError
from .memo import (
    CacheEntry,
    DebouncedMemo,
    DeepCallback,
    DeepMemo,
    StableReference,
    memoize,
)
from .monitor import (
    ComponentProfile,
    InstrumentationSink,
    PerformanceMonitor,
    performance_score,
)
from .profiler import OperationProfiler, OperationRecord, StatsAggregate
from .registry import PerformanceRegistry
from .rerender import (
    ClassificationRecord,
    LifecycleRecord,
    LifecycleTracker,
    RenderReason,
    RerenderClassifier,
)
from .util import ManualScheduler, ThreadingScheduler, deep_equal
from .windowing import (
    DynamicWindowResult,
    ViewportState,
    WindowResult,
    compute_dynamic_window,
    compute_horizontal_window,
    compute_window,
    compute_window_for,
)

__all__ = [
    # Comparator
    "deep_equal",
    # Windowing
    "ViewportState",
    "WindowResult",
    "DynamicWindowResult",
    "compute_window",
    "compute_window_for",
    "compute_horizontal_window",
    "compute_dynamic_window",
    # Memoization
    "CacheEntry",
    "DeepMemo",
    "DeepCallback",
    "StableReference",
    "DebouncedMemo",
    "memoize",
    "ThreadingScheduler",
    "ManualScheduler",
    # Profiling
    "OperationProfiler",
    "OperationRecord",
    "StatsAggregate",
    # Rerender classification
    "RerenderClassifier",
    "ClassificationRecord",
    "RenderReason",
    "LifecycleTracker",
    "LifecycleRecord",
    # Alerts & score
    "Alert",
    "AlertLog",
    "Severity",
    "performance_score",
    "PerformanceMonitor",
    "ComponentProfile",
    "InstrumentationSink",
    # Registry & config
    "PerformanceRegistry",
    "EngineConfig",
    # Exceptions
    "RenderscopeError",
    "ConfigurationError",
]
