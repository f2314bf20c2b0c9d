"""
Rerender Classifier & Lifecycle Tracker
=======================================

Compares successive input snapshots per tracked unit and classifies each
render as first, necessary or unnecessary.

Per-key comparison:
    Unlike the memo caches, snapshots are not deep-compared as a whole. Each
    key is compared on its own: identical objects are unchanged, immutable
    scalars (numbers, strings, bytes, None, enums) are compared by value, and
    any other value counts as changed when a different object is passed. This
    mirrors how identity-comparing consumers decide to rerender, and keeps the
    changed-keys list precise.

Snapshot history:
    The last few snapshots of each tracked unit are kept, so changes() can
    report which inputs changed between the current render and one several
    renders back, with their old and new values.

Lifecycle:
    LifecycleTracker records when a tracked unit was registered, how many
    times it was classified, the time between successive updates, and its
    total lifetime once torn down.
"""

import logging
import threading
import time
from collections import defaultdict, deque
from dataclasses import dataclass, field
from enum import Enum
from numbers import Number
from typing import Any, Callable, Deque, Dict, List, Mapping, Optional, Tuple

from .alerts import AlertLog
from .errors import ConfigurationError
from .profiler import StatsAggregate

logger = logging.getLogger(__name__)

_SCALAR_TYPES = (Number, str, bytes, type(None), Enum)


class RenderReason(Enum):
    FIRST = "first"
    NECESSARY = "necessary"
    UNNECESSARY = "unnecessary"


@dataclass(frozen=True)
class ClassificationRecord:
    """Outcome of classifying one render of a tracked unit."""

    tracked_id: str
    reason: RenderReason
    changed_keys: Tuple[str, ...]
    timestamp: float

    @property
    def is_unnecessary(self) -> bool:
        return self.reason is RenderReason.UNNECESSARY


@dataclass
class LifecycleRecord:
    """
    Lifecycle of one tracked unit.

    render_intervals holds the seconds between successive updates: cumulative
    count/min/max/average, plus a bounded history of the most recent ones.
    """

    tracked_id: str
    mount_time: float
    update_count: int = 0
    unmount_time: Optional[float] = None
    total_lifetime: Optional[float] = None
    last_update_time: Optional[float] = None
    render_intervals: StatsAggregate = field(default_factory=StatsAggregate)

    @property
    def is_mounted(self) -> bool:
        return self.unmount_time is None


def same_value(old: Any, new: Any) -> bool:
    """Identity, or value equality when both sides are immutable scalars."""
    if old is new:
        return True
    if isinstance(old, _SCALAR_TYPES) and isinstance(new, _SCALAR_TYPES):
        return type(old) is type(new) and old == new
    return False


def changed_keys(old: Mapping[str, Any], new: Mapping[str, Any]) -> List[str]:
    """
    Keys whose value differs between two snapshots.

    Keys of the new snapshot come first in their order; keys that were
    removed follow in the order of the old snapshot.
    """
    changes = [
        key for key, value in new.items() if key not in old or not same_value(old[key], value)
    ]
    changes.extend(key for key in old if key not in new)
    return changes


# ============================================================================
# LIFECYCLE TRACKER
# ============================================================================


class LifecycleTracker:
    """Mount time, update count, render intervals and lifetime per tracked id."""

    def __init__(
        self,
        clock: Callable[[], float] = time.time,
        interval_history_size: int = 50,
    ):
        """
        Args:
            clock: Time source in seconds
            interval_history_size: Recent render intervals kept per tracked id
        """
        if interval_history_size <= 0:
            raise ConfigurationError(
                f"interval_history_size must be positive, got {interval_history_size!r}"
            )
        self._clock = clock
        self.interval_history_size = interval_history_size
        self._records: Dict[str, LifecycleRecord] = {}
        self._lock = threading.RLock()

    def register(self, tracked_id: str) -> LifecycleRecord:
        """Record the mount time of tracked_id; a no-op if already mounted."""
        with self._lock:
            record = self._records.get(tracked_id)
            if record is None or not record.is_mounted:
                record = LifecycleRecord(
                    tracked_id,
                    mount_time=self._clock(),
                    render_intervals=StatsAggregate(
                        history=deque(maxlen=self.interval_history_size)
                    ),
                )
                self._records[tracked_id] = record
                logger.debug(f"{tracked_id} mounted at {record.mount_time}")
            return record

    def record_update(self, tracked_id: str) -> LifecycleRecord:
        """Count one update and the time elapsed since the previous one."""
        with self._lock:
            record = self.register(tracked_id)
            now = self._clock()
            if record.last_update_time is not None:
                record.render_intervals.add(now - record.last_update_time)
            record.last_update_time = now
            record.update_count += 1
            return record

    def render_intervals(self, tracked_id: str) -> Optional[StatsAggregate]:
        """
        Statistics of the time between renders of tracked_id.

        Returns:
            A copy of the interval statistics, or None until tracked_id has
            been updated at least twice
        """
        with self._lock:
            record = self._records.get(tracked_id)
            if record is None or record.render_intervals.count == 0:
                return None
            return record.render_intervals.copy()

    def teardown(self, tracked_id: str) -> Optional[LifecycleRecord]:
        """
        Record the unmount of tracked_id.

        Returns:
            The final record with total_lifetime set, or None if the id was
            never registered
        """
        with self._lock:
            record = self._records.get(tracked_id)
            if record is None:
                return None
            if record.is_mounted:
                record.unmount_time = self._clock()
                record.total_lifetime = record.unmount_time - record.mount_time
                logger.debug(
                    f"{tracked_id} unmounted after {record.total_lifetime:.3f}s"
                )
            return record

    def get(self, tracked_id: str) -> Optional[LifecycleRecord]:
        with self._lock:
            return self._records.get(tracked_id)

    def lifespan(self, tracked_id: str) -> Optional[float]:
        """Time since mount, or the total lifetime once torn down."""
        with self._lock:
            record = self._records.get(tracked_id)
            if record is None:
                return None
            if record.total_lifetime is not None:
                return record.total_lifetime
            return self._clock() - record.mount_time

    def clear(self) -> None:
        with self._lock:
            self._records.clear()


# ============================================================================
# RERENDER CLASSIFIER
# ============================================================================


class RerenderClassifier:
    """
    Classifies renders of tracked units by comparing input snapshots.

    Example:
        classifier = RerenderClassifier(alert_log=AlertLog())
        classifier.classify("TodoItem#3", {"todo": todo, "selected": False})
        classifier.classify("TodoItem#3", {"todo": todo, "selected": False})
        # -> reason UNNECESSARY, and a warning alert sourced "TodoItem#3"
    """

    def __init__(
        self,
        alert_log: Optional[AlertLog] = None,
        lifecycle: Optional[LifecycleTracker] = None,
        history_size: int = 20,
        clock: Callable[[], float] = time.time,
        snapshot_history_size: int = 10,
    ):
        for name, size in (
            ("history_size", history_size),
            ("snapshot_history_size", snapshot_history_size),
        ):
            if size <= 0:
                raise ConfigurationError(f"{name} must be positive, got {size!r}")
        self.alert_log = alert_log
        self.lifecycle = lifecycle
        self.history_size = history_size
        self.snapshot_history_size = snapshot_history_size
        self._clock = clock
        self._baselines: Dict[str, Dict[str, Any]] = {}
        self._history: Dict[str, Deque[ClassificationRecord]] = {}
        self._snapshots: Dict[str, Deque[Dict[str, Any]]] = {}
        self._subscribers: Dict[str, List[Callable[[ClassificationRecord], None]]] = (
            defaultdict(list)
        )
        self._lock = threading.RLock()

    def classify(self, tracked_id: str, snapshot: Mapping[str, Any]) -> ClassificationRecord:
        """
        Compare snapshot with the previous one for tracked_id.

        Args:
            tracked_id: Identity of the tracked unit
            snapshot: Mapping of input name to current value

        Returns:
            The classification record, also appended to the history
        """
        current = dict(snapshot)
        with self._lock:
            previous = self._baselines.get(tracked_id)
            if previous is None:
                reason, changes = RenderReason.FIRST, []
            else:
                changes = changed_keys(previous, current)
                reason = RenderReason.NECESSARY if changes else RenderReason.UNNECESSARY

            record = ClassificationRecord(
                tracked_id=tracked_id,
                reason=reason,
                changed_keys=tuple(changes),
                timestamp=self._clock(),
            )
            self._baselines[tracked_id] = current
            history = self._history.get(tracked_id)
            if history is None:
                history = deque(maxlen=self.history_size)
                self._history[tracked_id] = history
            history.append(record)
            snapshots = self._snapshots.get(tracked_id)
            if snapshots is None:
                snapshots = deque(maxlen=self.snapshot_history_size)
                self._snapshots[tracked_id] = snapshots
            snapshots.append(current)
            subscribers = list(self._subscribers.get(tracked_id, ()))

        if self.lifecycle is not None:
            self.lifecycle.record_update(tracked_id)

        if reason is RenderReason.UNNECESSARY:
            message = "Unnecessary re-render - no input changes detected"
            if self.alert_log is not None:
                self.alert_log.warning(message, source=tracked_id)
            else:
                logger.warning(f"{message} in {tracked_id}")

        for callback in subscribers:
            try:
                callback(record)
            except Exception as e:
                logger.error(f"Error in rerender callback for {tracked_id}: {e}")

        return record

    def subscribe(
        self, tracked_id: str, callback: Callable[[ClassificationRecord], None]
    ) -> Callable[[], None]:
        """
        Call callback with every record classified for tracked_id.

        Returns:
            A function removing the subscription
        """
        with self._lock:
            self._subscribers[tracked_id].append(callback)

        def unsubscribe() -> None:
            with self._lock:
                callbacks = self._subscribers.get(tracked_id, [])
                if callback in callbacks:
                    callbacks.remove(callback)

        return unsubscribe

    def history(self, tracked_id: str) -> List[ClassificationRecord]:
        with self._lock:
            return list(self._history.get(tracked_id, ()))

    def summary(self, tracked_id: str) -> Dict[str, int]:
        """Totals over the retained history of tracked_id."""
        records = self.history(tracked_id)
        return {
            "total": len(records),
            "unnecessary": sum(1 for r in records if r.is_unnecessary),
            "necessary": sum(1 for r in records if r.reason is RenderReason.NECESSARY),
        }

    def changes(
        self, tracked_id: str, steps: int = 1
    ) -> List[Tuple[str, Any, Any]]:
        """
        Inputs that differ between the latest snapshot and the one `steps`
        renders earlier.

        Args:
            tracked_id: Identity of the tracked unit
            steps: How many renders back to compare against (default: the
                previous render)

        Returns:
            (key, old_value, new_value) tuples in changed_keys() order; a key
            missing on one side has None as its value there. Empty when
            fewer than steps + 1 snapshots are retained.
        """
        with self._lock:
            snapshots = list(self._snapshots.get(tracked_id, ()))
        if steps < 1 or len(snapshots) < steps + 1:
            return []
        current = snapshots[-1]
        previous = snapshots[-1 - steps]
        return [
            (key, previous.get(key), current.get(key))
            for key in changed_keys(previous, current)
        ]

    def reset_baseline(self, tracked_id: str) -> None:
        """
        Make the next classify() of tracked_id a first render.

        The classification history is kept; the snapshot history restarts.
        """
        with self._lock:
            self._baselines.pop(tracked_id, None)
            self._snapshots.pop(tracked_id, None)

    def tracked_ids(self) -> List[str]:
        """Ids with retained classification history."""
        with self._lock:
            return list(self._history)

    def clear(self, tracked_id: Optional[str] = None) -> None:
        """Forget baselines and history for one tracked id, or for all."""
        with self._lock:
            if tracked_id is None:
                self._baselines.clear()
                self._history.clear()
                self._snapshots.clear()
            else:
                self._baselines.pop(tracked_id, None)
                self._history.pop(tracked_id, None)
                self._snapshots.pop(tracked_id, None)
