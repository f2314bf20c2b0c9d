"""
Memoization Cache
=================

Dependency-keyed value caches built on deep_equal().

Classes:
- DeepMemo: get-or-compute keyed on a deep-compared dependency snapshot
- DeepCallback: keeps a callback reference while its dependencies are unchanged
- StableReference: returns the previous reference for a structurally equal value
- DebouncedMemo: trailing-edge debounced recomputation

Functions:
- memoize: argument-keyed result cache with LRU eviction

Each cache instance is owned by exactly one caller. Entries are replaced,
never mutated, and a factory that raises leaves the cache in its prior state.
"""

import copy
import functools
import logging
import threading
import time
from collections.abc import Hashable, Mapping
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Optional, TypeVar

import numpy as np
from cachetools import LRUCache
from cachetools.keys import hashkey

from .alerts import AlertLog
from .errors import ConfigurationError
from .util.deep_equal import deep_equal
from .util.scheduler import ScheduledCall, Scheduler, ThreadingScheduler

logger = logging.getLogger(__name__)

T = TypeVar("T")

_MISSING = object()


def _snapshot(dependencies: Any) -> Any:
    """
    Copy a dependency value so later in-place mutation by the caller is seen
    as a change. Values that cannot be deep-copied are kept by reference.
    """
    try:
        return copy.deepcopy(dependencies)
    except (TypeError, copy.Error) as e:
        logger.debug(f"Dependencies not deep-copyable, keeping reference: {e}")
        return dependencies


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """A committed value and the dependency snapshot it was computed from."""

    dependencies: Any
    value: T
    created_at: float


# ============================================================================
# GET-OR-COMPUTE
# ============================================================================


class DeepMemo(Generic[T]):
    """
    Single-entry cache keyed on a deep-compared dependency snapshot.

    The factory runs once per distinct dependency snapshot. If it raises,
    the exception propagates and the previous entry stays in place.

    Example:
        memo = DeepMemo()
        visible = memo.get([todos, filters], lambda: apply_filters(todos, filters))
    """

    def __init__(
        self,
        max_age: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            max_age: Optional age in seconds after which the entry is
                recomputed even if the dependencies are unchanged
            clock: Time source for entry creation and expiry
        """
        if max_age is not None and max_age < 0:
            raise ConfigurationError(f"max_age must not be negative, got {max_age!r}")
        self.max_age = max_age
        self._clock = clock
        self._entry: Optional[CacheEntry[T]] = None
        self._stats = {"hits": 0, "misses": 0}

    @property
    def entry(self) -> Optional[CacheEntry[T]]:
        return self._entry

    @property
    def stats(self) -> Dict[str, int]:
        return dict(self._stats)

    def _is_fresh(self, dependencies: Any) -> bool:
        entry = self._entry
        if entry is None:
            return False
        if not deep_equal(dependencies, entry.dependencies):
            return False
        if self.max_age is not None and self._clock() - entry.created_at > self.max_age:
            return False
        return True

    def get(self, dependencies: Any, factory: Callable[[], T]) -> T:
        """
        Return the cached value or compute and commit a new one.

        Args:
            dependencies: Current dependency values (any deep-comparable value)
            factory: Zero-argument callable producing the value

        Returns:
            The cached value if dependencies are deep-equal to the last
            committed snapshot, otherwise the freshly computed value
        """
        if self._is_fresh(dependencies):
            self._stats["hits"] += 1
            return self._entry.value

        self._stats["misses"] += 1
        logger.debug("DeepMemo miss, recomputing")
        value = factory()
        self._entry = CacheEntry(
            dependencies=_snapshot(dependencies),
            value=value,
            created_at=self._clock(),
        )
        return value

    def invalidate(self) -> None:
        """Drop the committed entry so the next get() recomputes."""
        self._entry = None


class DeepCallback(Generic[T]):
    """Keeps returning the same callback while its dependencies stay deep-equal."""

    def __init__(self):
        self._memo: DeepMemo[T] = DeepMemo()

    def get(self, callback: T, dependencies: Any) -> T:
        return self._memo.get(dependencies, lambda: callback)


class StableReference(Generic[T]):
    """
    Returns the previously adopted reference when a new value is deep-equal
    to it, so consumers comparing by identity do not see a change.
    """

    def __init__(self):
        self._current: Any = _MISSING

    def get(self, value: T) -> T:
        if self._current is _MISSING or not deep_equal(self._current, value):
            self._current = value
        return self._current


# ============================================================================
# DEBOUNCED
# ============================================================================


class DebouncedMemo(Generic[T]):
    """
    Trailing-edge debounced memo.

    The first get() computes synchronously. After that, each dependency
    change cancels any pending computation and schedules a fresh one `delay`
    seconds later; get() keeps returning the last committed value until the
    scheduled computation runs. At most one computation is pending per
    instance.

    A deferred factory failure cannot reach the caller. The previous value is
    kept, the exception is stored in last_error, logged, and recorded as an
    error alert when an alert log is attached. flush() runs the pending
    computation immediately and lets its exception propagate.
    """

    def __init__(
        self,
        delay: float = 0.3,
        scheduler: Optional[Scheduler] = None,
        alert_log: Optional[AlertLog] = None,
        name: str = "debounced-memo",
    ):
        if delay < 0:
            raise ConfigurationError(f"delay must not be negative, got {delay!r}")
        self.delay = delay
        self.name = name
        self._scheduler = scheduler if scheduler is not None else ThreadingScheduler()
        self._alert_log = alert_log
        self._lock = threading.RLock()

        self._value: Any = _MISSING
        self._committed_deps: Any = _MISSING
        self._latest_deps: Any = _MISSING
        self._pending: Optional[ScheduledCall] = None
        self._pending_factory: Optional[Callable[[], T]] = None
        self._generation = 0
        self.last_error: Optional[BaseException] = None

    @property
    def value(self) -> T:
        with self._lock:
            if self._value is _MISSING:
                raise LookupError("DebouncedMemo has no committed value yet")
            return self._value

    @property
    def is_pending(self) -> bool:
        with self._lock:
            return self._pending is not None

    def get(self, dependencies: Any, factory: Callable[[], T]) -> T:
        """
        Return the committed value, scheduling a recomputation if the
        dependencies changed since the last call.
        """
        with self._lock:
            if self._value is _MISSING:
                self._value = factory()
                self._committed_deps = self._latest_deps = _snapshot(dependencies)
                return self._value

            if not deep_equal(dependencies, self._latest_deps):
                self._latest_deps = _snapshot(dependencies)
                self._reschedule(factory)
            return self._value

    def _reschedule(self, factory: Callable[[], T]) -> None:
        if self._pending is not None:
            self._pending.cancel()
        self._generation += 1
        generation = self._generation
        self._pending_factory = factory
        self._pending = self._scheduler.schedule(
            self.delay, lambda: self._fire(generation)
        )
        logger.debug(f"{self.name}: recomputation scheduled in {self.delay}s")

    def _fire(self, generation: int) -> None:
        with self._lock:
            # A cancelled timer may still fire if cancel raced with it
            if generation != self._generation or self._pending is None:
                return
            try:
                self._run_pending()
            except Exception as e:
                self.last_error = e
                logger.error(f"{self.name}: deferred computation failed: {e}")
                if self._alert_log is not None:
                    self._alert_log.error(
                        f"Debounced computation failed: {e}", source=self.name
                    )

    def _run_pending(self) -> None:
        factory = self._pending_factory
        deps = self._latest_deps
        self._pending = None
        self._pending_factory = None
        try:
            value = factory()
        except Exception:
            # Same dependencies on the next get() must schedule a retry
            self._latest_deps = self._committed_deps
            raise
        self._value = value
        self._committed_deps = deps
        self.last_error = None

    def flush(self) -> Optional[T]:
        """
        Run the pending computation now, if any, and return the committed value.

        Raises:
            Exception: Whatever the pending factory raises; the previous value
                is kept in that case
        """
        with self._lock:
            if self._pending is not None:
                self._pending.cancel()
                self._generation += 1
                self._run_pending()
            return None if self._value is _MISSING else self._value

    def cancel(self) -> None:
        """Drop the pending computation; the committed value is kept."""
        with self._lock:
            if self._pending is not None:
                self._pending.cancel()
                self._pending = None
                self._pending_factory = None
                self._generation += 1
                self._latest_deps = self._committed_deps


# ============================================================================
# GENERAL-PURPOSE MEMOIZE
# ============================================================================


# Leads every key built from frozen arguments, so it never equals the key of
# a call whose arguments were hashable as given
_FROZEN = object()


def _freeze(value: Any) -> Hashable:
    """
    Recursively convert a value into a hashable, type-tagged equivalent.

    Lists, tuples, mappings and sets are tagged with their kind so that,
    for example, [1] and (1,) or {1: "a"} and {"1": "a"} stay distinct.
    Unhashable objects of any other type are keyed on their type and repr.
    """
    if isinstance(value, np.ndarray):
        return ("ndarray", value.dtype.str, value.shape, value.tobytes())
    if isinstance(value, Mapping):
        return (
            "dict",
            frozenset((_freeze(k), _freeze(v)) for k, v in value.items()),
        )
    if isinstance(value, list):
        return ("list", tuple(_freeze(item) for item in value))
    if isinstance(value, tuple):
        return ("tuple", tuple(_freeze(item) for item in value))
    if isinstance(value, (set, frozenset)):
        return ("set", frozenset(_freeze(item) for item in value))
    try:
        hash(value)
        return value
    except TypeError:
        return ("repr", type(value).__qualname__, repr(value))


def _default_key(*args, **kwargs):
    key = hashkey(*args, **kwargs)
    try:
        hash(key)
        return key
    except TypeError:
        return hashkey(
            _FROZEN,
            *(_freeze(arg) for arg in args),
            **{name: _freeze(value) for name, value in kwargs.items()},
        )


def memoize(
    fn: Optional[Callable[..., T]] = None,
    *,
    key: Optional[Callable[..., Any]] = None,
    maxsize: int = 128,
):
    """
    Cache a function's results by argument key, evicting least recently used.

    Can be used bare (@memoize) or with options (@memoize(maxsize=512)).

    Args:
        fn: Function to wrap
        key: Optional callable mapping the call arguments to a cache key
        maxsize: Maximum number of cached results

    Returns:
        The wrapped function, exposing cache, cache_clear() and cache_info()
    """
    if maxsize <= 0:
        raise ConfigurationError(f"maxsize must be positive, got {maxsize!r}")

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        cache: LRUCache = LRUCache(maxsize=maxsize)
        key_fn = key if key is not None else _default_key
        stats = {"hits": 0, "misses": 0}

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            k = key_fn(*args, **kwargs)
            result = cache.get(k, _MISSING)
            if result is not _MISSING:
                stats["hits"] += 1
                return result
            stats["misses"] += 1
            result = func(*args, **kwargs)
            cache[k] = result
            return result

        def cache_info() -> Dict[str, int]:
            return {**stats, "size": len(cache), "maxsize": maxsize}

        def cache_clear() -> None:
            cache.clear()
            stats["hits"] = stats["misses"] = 0

        wrapper.cache = cache
        wrapper.cache_clear = cache_clear
        wrapper.cache_info = cache_info
        return wrapper

    if fn is not None:
        return decorator(fn)
    return decorator
