"""
Shared pytest fixtures and configuration for renderscope tests.

Time never passes on its own in these tests: clocks and schedulers are
injected and advanced explicitly.
"""

import pytest

from renderscope import AlertLog, EngineConfig, ManualScheduler, PerformanceRegistry


class FakeClock:
    """Callable clock returning a value the test controls."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def advance_ms(self, milliseconds: float) -> None:
        self.now += milliseconds / 1000.0


@pytest.fixture
def clock():
    """Wall-clock stand-in, in seconds."""
    return FakeClock()


@pytest.fixture
def timer():
    """Performance-counter stand-in, in seconds."""
    return FakeClock(start=0.0)


@pytest.fixture
def scheduler():
    """Virtual-time scheduler for debounced memos."""
    return ManualScheduler()


@pytest.fixture
def alert_log(clock):
    """Provide a fresh alert log with the default capacity."""
    return AlertLog(clock=clock)


@pytest.fixture
def registry(clock, timer):
    """Provide a fresh registry with injected clocks."""
    return PerformanceRegistry(EngineConfig(), clock=clock, timer=timer)
