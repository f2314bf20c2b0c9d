"""Tests for the deferred callback schedulers."""

import threading

from renderscope import ManualScheduler, ThreadingScheduler


class TestManualScheduler:
    def test_runs_due_callbacks_in_order(self):
        scheduler = ManualScheduler()
        ran = []
        scheduler.schedule(0.2, lambda: ran.append("late"))
        scheduler.schedule(0.1, lambda: ran.append("early"))

        assert scheduler.advance(0.15) == 1
        assert ran == ["early"]
        assert scheduler.advance(0.1) == 1
        assert ran == ["early", "late"]

    def test_cancelled_callback_never_runs(self):
        scheduler = ManualScheduler()
        ran = []
        handle = scheduler.schedule(0.1, lambda: ran.append(1))

        handle.cancel()
        assert scheduler.pending == 0
        assert scheduler.advance(1.0) == 0
        assert ran == []

    def test_callback_scheduled_while_advancing(self):
        scheduler = ManualScheduler()
        ran = []

        def first():
            ran.append("first")
            scheduler.schedule(0.1, lambda: ran.append("second"))

        scheduler.schedule(0.1, first)
        scheduler.advance(0.5)

        assert ran == ["first", "second"]
        assert scheduler.now == 0.5


class TestThreadingScheduler:
    def test_fires_after_delay(self):
        fired = threading.Event()

        ThreadingScheduler().schedule(0.01, fired.set)

        assert fired.wait(timeout=2.0)

    def test_cancel(self):
        fired = threading.Event()

        handle = ThreadingScheduler().schedule(0.2, fired.set)
        handle.cancel()

        assert not fired.wait(timeout=0.4)
