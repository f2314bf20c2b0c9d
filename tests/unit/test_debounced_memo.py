"""Tests for the trailing-edge debounced memo."""

import pytest

from renderscope import AlertLog, DebouncedMemo, Severity


def recorder():
    calls = []

    def make(deps):
        def factory():
            calls.append(deps)
            return f"result:{deps}"

        return factory

    return make, calls


class TestDebouncedMemo:
    """Test suite for DebouncedMemo with a virtual-time scheduler."""

    def test_first_get_computes_synchronously(self, scheduler):
        memo = DebouncedMemo(delay=0.3, scheduler=scheduler)
        make, calls = recorder()

        assert memo.get("a", make("a")) == "result:a"
        assert calls == ["a"]
        assert not memo.is_pending

    def test_unchanged_dependencies_schedule_nothing(self, scheduler):
        memo = DebouncedMemo(delay=0.3, scheduler=scheduler)
        make, calls = recorder()

        memo.get(["a"], make("a"))
        memo.get(["a"], make("a"))

        assert not memo.is_pending
        assert scheduler.pending == 0

    def test_returns_previous_value_until_delay_elapses(self, scheduler):
        memo = DebouncedMemo(delay=0.3, scheduler=scheduler)
        make, calls = recorder()

        memo.get("a", make("a"))
        assert memo.get("b", make("b")) == "result:a"

        scheduler.advance(0.29)
        assert memo.get("b", make("b")) == "result:a"

        scheduler.advance(0.02)
        assert memo.get("b", make("b")) == "result:b"
        assert calls == ["a", "b"]

    def test_rapid_changes_collapse_into_one_computation(self, scheduler):
        memo = DebouncedMemo(delay=0.3, scheduler=scheduler)
        make, calls = recorder()
        memo.get(0, make(0))

        for n in range(1, 11):
            memo.get(n, make(n))
            scheduler.advance(0.1)

        assert calls == [0]
        scheduler.advance(0.3)

        assert calls == [0, 10]
        assert memo.value == "result:10"
        assert scheduler.pending == 0

    def test_flush_runs_pending_now(self, scheduler):
        memo = DebouncedMemo(delay=0.3, scheduler=scheduler)
        make, calls = recorder()
        memo.get("a", make("a"))
        memo.get("b", make("b"))

        assert memo.flush() == "result:b"
        assert not memo.is_pending
        scheduler.advance(1.0)
        assert calls == ["a", "b"]

    def test_flush_propagates_factory_error(self, scheduler):
        memo = DebouncedMemo(delay=0.3, scheduler=scheduler)
        memo.get("a", lambda: "ok")

        def failing():
            raise ValueError("bad filter")

        memo.get("b", failing)
        with pytest.raises(ValueError, match="bad filter"):
            memo.flush()
        assert memo.value == "ok"

    def test_deferred_failure_keeps_value_and_alerts(self, scheduler):
        alerts = AlertLog()
        memo = DebouncedMemo(
            delay=0.3, scheduler=scheduler, alert_log=alerts, name="search-results"
        )
        memo.get("a", lambda: "ok")

        def failing():
            raise RuntimeError("index offline")

        memo.get("b", failing)
        scheduler.advance(0.3)

        assert memo.value == "ok"
        assert isinstance(memo.last_error, RuntimeError)
        [alert] = alerts.get_by_source("search-results")
        assert alert.severity is Severity.ERROR

    def test_failed_dependencies_retry_on_next_get(self, scheduler):
        memo = DebouncedMemo(delay=0.3, scheduler=scheduler)
        memo.get("a", lambda: "ok")
        attempts = []

        def flaky():
            attempts.append(1)
            if len(attempts) == 1:
                raise RuntimeError("transient")
            return "recovered"

        memo.get("b", flaky)
        scheduler.advance(0.3)
        memo.get("b", flaky)
        scheduler.advance(0.3)

        assert memo.value == "recovered"
        assert memo.last_error is None

    def test_cancel_keeps_committed_value(self, scheduler):
        memo = DebouncedMemo(delay=0.3, scheduler=scheduler)
        make, calls = recorder()
        memo.get("a", make("a"))
        memo.get("b", make("b"))

        memo.cancel()
        scheduler.advance(1.0)

        assert calls == ["a"]
        assert memo.value == "result:a"

    def test_value_before_first_get(self, scheduler):
        memo = DebouncedMemo(scheduler=scheduler)

        with pytest.raises(LookupError):
            memo.value
        assert memo.flush() is None
