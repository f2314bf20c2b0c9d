"""Tests for OperationProfiler and StatsAggregate."""

import pytest

from renderscope import ConfigurationError, OperationProfiler, Severity, StatsAggregate


@pytest.fixture
def profiler(alert_log, timer):
    return OperationProfiler(alert_log=alert_log, clock=timer)


class RecordingSink:
    def __init__(self):
        self.commits = []

    def record_commit(self, component_name, duration_ms):
        self.commits.append((component_name, duration_ms))


class TestOperationProfiler:
    """Test suite for start/end pairing and aggregation."""

    def test_end_returns_duration_in_milliseconds(self, profiler, timer):
        profiler.start("filter-todos")
        timer.advance_ms(4)

        assert profiler.end("filter-todos") == pytest.approx(4.0)

    def test_end_without_start_warns_once_and_returns_zero(self, profiler, alert_log):
        assert profiler.end("never-started") == 0.0

        [alert] = alert_log.get_all()
        assert alert.severity is Severity.WARNING
        assert alert.source == "never-started"
        assert alert.message == "No start time found for operation: never-started"
        assert profiler.get_stats("never-started") is None

    def test_end_without_start_and_no_alert_log(self, timer, caplog):
        profiler = OperationProfiler(clock=timer)

        assert profiler.end("orphan") == 0.0
        assert "No start time found for operation: orphan" in caplog.text

    def test_slow_operation_raises_warning(self, profiler, alert_log, timer):
        profiler.start("sort-todos")
        timer.advance_ms(20)
        profiler.end("sort-todos")

        [alert] = alert_log.get_by_source("sort-todos")
        assert alert.severity is Severity.WARNING
        assert alert.message == "Slow operation: 20.00ms exceeds 16.0ms"

    def test_fast_operation_raises_nothing(self, profiler, alert_log, timer):
        profiler.start("op")
        timer.advance_ms(10)
        profiler.end("op")

        assert len(alert_log) == 0

    def test_aggregate_statistics(self, profiler, timer):
        for ms in (2, 6, 4):
            profiler.start("op")
            timer.advance_ms(ms)
            profiler.end("op")

        stats = profiler.get_stats("op")
        assert stats.count == 3
        assert stats.total == pytest.approx(12.0)
        assert stats.min == pytest.approx(2.0)
        assert stats.max == pytest.approx(6.0)
        assert stats.average == pytest.approx(4.0)
        assert list(stats.history) == pytest.approx([2.0, 6.0, 4.0])

    def test_history_is_bounded_but_aggregates_are_cumulative(self, alert_log, timer):
        profiler = OperationProfiler(alert_log=alert_log, history_size=3, clock=timer)
        for ms in range(1, 6):
            profiler.start("op")
            timer.advance_ms(ms)
            profiler.end("op")

        stats = profiler.get_stats("op")
        assert list(stats.history) == pytest.approx([3.0, 4.0, 5.0])
        assert stats.count == 5
        assert stats.min == pytest.approx(1.0)

    def test_second_start_overwrites_open_timer(self, profiler, timer):
        profiler.start("op")
        timer.advance_ms(10)
        profiler.start("op")
        timer.advance_ms(3)

        assert profiler.end("op") == pytest.approx(3.0)
        assert profiler.get_stats("op").count == 1

    def test_get_stats_returns_copy(self, profiler, timer):
        profiler.start("op")
        timer.advance_ms(1)
        profiler.end("op")

        stats = profiler.get_stats("op")
        stats.count = 99
        stats.history.clear()

        assert profiler.get_stats("op").count == 1
        assert len(profiler.get_stats("op").history) == 1

    def test_measure_records_even_when_block_raises(self, profiler, timer):
        with pytest.raises(KeyError):
            with profiler.measure("lookup"):
                timer.advance_ms(2)
                raise KeyError("missing")

        assert profiler.get_stats("lookup").count == 1
        assert profiler.open_operations() == []

    def test_profiled_decorator(self, profiler, timer):
        @profiler.profiled("render-row")
        def render(row):
            timer.advance_ms(1)
            return f"<li>{row}</li>"

        assert render("milk") == "<li>milk</li>"
        assert render("eggs") == "<li>eggs</li>"
        assert profiler.get_stats("render-row").count == 2

    def test_profiled_defaults_to_qualified_name(self, profiler):
        @profiler.profiled()
        def build_index():
            return {}

        build_index()
        assert any(name.endswith("build_index") for name in profiler.get_all_stats())

    def test_sink_receives_every_duration(self, alert_log, timer):
        sink = RecordingSink()
        profiler = OperationProfiler(alert_log=alert_log, clock=timer, sink=sink)

        profiler.start("TodoList")
        timer.advance_ms(5)
        profiler.end("TodoList")
        profiler.end("TodoList")

        assert sink.commits == [("TodoList", pytest.approx(5.0))]

    def test_clear_one_and_all(self, profiler, timer):
        for op in ("a", "b"):
            profiler.start(op)
            profiler.end(op)
        profiler.start("open")

        profiler.clear("a")
        assert set(profiler.get_all_stats()) == {"b"}
        assert profiler.open_operations() == ["open"]

        profiler.clear()
        assert profiler.get_all_stats() == {}
        assert profiler.open_operations() == []

    def test_invalid_history_size(self):
        with pytest.raises(ConfigurationError):
            OperationProfiler(history_size=0)


class TestStatsAggregate:
    def test_empty_aggregate(self):
        stats = StatsAggregate()

        assert stats.count == 0
        assert stats.percentile(95) == 0.0

    def test_percentile(self):
        stats = StatsAggregate()
        for value in range(1, 101):
            stats.add(float(value))

        assert stats.percentile(50) == pytest.approx(50.5)
        assert stats.percentile(100) == pytest.approx(100.0)

    def test_to_dict(self):
        stats = StatsAggregate()
        stats.add(2.0)

        assert stats.to_dict() == {
            "count": 1,
            "total": 2.0,
            "min": 2.0,
            "max": 2.0,
            "average": 2.0,
            "history": [2.0],
        }
