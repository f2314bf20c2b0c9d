"""Tests for the performance score and the component monitor."""

import pytest

from renderscope import PerformanceMonitor, StatsAggregate, performance_score


def row(average, count=1):
    stats = StatsAggregate()
    for _ in range(count):
        stats.add(average)
    return stats


class TestPerformanceScore:
    """Test suite for performance_score()."""

    def test_no_rows_scores_full_marks(self):
        assert performance_score([]) == 100

    def test_all_fast_rows_score_full_marks(self):
        assert performance_score([row(1.0), row(5.0), row(15.9)]) == 100

    def test_all_slow_by_large_margin(self):
        rows = [row(200.0), row(500.0)]

        assert performance_score(rows) == 30

    def test_all_slow_and_busy_reaches_minimum(self):
        rows = [row(200.0, count=60), row(500.0, count=60)]

        assert performance_score(rows) == 10

    def test_half_slow(self):
        # 40 * 0.5 for the slow ratio, global average 18ms -> 2ms over -> 4
        rows = [row(4.0), row(32.0)]

        assert performance_score(rows) == 76

    def test_high_frequency_only(self):
        rows = [row(1.0, count=51), row(1.0, count=50)]

        assert performance_score(rows) == 90

    def test_custom_threshold(self):
        assert performance_score([row(10.0)], slow_threshold_ms=8.0) == 56

    def test_score_is_bounded(self):
        for rows in ([row(0.0)], [row(10_000.0, count=100)] * 5):
            assert 0 <= performance_score(rows) <= 100


class TestPerformanceMonitor:
    """Test suite for PerformanceMonitor."""

    def test_record_commit_aggregates(self):
        monitor = PerformanceMonitor()
        monitor.record_commit("TodoList", 10.0)
        monitor.record_commit("TodoList", 30.0)

        [profile] = monitor.components_performance_data()
        assert profile.render_count == 2
        assert profile.total_time == pytest.approx(40.0)
        assert profile.average_time == pytest.approx(20.0)
        assert profile.last_render_time == pytest.approx(30.0)
        assert profile.is_slow

    def test_is_slow_follows_latest_commit(self):
        monitor = PerformanceMonitor()
        monitor.record_commit("Row", 30.0)
        monitor.record_commit("Row", 2.0)

        [profile] = monitor.components_performance_data()
        assert not profile.is_slow

    def test_sorted_by_total_time(self):
        monitor = PerformanceMonitor()
        monitor.record_commit("Cheap", 1.0)
        monitor.record_commit("Costly", 50.0)
        monitor.record_commit("Middle", 10.0)

        names = [p.name for p in monitor.components_performance_data()]
        assert names == ["Costly", "Middle", "Cheap"]

    def test_returned_profiles_are_copies(self):
        monitor = PerformanceMonitor()
        monitor.record_commit("Row", 1.0)

        monitor.components_performance_data()[0].render_count = 99
        assert monitor.components_performance_data()[0].render_count == 1

    def test_slow_and_most_active(self):
        monitor = PerformanceMonitor()
        for _ in range(3):
            monitor.record_commit("Row", 1.0)
        monitor.record_commit("Chart", 40.0)

        assert [p.name for p in monitor.slow_components()] == ["Chart"]
        assert [p.name for p in monitor.slow_components(threshold=0.5)] == ["Chart", "Row"]
        assert [p.name for p in monitor.most_active_components(1)] == ["Row"]

    def test_summary(self):
        monitor = PerformanceMonitor()
        monitor.record_commit("Row", 2.0)
        monitor.record_commit("Row", 4.0)

        summary = monitor.summary()
        assert summary["total_components"] == 1
        assert summary["total_renders"] == 2
        assert summary["average_render_time"] == pytest.approx(3.0)
        assert summary["slow_components_count"] == 0
        assert summary["performance_score"] == 100

    def test_reset(self):
        monitor = PerformanceMonitor()
        monitor.record_commit("Row", 2.0)
        monitor.reset()

        assert monitor.components_performance_data() == []
        assert monitor.performance_score() == 100
