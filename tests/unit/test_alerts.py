"""Tests for the bounded alert log."""

import logging

import pytest

from renderscope import AlertLog, ConfigurationError, Severity


class TestAlertLog:
    """Test suite for AlertLog."""

    def test_empty_log(self, alert_log):
        assert alert_log.get_all() == []
        assert alert_log.get_by_source("anything") == []
        assert len(alert_log) == 0

    def test_append_records_timestamp(self, alert_log, clock):
        alert = alert_log.warning("Slow operation", source="sort")

        assert alert.timestamp == clock.now
        assert alert.severity is Severity.WARNING
        assert alert_log.get_all() == [alert]

    def test_capacity_keeps_most_recent(self, clock):
        log = AlertLog(capacity=100, clock=clock)
        for i in range(150):
            log.warning(f"alert {i}", source="op")

        alerts = log.get_all()
        assert len(alerts) == 100
        assert alerts[0].message == "alert 50"
        assert alerts[-1].message == "alert 149"

    def test_get_by_source_preserves_order(self, alert_log):
        alert_log.warning("one", source="a")
        alert_log.error("two", source="b")
        alert_log.warning("three", source="a")

        assert [a.message for a in alert_log.get_by_source("a")] == ["one", "three"]

    def test_severity_from_string(self, alert_log):
        alert = alert_log.append("error", "failed", source="memo")

        assert alert.severity is Severity.ERROR

    def test_unknown_severity_rejected(self, alert_log):
        with pytest.raises(ValueError):
            alert_log.append("fatal", "nope", source="memo")

    def test_clear(self, alert_log):
        alert_log.warning("x", source="a")
        alert_log.clear()

        assert alert_log.get_all() == []

    def test_alerts_are_logged(self, alert_log, caplog):
        with caplog.at_level(logging.WARNING, logger="renderscope.alerts"):
            alert_log.warning("Slow operation", source="sort")
            alert_log.error("Computation failed", source="memo")

        levels = [record.levelno for record in caplog.records]
        assert levels == [logging.WARNING, logging.ERROR]
        assert "[sort]" in caplog.records[0].getMessage()

    @pytest.mark.parametrize("capacity", [0, -1])
    def test_invalid_capacity(self, capacity):
        with pytest.raises(ConfigurationError):
            AlertLog(capacity=capacity)
