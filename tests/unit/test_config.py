"""Tests for EngineConfig."""

import pytest

from renderscope import ConfigurationError, EngineConfig, RenderscopeError


class TestEngineConfig:
    def test_defaults(self):
        config = EngineConfig()

        assert config.alert_capacity == 100
        assert config.slow_threshold_ms == 16.0
        assert config.stats_history_size == 100
        assert config.rerender_history_size == 20
        assert config.snapshot_history_size == 10
        assert config.interval_history_size == 50
        assert config.high_frequency_cutoff == 50
        assert config.debounce_delay == 0.3
        assert config.default_overscan == 5

    @pytest.mark.parametrize(
        "field,value",
        [
            ("alert_capacity", 0),
            ("stats_history_size", -3),
            ("rerender_history_size", 0),
            ("memoize_maxsize", 0),
            ("snapshot_history_size", 0),
            ("interval_history_size", -1),
            ("slow_threshold_ms", -1.0),
            ("debounce_delay", -0.1),
            ("default_overscan", -1),
        ],
    )
    def test_invalid_values(self, field, value):
        with pytest.raises(ConfigurationError, match=field):
            EngineConfig(**{field: value})

    def test_configuration_error_hierarchy(self):
        assert issubclass(ConfigurationError, RenderscopeError)
        assert issubclass(ConfigurationError, ValueError)

    def test_from_mapping_ignores_unknown_keys(self):
        config = EngineConfig.from_mapping(
            {"slow_threshold_ms": 8.0, "theme": "dark"}
        )

        assert config.slow_threshold_ms == 8.0
        assert config.alert_capacity == 100

    def test_frozen(self):
        config = EngineConfig()

        with pytest.raises(AttributeError):
            config.alert_capacity = 5
