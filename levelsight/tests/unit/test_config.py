"""
Unit tests for analysis configuration, timeframe classification and
half-up rounding.
"""

from dataclasses import FrozenInstanceError, replace

import pytest

from levelsight.shared.config.defaults import AnalysisConfig, DEFAULT_ANALYSIS_CONFIG
from levelsight.shared.config.timeframes import (
    TimeframeCategory,
    get_swing_bars,
    get_timeframe_category,
    is_fibonacci_timeframe,
)
from levelsight.shared.utils.rounding import round_half_up, round_to_cents, round_to_int


class TestAnalysisConfig:
    """Defaults, validation and dict round-trips."""

    def test_defaults_are_valid(self):
        DEFAULT_ANALYSIS_CONFIG.validate()

    def test_derived_properties(self):
        cfg = DEFAULT_ANALYSIS_CONFIG
        assert cfg.tolerance_fraction == pytest.approx(0.01)
        assert cfg.default_levels_per_side == 2
        assert cfg.expanded_levels_per_side == 3

    def test_config_is_frozen(self):
        with pytest.raises(FrozenInstanceError):
            DEFAULT_ANALYSIS_CONFIG.atr_period = 14

    def test_from_dict_merges_nested_overrides(self):
        cfg = AnalysisConfig.from_dict({
            "atr_period": 14,
            "weights": {"ema_proximity_points": 30},
            "unknown_key": "ignored",
        })
        assert cfg.atr_period == 14
        assert cfg.weights.ema_proximity_points == 30
        # Untouched siblings keep their defaults
        assert cfg.weights.round_number_points == 10
        assert cfg.weights.historical_touches.max_points == 25

    def test_from_dict_round_trips_to_dict(self):
        assert AnalysisConfig.from_dict(DEFAULT_ANALYSIS_CONFIG.to_dict()) == DEFAULT_ANALYSIS_CONFIG

    def test_medium_ema_must_be_configured(self):
        with pytest.raises(ValueError, match="medium_ema_period"):
            AnalysisConfig.from_dict({"medium_ema_period": 50})

    def test_strength_thresholds_must_descend(self):
        with pytest.raises(ValueError, match="strength thresholds"):
            AnalysisConfig.from_dict({"strength": {"strong": 30}})

    def test_zero_period_rejected(self):
        with pytest.raises(ValueError, match="atr_period"):
            replace(DEFAULT_ANALYSIS_CONFIG, atr_period=0).validate()


class TestTimeframes:
    """Timeframe categories drive swing windows and the Fibonacci gate."""

    @pytest.mark.parametrize("label", ["5m", "15m", "1h", "60", "15min"])
    def test_intraday_labels(self, label):
        assert get_timeframe_category(label) is TimeframeCategory.INTRADAY

    @pytest.mark.parametrize("label", ["1d", "D", "daily", "4h"])
    def test_daily_labels(self, label):
        assert get_timeframe_category(label) is TimeframeCategory.DAILY

    @pytest.mark.parametrize("label", ["1w", "1wk", "weekly", "W"])
    def test_weekly_labels(self, label):
        assert get_timeframe_category(label) is TimeframeCategory.WEEKLY

    def test_swing_window_per_category(self):
        assert get_swing_bars("15m") == 3
        assert get_swing_bars("1d") == 5
        assert get_swing_bars("1w") == 8

    def test_fibonacci_gate(self):
        assert not is_fibonacci_timeframe("1h")
        assert is_fibonacci_timeframe("1d")
        assert is_fibonacci_timeframe("1w")


class TestRounding:
    """Ties round up, unlike the built-in round()."""

    def test_half_rounds_up(self):
        assert round_to_int(2.5) == 3
        assert round_to_int(72.5) == 73
        assert round_half_up(0.125, 2) == pytest.approx(0.13)

    def test_cents(self):
        assert round_to_cents(104.8567) == pytest.approx(104.86)
        assert round_to_cents(90.25) == pytest.approx(90.25)
