"""
Integration tests for the full level analysis pipeline.

Runs bars through the indicator engine, confluence scoring, display
selection, confidence, summary and trade zones via the Orchestrator, and
checks the cross-cutting properties the output must always satisfy.
"""

import json
import math
from dataclasses import replace

import pytest

from levelsight.analysis.indicator_engine import calculate_all_indicators
from levelsight.engine.orchestrator import Orchestrator
from levelsight.indicators.validation_utils import DataValidationError
from levelsight.shared.config.defaults import DEFAULT_ANALYSIS_CONFIG
from levelsight.shared.models.indicators import ExtensionStatus, SwingDirection, TrendDirection
from levelsight.shared.models.scoring import LevelSide
from levelsight.tests.fixtures.market_data import (
    generate_flat_bars,
    generate_oscillating_bars,
    generate_rising_bars,
    make_bar,
)


class TestIndicatorEngine:
    """calculate_all_indicators on known series."""

    def test_rising_daily_series(self):
        """25 rising daily bars: short EMAs only, Fibonacci up, no pivots."""
        bars = generate_rising_bars(25)
        ind = calculate_all_indicators(bars, "RISE", "1d")

        assert ind is not None
        assert ind.data_points == 25
        assert ind.current_price == 124.0
        assert ind.price_change == pytest.approx(24.0)
        assert ind.price_change_percent == pytest.approx(24.0)

        assert ind.ema.value(9) == pytest.approx(120.0)
        assert ind.ema.value(21) == pytest.approx(114.0)
        assert ind.ema.value(65) is None
        assert ind.trend.direction is TrendDirection.STRONG_UPTREND

        assert ind.atr.atr == pytest.approx(1.5)
        assert ind.swing_points == ()

        assert ind.fibonacci is not None
        assert ind.fibonacci.swing_direction is SwingDirection.UP
        assert ind.fibonacci.swing_high_date == bars[-1].date
        assert ind.fibonacci.swing_low_date == bars[0].date

        # (124 - 114) / 1.5 ATR
        assert ind.overextension.atr_distance == pytest.approx(10 / 1.5)
        assert ind.overextension.status is ExtensionStatus.EXTREMELY_EXTENDED

    def test_too_few_bars_returns_none(self):
        assert calculate_all_indicators(generate_rising_bars(19), "SHORT", "1d") is None

    def test_minimum_bars_is_enough(self):
        ind = calculate_all_indicators(generate_rising_bars(20), "MIN", "1d")
        assert ind is not None
        assert ind.fibonacci is not None

    def test_intraday_skips_fibonacci(self):
        ind = calculate_all_indicators(generate_rising_bars(25), "RISE", "15m")
        assert ind.fibonacci is None

    @pytest.mark.parametrize("price", [100.0, 100.1, 33.33, 0.3, 19.99, 1.1])
    def test_flat_series_at_any_price(self, price):
        ind = calculate_all_indicators([make_bar(i, price) for i in range(60)], "FLAT", "1d")

        assert ind.bollinger.bandwidth == 0.0
        assert ind.bollinger.percent_b == 0.5
        assert ind.bollinger.is_squeeze is True

    def test_nan_prices_raise(self):
        bars = generate_rising_bars(25)
        bars[10] = make_bar(10, float('nan'), high=111.0, low=109.0)
        with pytest.raises(DataValidationError):
            calculate_all_indicators(bars, "NAN", "1d")


class TestOrchestrator:
    """End-to-end analysis runs."""

    @pytest.fixture
    def result(self):
        return Orchestrator().analyze(generate_oscillating_bars(120), "OSC", "1d")

    def test_produces_levels(self, result):
        assert result is not None
        assert result.symbol == "OSC"
        assert result.levels.support_levels or result.levels.resistance_levels

    def test_deterministic(self):
        bars = generate_oscillating_bars(120)
        first = Orchestrator().analyze(bars, "OSC", "1d").to_dict()
        second = Orchestrator().analyze(bars, "OSC", "1d").to_dict()
        assert first == second

    def test_level_sides_and_ids(self, result):
        price = result.indicators.current_price
        levels = result.levels

        assert all(level.price < price and level.side is LevelSide.SUPPORT for level in levels.support_levels)
        assert all(level.price >= price for level in levels.resistance_levels)
        ids = [lv.id for lv in levels.support_levels + levels.resistance_levels]
        assert len(ids) == len(set(ids))

        scores = [lv.confluence_score for lv in levels.support_levels]
        assert scores == sorted(scores, reverse=True)

    def test_display_caps_and_spacing(self, result):
        price = result.indicators.current_price
        display = result.levels.display_levels
        expanded = result.levels.expanded_levels

        for selection, cap in ((display, 2), (expanded, 3)):
            for side in (selection.support, selection.resistance):
                assert len(side) <= cap
                distances = [lv.distance_from_price for lv in side]
                assert distances == sorted(distances)
                for i, a in enumerate(side):
                    for b in side[i + 1:]:
                        assert abs(a.price - b.price) / price * 100 >= 2.0 - 1e-9

    def test_confidence_bounds(self, result):
        assert 30 <= result.levels.confidence.overall <= 100

    def test_no_nan_in_output(self, result):
        payload = json.dumps(result.to_dict())
        # json.dumps writes NaN / Infinity literally
        assert "NaN" not in payload
        assert "Infinity" not in payload
        for level in result.levels.support_levels + result.levels.resistance_levels:
            assert math.isfinite(level.zone.low) and math.isfinite(level.zone.high)

    def test_trade_zones_present(self, result):
        assert result.long_zones.direction.value == "long"
        assert result.short_zones.direction.value == "short"
        assert result.long_zones.risk_reward_ratio >= 0

    def test_flat_series(self):
        """60 flat bars: squeeze, no levels, percent fallback zones."""
        result = Orchestrator().analyze(generate_flat_bars(60), "FLAT", "1d")

        assert result is not None
        assert result.indicators.bollinger.is_squeeze is True
        assert result.indicators.bollinger.percent_b == 0.5
        assert result.levels.support_levels == ()
        assert result.levels.resistance_levels == ()
        assert result.long_zones.from_levels is False
        assert result.short_zones.from_levels is False

    def test_insufficient_data(self):
        assert Orchestrator().analyze(generate_rising_bars(10), "TINY", "1d") is None

    def test_invalid_configuration_rejected(self):
        bad = replace(DEFAULT_ANALYSIS_CONFIG, atr_period=0)
        with pytest.raises(ValueError):
            Orchestrator(bad)

        orchestrator = Orchestrator()
        with pytest.raises(ValueError):
            orchestrator.update_configuration(bad)
        assert orchestrator.config is DEFAULT_ANALYSIS_CONFIG

    def test_status_reports_configuration(self):
        status = Orchestrator().get_pipeline_status()
        assert status["config"]["atr_period"] == 10
