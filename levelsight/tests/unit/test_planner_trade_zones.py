"""
Unit tests for trade zone framing and the technical summary.
"""

import pytest

from levelsight.analysis.technical_summary import build_technical_summary, describe_overextension
from levelsight.shared.models.indicators import (
    EMAAlignment,
    ExtensionDirection,
    ExtensionStatus,
    OverextensionState,
    ReversionSignal,
    TradingBias,
    TrendDirection,
)
from levelsight.shared.models.planner import EntryZone, TradeDirection
from levelsight.shared.models.report import SummaryStatus
from levelsight.shared.models.scoring import LevelSide
from levelsight.strategy.planner.trade_zones import plan_trade_zones, risk_reward
from levelsight.tests.fixtures.indicator_bundles import (
    make_analysis,
    make_bollinger,
    make_indicators,
    make_level,
    make_trend,
)


class TestTradeZones:
    """Entry / target / stop from the best level on each side."""

    @staticmethod
    def _analysis():
        return make_analysis(
            support=[make_level("s1", 95.0, 70), make_level("s2", 90.0, 50)],
            resistance=[make_level("r1", 110.0, 60, side=LevelSide.RESISTANCE)],
        )

    def test_long_from_levels(self):
        zones = plan_trade_zones(TradeDirection.LONG, make_indicators(atr=2.0), self._analysis())

        assert zones.from_levels is True
        assert zones.entry_price == 95.0
        assert zones.entry_zone.low == pytest.approx(94.0)
        assert zones.entry_zone.high == pytest.approx(96.0)
        assert zones.target == 110.0
        assert zones.stop == pytest.approx(91.0)
        assert zones.risk_reward_ratio == pytest.approx(3.75)

    def test_short_from_levels(self):
        zones = plan_trade_zones(TradeDirection.SHORT, make_indicators(atr=2.0), self._analysis())

        assert zones.entry_price == 110.0
        assert zones.target == 95.0
        assert zones.stop == pytest.approx(114.0)
        assert zones.risk_reward_ratio == pytest.approx(3.75)
        assert zones.risk == pytest.approx(4.0)
        assert zones.reward == pytest.approx(15.0)

    def test_fallback_without_opposite_side(self):
        analysis = make_analysis(support=[make_level("s1", 95.0, 70)])
        zones = plan_trade_zones(TradeDirection.LONG, make_indicators(current_price=100.0), analysis)

        assert zones.from_levels is False
        assert zones.entry_zone.low == pytest.approx(98.0)
        assert zones.entry_zone.high == pytest.approx(102.0)
        assert zones.target == pytest.approx(105.0)
        assert zones.stop == pytest.approx(97.0)
        assert zones.risk_reward_ratio == 1.5

    def test_short_fallback(self):
        zones = plan_trade_zones(TradeDirection.SHORT, make_indicators(current_price=100.0), make_analysis())

        assert zones.target == pytest.approx(95.0)
        assert zones.stop == pytest.approx(103.0)

    def test_risk_reward_rounding(self):
        assert risk_reward(100.0, 110.0, 97.0) == pytest.approx(3.33)
        assert risk_reward(100.0, 110.0, 100.0) == 0.0

    def test_entry_zone_validation(self):
        with pytest.raises(ValueError):
            EntryZone(low=101.0, high=99.0)


class TestTechnicalSummary:
    """Four summary rows plus the overextension description."""

    def test_rows(self):
        indicators = make_indicators(
            current_price=100.0,
            atr=2.0,
            emas={9: 101.0, 21: 99.5},
            trend=make_trend(TrendDirection.UPTREND, TradingBias.LONG, 76, EMAAlignment.MOSTLY_BULLISH),
            bollinger=make_bollinger(percent_b=0.9),
        )
        summary = build_technical_summary(indicators)
        rows = {row.indicator: row for row in summary.rows}

        assert list(rows) == ["Trend", "EMA Alignment", "Volatility (ATR)", "Bollinger Position"]

        assert rows["Trend"].value == "uptrend (76%)"
        assert rows["Trend"].status is SummaryStatus.BULLISH

        assert rows["EMA Alignment"].value == "mostly_bullish"
        assert rows["EMA Alignment"].status_label == "9: 101.00, 21: 99.50, 65: n/a"

        assert rows["Volatility (ATR)"].value == "2.00%"
        assert rows["Volatility (ATR)"].status is SummaryStatus.NEUTRAL
        assert rows["Volatility (ATR)"].status_label == "$2.00 average range"

        assert rows["Bollinger Position"].value == "90%"
        assert rows["Bollinger Position"].status is SummaryStatus.WARNING
        assert rows["Bollinger Position"].status_label == "Near upper band"

        assert summary.overextension_description == (
            "Price is trading near the 21 EMA. No overextension detected."
        )

    def test_high_volatility_and_lower_band(self):
        indicators = make_indicators(current_price=100.0, atr=4.0, bollinger=make_bollinger(percent_b=0.1))
        rows = {row.indicator: row for row in build_technical_summary(indicators).rows}

        assert rows["Volatility (ATR)"].status is SummaryStatus.WARNING
        assert rows["Bollinger Position"].status_label == "Near lower band"

    def test_extended_description(self):
        extension = OverextensionState(
            distance=-5.0,
            distance_percent=-5.0,
            atr_distance=2.5,
            status=ExtensionStatus.OVEREXTENDED,
            direction=ExtensionDirection.BELOW,
            mean_reversion_signal=True,
            signal_type=ReversionSignal.REVERSAL_CANDIDATE,
        )
        indicators = make_indicators(overextension=extension)
        assert describe_overextension(indicators) == (
            "Price is overextended below the 21 EMA. Mean reversion is likely."
        )
