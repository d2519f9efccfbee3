"""
Unit tests for indicator math and edge cases.

Tests:
- SMA-seeded EMA and the EMA snapshot
- True Range / ATR and volatility regimes
- Bollinger Bands, %B and squeeze detection (including zero-width bands)
- Volume profile buckets, point of control and degenerate inputs
- Data validation (NaN, inverted candles, negative / zero volume)
"""

import numpy as np
import pandas as pd
import pytest

from levelsight.indicators import (
    DataValidationError,
    InsufficientDataError,
    classify_volatility,
    compute_atr,
    compute_atr_state,
    compute_bollinger_bands,
    compute_bollinger_state,
    compute_ema,
    compute_ema_snapshot,
    compute_sma,
    compute_volume_profile,
    latest_ema,
    require_length,
    threshold_adjustment,
    validate_ohlcv,
)
from levelsight.shared.models.data import bars_to_frame
from levelsight.shared.models.indicators import BandPosition, VolatilityRegime
from levelsight.tests.fixtures.market_data import (
    generate_flat_bars,
    generate_rising_bars,
    make_bar,
)


def make_profile_df(closes, highs, lows, volumes) -> pd.DataFrame:
    return pd.DataFrame({'high': highs, 'low': lows, 'close': closes, 'volume': volumes})


class TestMovingAverages:
    """Tests for SMA and SMA-seeded EMA."""

    def test_sma_basic(self):
        """Test SMA over a simple ramp."""
        sma = compute_sma(pd.Series([1.0, 2.0, 3.0, 4.0]), 2)
        assert pd.isna(sma.iloc[0])
        assert sma.iloc[-1] == pytest.approx(3.5)

    def test_ema_seeded_with_sma(self):
        """Test the first EMA value is the SMA of the first period inputs."""
        ema = compute_ema(pd.Series([float(x) for x in range(1, 11)]), 3)

        assert ema.index[0] == 2
        assert ema.iloc[0] == pytest.approx(2.0)
        # k = 0.5: each step closes half the gap to the new input
        assert ema.iloc[1] == pytest.approx(3.0)
        assert ema.iloc[-1] == pytest.approx(9.0)

    def test_ema_exact_period_equals_sma(self):
        """Test a series exactly one period long yields just the SMA."""
        closes = pd.Series([10.0, 20.0, 30.0, 40.0])
        ema = compute_ema(closes, 4)
        assert len(ema) == 1
        assert ema.iloc[0] == pytest.approx(25.0)

    def test_ema_short_series_unavailable(self):
        """Test a series shorter than the period has no EMA."""
        closes = pd.Series([1.0, 2.0])
        assert compute_ema(closes, 3).empty
        assert latest_ema(closes, 3) is None

    def test_ema_lag_on_linear_ramp(self):
        """Test EMA trails a unit ramp by (period - 1) / 2."""
        closes = pd.Series([100.0 + i for i in range(25)])
        assert latest_ema(closes, 9) == pytest.approx(120.0)
        assert latest_ema(closes, 21) == pytest.approx(114.0)

    def test_snapshot_marks_unavailable_periods(self):
        """Test long periods are None on a short series while short ones compute."""
        closes = pd.Series([100.0 + i for i in range(30)])
        snapshot = compute_ema_snapshot(closes, (9, 21, 65))

        assert snapshot.value(9) is not None
        assert snapshot.get(9).price_above is True
        assert snapshot.value(65) is None
        assert snapshot.get(65).price_above is None
        assert [e.period for e in snapshot.available()] == [9, 21]
        assert snapshot.sentinel(65) == 0.0


class TestATR:
    """Tests for True Range / ATR."""

    def test_constant_true_range(self):
        """Test ATR of a steady ramp equals its constant true range."""
        df = bars_to_frame(generate_rising_bars(25))
        atr = compute_atr(df, 10)

        # Previous close to current high spans 1.5 on every bar
        assert atr.iloc[-1] == pytest.approx(1.5)

    def test_atr_never_negative(self):
        """Test ATR is non-negative on flat data."""
        df = bars_to_frame(generate_flat_bars(30))
        atr = compute_atr(df, 10)
        assert (atr >= 0).all()
        assert atr.iloc[-1] == 0.0

    def test_atr_insufficient_data(self):
        """Test ATR needs period + 1 bars."""
        df = bars_to_frame(generate_rising_bars(10))
        with pytest.raises(InsufficientDataError):
            compute_atr(df, 10)

    def test_atr_state_regime(self):
        """Test ATR% and regime on the rising fixture."""
        df = bars_to_frame(generate_rising_bars(25))
        state = compute_atr_state(df)

        assert state.atr_percent == pytest.approx(1.5 / 124 * 100)
        assert state.volatility_regime is VolatilityRegime.LOW
        assert state.atr_multiplier == 1.0

    @pytest.mark.parametrize("atr_percent, regime, multiplier", [
        (1.0, VolatilityRegime.LOW, 1.0),
        (1.5, VolatilityRegime.MEDIUM, 1.2),
        (3.0, VolatilityRegime.MEDIUM, 1.2),
        (3.5, VolatilityRegime.HIGH, 1.5),
    ])
    def test_classify_volatility_boundaries(self, atr_percent, regime, multiplier):
        """Test regime boundaries are exclusive on both ends of medium."""
        assert classify_volatility(atr_percent) == (regime, multiplier)

    def test_threshold_adjustment(self):
        """Test stricter strength thresholds in volatile regimes."""
        assert threshold_adjustment(VolatilityRegime.LOW) == 0
        assert threshold_adjustment(VolatilityRegime.MEDIUM) == 5
        assert threshold_adjustment(VolatilityRegime.HIGH) == 15


class TestBollingerBands:
    """Tests for Bollinger Bands, %B and squeeze."""

    def test_flat_series_is_safe_squeeze(self):
        """Test 60 flat bars: zero deviation, %B 0.5, squeeze, no exception."""
        df = bars_to_frame(generate_flat_bars(60))
        state = compute_bollinger_state(df)

        assert state.upper == state.middle == state.lower == 100.0
        assert state.bandwidth == 0.0
        assert state.percent_b == 0.5
        assert state.is_squeeze is True
        assert state.position is BandPosition.UPPER_HALF

    @pytest.mark.parametrize("price", [100.1, 33.33, 0.3, 19.99, 1.1])
    def test_flat_inexact_prices_are_squeeze(self, price):
        """Test flat prices that floats can't represent exactly still read as zero width."""
        df = bars_to_frame(generate_flat_bars(60, price=price))
        state = compute_bollinger_state(df)

        assert state.upper == state.middle == state.lower == price
        assert state.bandwidth == 0.0
        assert state.percent_b == 0.5
        assert state.is_squeeze is True
        assert state.position is BandPosition.UPPER_HALF

    def test_band_ordering_on_trend(self):
        """Test upper >= middle >= lower and %B near the top in an uptrend."""
        df = bars_to_frame(generate_rising_bars(25))
        state = compute_bollinger_state(df)

        assert state.upper >= state.middle >= state.lower
        assert state.middle == pytest.approx(114.5)
        assert state.percent_b > 0.8
        assert state.position is BandPosition.UPPER_HALF
        assert state.is_squeeze is False

    def test_squeeze_after_volatility_contraction(self):
        """Test a tight final window after a wide one is a squeeze."""
        closes = [90.0 if i % 2 else 110.0 for i in range(40)]
        closes += [99.9 if i % 2 else 100.1 for i in range(20)]
        bars = [make_bar(i, c, high=c + 0.05, low=c - 0.05) for i, c in enumerate(closes)]
        state = compute_bollinger_state(bars_to_frame(bars))

        assert state.bandwidth > 0
        assert state.is_squeeze is True

    def test_bands_series_warmup(self):
        """Test the band series is NaN until the first full window."""
        df = bars_to_frame(generate_rising_bars(25))
        upper, middle, lower = compute_bollinger_bands(df, period=20)

        assert middle.iloc[:19].isna().all()
        assert middle.iloc[-1] == pytest.approx(114.5)
        assert (upper.dropna() >= lower.dropna()).all()

    def test_bollinger_insufficient_data(self):
        """Test Bollinger Bands need a full window."""
        df = bars_to_frame(generate_rising_bars(19))
        with pytest.raises(InsufficientDataError):
            compute_bollinger_state(df)


class TestVolumeProfile:
    """Tests for the close-based volume profile."""

    def test_high_volume_node_and_poc(self):
        """Test the dominant bucket becomes both node and point of control."""
        df = make_profile_df(
            closes=[100.5, 110.5, 110.2, 119.5],
            highs=[101.0, 111.0, 111.0, 120.0],
            lows=[100.0, 110.0, 110.0, 119.0],
            volumes=[100.0, 1000.0, 1000.0, 100.0],
        )
        profile = compute_volume_profile(df)

        assert profile.point_of_control == pytest.approx(110.5)
        assert profile.average_volume == pytest.approx(550.0)
        assert len(profile.high_volume_nodes) == 1

        node = profile.high_volume_nodes[0]
        assert node.price_low == pytest.approx(110.0)
        assert node.price_high == pytest.approx(111.0)
        assert node.volume_percent == pytest.approx(2000 / 2200 * 100)
        assert node.contains(110.7)

    def test_zero_range_has_no_nodes(self):
        """Test a flat series yields no nodes and POC at the price."""
        profile = compute_volume_profile(bars_to_frame(generate_flat_bars(30)))
        assert profile.high_volume_nodes == ()
        assert profile.point_of_control == 100.0

    def test_zero_volume_has_no_nodes(self):
        """Test zero total volume yields no nodes and POC at the first bucket."""
        df = make_profile_df(
            closes=[100.5, 110.5, 119.5],
            highs=[101.0, 111.0, 120.0],
            lows=[100.0, 110.0, 119.0],
            volumes=[0.0, 0.0, 0.0],
        )
        profile = compute_volume_profile(df)
        assert profile.high_volume_nodes == ()
        assert profile.point_of_control == pytest.approx(100.5)

    def test_empty_frame(self):
        """Test an empty frame does not raise."""
        profile = compute_volume_profile(bars_to_frame([]))
        assert profile.point_of_control == 0.0
        assert profile.high_volume_nodes == ()


class TestDataValidation:
    """Tests for OHLCV data validation."""

    def test_validate_ohlcv_valid_data(self):
        """Test validation passes for clean data."""
        result = validate_ohlcv(bars_to_frame(generate_rising_bars(25)), raise_on_error=False)
        assert result['valid'] is True
        assert result['errors'] == []

    def test_validate_ohlcv_missing_columns(self):
        """Test validation catches missing columns."""
        df = bars_to_frame(generate_rising_bars(25)).drop(columns=['volume'])
        with pytest.raises(DataValidationError, match="Missing required columns"):
            validate_ohlcv(df)

    def test_validate_ohlcv_nan_values(self):
        """Test any NaN price is an error."""
        df = bars_to_frame(generate_rising_bars(25))
        df.loc[5, 'close'] = np.nan
        with pytest.raises(DataValidationError, match="NaN"):
            validate_ohlcv(df)

    def test_validate_ohlcv_inverted_candles(self):
        """Test validation catches high < low."""
        df = bars_to_frame(generate_rising_bars(25))
        df.loc[10, 'high'] = df.loc[10, 'low'] - 1
        with pytest.raises(DataValidationError, match="inverted"):
            validate_ohlcv(df)

    def test_validate_ohlcv_negative_volume(self):
        """Test validation catches negative volume."""
        df = bars_to_frame(generate_rising_bars(25))
        df.loc[3, 'volume'] = -5.0
        result = validate_ohlcv(df, raise_on_error=False)
        assert result['valid'] is False

    def test_validate_ohlcv_non_positive_prices(self):
        """Test every price and volume check runs on the default call."""
        df = bars_to_frame(generate_rising_bars(25))
        df.loc[7, 'low'] = 0.0
        df.loc[8, 'volume'] = -1.0
        result = validate_ohlcv(df, raise_on_error=False)

        assert result['valid'] is False
        assert any("'low' has 1 non-positive" in error for error in result['errors'])
        assert any("negative volume" in error for error in result['errors'])

    def test_zero_volume_is_only_a_warning(self):
        """Test widespread zero volume warns but stays valid."""
        df = bars_to_frame(generate_flat_bars(20, volume=0.0))
        result = validate_ohlcv(df)
        assert result['valid'] is True
        assert len(result['warnings']) == 1

    def test_min_rows_raises_insufficient_data(self):
        """Test short frames raise the insufficient-data subclass."""
        df = bars_to_frame(generate_rising_bars(5))
        with pytest.raises(InsufficientDataError) as exc_info:
            validate_ohlcv(df, min_rows=20)
        assert isinstance(exc_info.value, DataValidationError)
        assert exc_info.value.required == 20
        assert exc_info.value.actual == 5

    def test_require_length(self):
        """Test the length guard passes at the boundary."""
        require_length(20, 20, "test")
        with pytest.raises(InsufficientDataError, match="need 20 bars, got 19"):
            require_length(19, 20, "test")
