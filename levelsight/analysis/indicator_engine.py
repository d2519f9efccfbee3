"""
Indicator Engine

Computes the complete TechnicalIndicators bundle for one instrument and
timeframe. Either every required indicator is produced or the bundle is
absent: a series too short for the engine minimum, ATR or Bollinger Bands
yields None rather than a partial result.
"""

from typing import Optional, Sequence

from loguru import logger

from levelsight.analysis.fibonacci import calculate_fibonacci
from levelsight.analysis.overextension import detect_overextension
from levelsight.analysis.swing_points import detect_swing_points
from levelsight.analysis.trend_classifier import classify_trend
from levelsight.indicators.moving_averages import compute_ema_snapshot
from levelsight.indicators.validation_utils import InsufficientDataError, require_length, validate_ohlcv
from levelsight.indicators.volatility import compute_atr_state, compute_bollinger_state
from levelsight.indicators.volume import compute_volume_profile
from levelsight.shared.config.defaults import AnalysisConfig, DEFAULT_ANALYSIS_CONFIG
from levelsight.shared.models.data import Bar, bars_to_frame
from levelsight.shared.models.indicators import TechnicalIndicators


def _build_indicators(
    bars: Sequence[Bar],
    symbol: str,
    timeframe: str,
    config: AnalysisConfig,
) -> TechnicalIndicators:
    require_length(len(bars), config.min_bars, "indicator engine")

    df = bars_to_frame(bars)
    validate_ohlcv(df)

    closes = df['close']
    current_price = float(closes.iloc[-1])
    first_price = float(closes.iloc[0])
    price_change = current_price - first_price
    price_change_percent = price_change / first_price * 100

    ema = compute_ema_snapshot(closes, config.ema_periods, current_price)
    trend = classify_trend(current_price, ema)
    atr = compute_atr_state(df, config)
    bollinger = compute_bollinger_state(df, config)
    overextension = detect_overextension(
        current_price, ema.value(config.medium_ema_period), atr.atr, config
    )
    fibonacci = calculate_fibonacci(df, timeframe, config)
    volume_profile = compute_volume_profile(df, config)
    swing_points = detect_swing_points(df, timeframe, config)

    return TechnicalIndicators(
        symbol=symbol,
        timeframe=timeframe,
        current_price=current_price,
        price_change=price_change,
        price_change_percent=price_change_percent,
        data_points=len(bars),
        ema=ema,
        trend=trend,
        atr=atr,
        bollinger=bollinger,
        swing_points=tuple(swing_points),
        fibonacci=fibonacci,
        volume_profile=volume_profile,
        overextension=overextension,
    )


def calculate_all_indicators(
    bars: Sequence[Bar],
    symbol: str,
    timeframe: str,
    config: AnalysisConfig = DEFAULT_ANALYSIS_CONFIG,
) -> Optional[TechnicalIndicators]:
    """
    Compute every indicator for a bar series.

    Args:
        bars: Bars in ascending timestamp order
        symbol: Instrument symbol (carried into the bundle)
        timeframe: Bar interval label ('5m', '1h', '1d', '1w', ...)
        config: Analysis configuration

    Returns:
        TechnicalIndicators, or None when the series is too short for the
        engine minimum, ATR or Bollinger Bands

    Raises:
        DataValidationError: If the bars contain NaN or inconsistent prices
    """
    try:
        indicators = _build_indicators(bars, symbol, timeframe, config)
    except InsufficientDataError as e:
        logger.warning(f"⚠️  [{symbol}] Insufficient data for analysis: {e}")
        return None

    logger.debug(
        f"[{symbol}] Indicators: price={indicators.current_price:.2f} "
        f"trend={indicators.trend.direction.value} atr%={indicators.atr.atr_percent:.2f} "
        f"swings={len(indicators.swing_points)} fib={'yes' if indicators.fibonacci else 'no'}"
    )
    return indicators
