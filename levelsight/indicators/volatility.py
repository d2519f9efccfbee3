"""
Volatility Indicators Module

Implements volatility measurement indicators:
- True Range / ATR (Average True Range) with volatility regime
- Bollinger Bands with %B, bandwidth and squeeze detection

Series functions return pandas Series with proper index alignment; the
``*_state`` functions reduce them to the latest-bar reading.
"""

from typing import Tuple

import numpy as np
import pandas as pd
import logging

from levelsight.indicators.moving_averages import compute_ema
from levelsight.indicators.validation_utils import require_length
from levelsight.shared.config.defaults import AnalysisConfig, DEFAULT_ANALYSIS_CONFIG
from levelsight.shared.models.indicators import (
    ATRState,
    BandPosition,
    BollingerState,
    VolatilityRegime,
)

logger = logging.getLogger(__name__)


def _require_columns(df: pd.DataFrame, columns) -> None:
    missing_cols = [col for col in columns if col not in df.columns]
    if missing_cols:
        raise ValueError(f"DataFrame missing required columns: {missing_cols}")


def compute_true_range(df: pd.DataFrame) -> pd.Series:
    """
    Compute True Range for every bar after the first.

    True Range is the greatest of:
    - Current High - Current Low
    - |Current High - Previous Close|
    - |Current Low - Previous Close|

    Returns:
        pd.Series: True range values, indexed from the second bar
    """
    _require_columns(df, ['high', 'low', 'close'])

    prev_close = df['close'].shift()
    high_low = df['high'] - df['low']
    high_close = (df['high'] - prev_close).abs()
    low_close = (df['low'] - prev_close).abs()
    true_range = pd.concat([high_low, high_close, low_close], axis=1).max(axis=1)
    return true_range.iloc[1:]


def compute_atr(df: pd.DataFrame, period: int = 10) -> pd.Series:
    """
    Compute Average True Range as an SMA-seeded EMA of True Range.

    Args:
        df: DataFrame with 'high', 'low', 'close' columns
        period: ATR period (default 10)

    Returns:
        pd.Series: ATR values

    Raises:
        InsufficientDataError: If df has fewer than period + 1 rows
    """
    _require_columns(df, ['high', 'low', 'close'])
    require_length(len(df), period + 1, f"ATR({period})")
    return compute_ema(compute_true_range(df), period)


def classify_volatility(
    atr_percent: float,
    config: AnalysisConfig = DEFAULT_ANALYSIS_CONFIG
) -> Tuple[VolatilityRegime, float]:
    """Map ATR% to its volatility regime and zone-width multiplier."""
    vol = config.volatility
    if atr_percent < vol.low_threshold:
        return VolatilityRegime.LOW, vol.low_atr_multiplier
    if atr_percent > vol.high_threshold:
        return VolatilityRegime.HIGH, vol.high_atr_multiplier
    return VolatilityRegime.MEDIUM, vol.medium_atr_multiplier


def threshold_adjustment(
    regime: VolatilityRegime,
    config: AnalysisConfig = DEFAULT_ANALYSIS_CONFIG
) -> int:
    """Points added to every strength threshold in the given regime."""
    vol = config.volatility
    if regime is VolatilityRegime.LOW:
        return vol.low_threshold_adjustment
    if regime is VolatilityRegime.HIGH:
        return vol.high_threshold_adjustment
    return vol.medium_threshold_adjustment


def compute_atr_state(df: pd.DataFrame, config: AnalysisConfig = DEFAULT_ANALYSIS_CONFIG) -> ATRState:
    """
    Latest ATR reading with ATR% of the last close and its regime.

    Raises:
        InsufficientDataError: If df has fewer than atr_period + 1 rows
    """
    atr = float(compute_atr(df, config.atr_period).iloc[-1])
    last_close = float(df['close'].iloc[-1])
    atr_percent = atr / last_close * 100
    regime, multiplier = classify_volatility(atr_percent, config)

    return ATRState(
        atr=atr,
        atr_percent=atr_percent,
        volatility_regime=regime,
        atr_multiplier=multiplier,
    )


def compute_bollinger_bands(
    df: pd.DataFrame,
    period: int = 20,
    std_dev: float = 2.0
) -> Tuple[pd.Series, pd.Series, pd.Series]:
    """
    Compute Bollinger Bands.

    Bollinger Bands consist of:
    - Middle band: Simple Moving Average (SMA)
    - Upper band: SMA + (population standard deviation x multiplier)
    - Lower band: SMA - (population standard deviation x multiplier)

    Returns:
        Tuple[pd.Series, pd.Series, pd.Series]: (upper_band, middle_band, lower_band)
    """
    _require_columns(df, ['close'])
    require_length(len(df), period, f"Bollinger Bands({period})")

    middle_band = df['close'].rolling(window=period).mean()
    std = df['close'].rolling(window=period).std(ddof=0)
    upper_band = middle_band + (std * std_dev)
    lower_band = middle_band - (std * std_dev)

    return upper_band, middle_band, lower_band


def _window_bandwidths(closes: np.ndarray, period: int, std_dev: float) -> np.ndarray:
    """Bandwidth of every full window of ``period`` closes, oldest first; 0 for flat windows."""
    windows = np.lib.stride_tricks.sliding_window_view(closes, period)
    means = windows.mean(axis=1)
    stds = windows.std(axis=1)
    flat = windows.max(axis=1) == windows.min(axis=1)
    return np.where(flat, 0.0, (2 * std_dev * stds) / means)


def compute_bollinger_state(
    df: pd.DataFrame,
    config: AnalysisConfig = DEFAULT_ANALYSIS_CONFIG
) -> BollingerState:
    """
    Latest Bollinger reading with %B, position and squeeze flag.

    The squeeze compares the current bandwidth with the mean bandwidth of
    every earlier window (each ending one bar before the next window); with
    no earlier window the current bandwidth is its own baseline. A band of
    zero width is always a squeeze.

    Raises:
        InsufficientDataError: If df has fewer than bollinger_period rows
    """
    _require_columns(df, ['close'])
    period = config.bollinger_period
    std_dev = config.bollinger_std_dev
    require_length(len(df), period, f"Bollinger Bands({period})")

    closes = df['close'].to_numpy(dtype=float)
    current_price = closes[-1]

    window = closes[-period:]

    # Flatness is read from the closes; mean/std of equal floats can carry 1e-16 noise
    if window.max() == window.min():
        middle = upper = lower = float(window[0])
        bandwidth = 0.0
        percent_b = 0.5
        is_squeeze = True
    else:
        middle = float(window.mean())
        sigma = float(window.std())
        upper = middle + std_dev * sigma
        lower = middle - std_dev * sigma
        band_range = upper - lower
        bandwidth = band_range / middle
        percent_b = (current_price - lower) / band_range
        history = _window_bandwidths(closes[:-1], period, std_dev) if len(closes) > period else np.array([])
        avg_bandwidth = float(history.mean()) if history.size > 0 else bandwidth
        is_squeeze = bool(bandwidth < avg_bandwidth * config.squeeze_ratio)

    if current_price > upper:
        position = BandPosition.ABOVE_UPPER
    elif current_price >= middle:
        position = BandPosition.UPPER_HALF
    elif current_price >= lower:
        position = BandPosition.LOWER_HALF
    else:
        position = BandPosition.BELOW_LOWER

    return BollingerState(
        upper=upper,
        middle=middle,
        lower=lower,
        bandwidth=bandwidth,
        percent_b=float(percent_b),
        is_squeeze=is_squeeze,
        position=position,
    )
