"""Fibonacci Retracement Calculator

Calculates Fibonacci retracement levels across the dominant swing of the
series: the global highest high and lowest low. Used as one of the
confluence factors for support/resistance scoring.

Intraday series are skipped; retracements of minute-scale moves are
mostly noise.
"""

from typing import List, Optional

import pandas as pd
from loguru import logger

from levelsight.shared.config.defaults import AnalysisConfig, DEFAULT_ANALYSIS_CONFIG
from levelsight.shared.config.timeframes import is_fibonacci_timeframe
from levelsight.shared.models.indicators import FibLevel, FibonacciState, SwingDirection


def calculate_fib_levels(
    swing_high: float,
    swing_low: float,
    direction: SwingDirection,
    config: AnalysisConfig = DEFAULT_ANALYSIS_CONFIG,
) -> List[FibLevel]:
    """
    Calculate retracement levels from a swing range.

    For an UP swing (low came first) price retraces DOWN from the high:
        61.8% retracement = high - range * 0.618
    For a DOWN swing (high came first) price retraces UP from the low:
        61.8% retracement = low + range * 0.618

    Returns:
        Levels in configured ratio order
    """
    range_size = swing_high - swing_low
    levels = []
    for spec in config.fib_levels:
        if direction is SwingDirection.UP:
            price = swing_high - range_size * spec.ratio
        else:
            price = swing_low + range_size * spec.ratio
        levels.append(FibLevel(ratio=spec.ratio, price=price, label=spec.label, weight=spec.weight))
    return levels


def current_retracement(
    current_price: float,
    swing_high: float,
    swing_low: float,
    direction: SwingDirection,
) -> float:
    """How far price has retraced the swing, clamped to [0, 1]; 0 for a flat range."""
    range_size = swing_high - swing_low
    if range_size == 0:
        return 0.0
    if direction is SwingDirection.UP:
        retracement = (swing_high - current_price) / range_size
    else:
        retracement = (current_price - swing_low) / range_size
    return max(0.0, min(1.0, retracement))


def calculate_fibonacci(
    df: pd.DataFrame,
    timeframe: str,
    config: AnalysisConfig = DEFAULT_ANALYSIS_CONFIG,
) -> Optional[FibonacciState]:
    """
    Fibonacci retracement of the whole series.

    Args:
        df: DataFrame with 'date', 'high', 'low', 'close' columns
        timeframe: Bar interval label; intraday labels return None
        config: Fibonacci ratios and minimum bar count

    Returns:
        FibonacciState, or None for intraday timeframes and short series
    """
    if not is_fibonacci_timeframe(timeframe):
        return None

    if len(df) < config.fib_min_bars:
        logger.debug(f"Fibonacci skipped: {len(df)} bars < {config.fib_min_bars}")
        return None

    # argmax/argmin return the first occurrence of the extreme
    high_pos = int(df['high'].to_numpy().argmax())
    low_pos = int(df['low'].to_numpy().argmin())
    swing_high = float(df['high'].iloc[high_pos])
    swing_low = float(df['low'].iloc[low_pos])

    direction = SwingDirection.UP if low_pos < high_pos else SwingDirection.DOWN
    levels = calculate_fib_levels(swing_high, swing_low, direction, config)
    current_price = float(df['close'].iloc[-1])

    return FibonacciState(
        swing_high=swing_high,
        swing_high_date=str(df['date'].iloc[high_pos]),
        swing_low=swing_low,
        swing_low_date=str(df['date'].iloc[low_pos]),
        swing_direction=direction,
        levels=tuple(levels),
        current_retracement=current_retracement(current_price, swing_high, swing_low, direction),
    )
