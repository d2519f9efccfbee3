"""
Moving Average Indicators Module

Implements the moving averages the level engine is built on:
- SMA (Simple Moving Average)
- EMA (Exponential Moving Average, SMA-seeded)
- EMA snapshot across the configured period family

All series functions return pandas Series with proper index alignment.
"""

from typing import Iterable, Optional

import pandas as pd
import logging

from levelsight.shared.models.indicators import EMASnapshot, EMAValue

logger = logging.getLogger(__name__)


def compute_sma(series: pd.Series, period: int) -> pd.Series:
    """
    Compute Simple Moving Average.

    Args:
        series: Input values (typically closes)
        period: Window length

    Returns:
        pd.Series: SMA values, NaN until the first full window
    """
    if period < 1:
        raise ValueError(f"SMA period must be >= 1, got {period}")
    return series.rolling(window=period).mean()


def compute_ema(series: pd.Series, period: int) -> pd.Series:
    """
    Compute Exponential Moving Average seeded with an SMA.

    The first value is the simple average of the first ``period`` inputs;
    every later value applies the multiplier 2 / (period + 1):

        ema_t = (x_t - ema_{t-1}) * k + ema_{t-1}

    Args:
        series: Input values (typically closes)
        period: EMA period

    Returns:
        pd.Series: EMA values indexed from the ``period``-th input onwards.
        Empty when the series is shorter than ``period``.
    """
    if period < 1:
        raise ValueError(f"EMA period must be >= 1, got {period}")

    values = series.reset_index(drop=True).astype(float)
    if len(values) < period:
        return pd.Series(dtype=float)

    seed = values.iloc[:period].mean()
    seeded = pd.concat([pd.Series([seed]), values.iloc[period:]], ignore_index=True)
    ema = seeded.ewm(alpha=2 / (period + 1), adjust=False).mean()
    ema.index = series.index[period - 1:]
    return ema


def latest_ema(series: pd.Series, period: int) -> Optional[float]:
    """Last EMA value, or None when the series is shorter than ``period``."""
    ema = compute_ema(series, period)
    if ema.empty:
        return None
    return float(ema.iloc[-1])


def compute_ema_snapshot(
    closes: pd.Series,
    periods: Iterable[int],
    current_price: Optional[float] = None
) -> EMASnapshot:
    """
    Compute the latest value of each EMA period.

    Periods are independent: a series too short for EMA200 still yields
    EMA9 and EMA21. Unavailable periods carry ``value=None``.

    Args:
        closes: Close prices in chronological order
        periods: EMA periods to compute (kept in the given order)
        current_price: Price compared against each EMA (defaults to last close)

    Returns:
        EMASnapshot with one EMAValue per period
    """
    if current_price is None and len(closes) > 0:
        current_price = float(closes.iloc[-1])

    values = []
    for period in periods:
        value = latest_ema(closes, period)
        if value is None:
            logger.debug("EMA%d unavailable: only %d closes", period, len(closes))
            values.append(EMAValue(period=period, value=None, price_above=None))
        else:
            values.append(EMAValue(period=period, value=value, price_above=current_price >= value))

    return EMASnapshot(values=tuple(values))
