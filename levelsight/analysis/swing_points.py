"""
Swing Point Detection

Finds local highs and lows confirmed by a symmetric window of bars and
rates them by how often price has revisited them:

- Swing high: high strictly above every high within ``window`` bars on both sides
- Swing low: low strictly below every low within ``window`` bars on both sides
- Touches: bars whose high or low came within the tolerance band of the swing
- Recent: pivot sits in the last 20% of the series

The window depends on the timeframe (3 intraday, 5 daily, 8 weekly).
"""

from typing import List, Optional, Tuple

import numpy as np
import pandas as pd
from loguru import logger

from levelsight.shared.config.defaults import AnalysisConfig, DEFAULT_ANALYSIS_CONFIG
from levelsight.shared.config.timeframes import get_swing_bars
from levelsight.shared.models.indicators import SwingPoint, SwingType


def _find_pivots(highs: np.ndarray, lows: np.ndarray, window: int) -> List[Tuple[int, SwingType]]:
    """(index, type) for every pivot in bar order; a high precedes a low on the same bar."""
    pivots = []
    n = len(highs)
    for i in range(window, n - window):
        left = slice(i - window, i)
        right = slice(i + 1, i + window + 1)

        if highs[i] > highs[left].max() and highs[i] > highs[right].max():
            pivots.append((i, SwingType.HIGH))
        if lows[i] < lows[left].min() and lows[i] < lows[right].min():
            pivots.append((i, SwingType.LOW))
    return pivots


def count_touches(
    price: float,
    highs: np.ndarray,
    lows: np.ndarray,
    dates: List[str],
    tolerance: float,
) -> Tuple[int, Optional[str]]:
    """
    Count bars that came within ``tolerance`` (fraction) of ``price``.

    A bar counts once even when both its high and its low are in the band.

    Returns:
        (touches, date of the last touching bar or None)
    """
    near_high = np.abs(highs - price) / price <= tolerance
    near_low = np.abs(lows - price) / price <= tolerance
    touching = np.flatnonzero(near_high | near_low)
    if touching.size == 0:
        return 0, None
    return int(touching.size), dates[int(touching[-1])]


def detect_swing_points(
    df: pd.DataFrame,
    timeframe: str,
    config: AnalysisConfig = DEFAULT_ANALYSIS_CONFIG,
) -> List[SwingPoint]:
    """
    Detect swing highs and lows with touch counts.

    Args:
        df: DataFrame with 'date', 'high', 'low' columns
        timeframe: Bar interval label, selects the confirmation window
        config: Tolerance band and per-category windows

    Returns:
        Swing points, recent ones first, then by touches (descending);
        ties keep bar order.
    """
    window = get_swing_bars(timeframe, config)
    n = len(df)
    if n < 2 * window + 1:
        logger.debug(f"Not enough bars for swing detection: {n} < {2 * window + 1}")
        return []

    highs = df['high'].to_numpy(dtype=float)
    lows = df['low'].to_numpy(dtype=float)
    dates = [str(d) for d in df['date']]
    recent_threshold = int(n * (1 - config.weights.recent_fraction))  # floor; last 20% by default
    tolerance = config.tolerance_fraction

    swings = []
    for index, swing_type in _find_pivots(highs, lows, window):
        price = float(highs[index] if swing_type is SwingType.HIGH else lows[index])
        touches, last_touch = count_touches(price, highs, lows, dates, tolerance)
        swings.append(SwingPoint(
            price=price,
            type=swing_type,
            date=dates[index],
            index=index,
            touches=touches,
            last_touch_date=last_touch,
            is_recent=index >= recent_threshold,
        ))

    # sort() is stable, so equal keys stay in bar order
    swings.sort(key=lambda s: (not s.is_recent, -s.touches))

    logger.debug(
        f"Detected {len(swings)} swing points (window={window}, "
        f"recent={sum(1 for s in swings if s.is_recent)})"
    )
    return swings
