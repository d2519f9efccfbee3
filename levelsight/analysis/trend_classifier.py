"""Trend Classifier

Turns the EMA family into a discrete trend state: direction, EMA alignment,
strength and trading bias.

Missing EMAs (series shorter than the period) are excluded from the
above/below counts, but the stack checks and the 200 EMA comparisons read
them as 0.0. On a short series that makes ``price > EMA200`` trivially
true, so young instruments lean towards the uptrend branches.
"""

from typing import Tuple

import logging

from levelsight.shared.models.indicators import (
    EMAAlignment,
    EMASnapshot,
    TradingBias,
    TrendDirection,
    TrendState,
)
from levelsight.shared.utils.rounding import round_to_int

logger = logging.getLogger(__name__)

STACK_PERIODS = (9, 21, 65, 100, 200)
LONG_TERM_PERIOD = 200

_STRONG = (TrendDirection.STRONG_UPTREND, TrendDirection.STRONG_DOWNTREND)
_MODERATE = (TrendDirection.UPTREND, TrendDirection.DOWNTREND)
_WEAK = (TrendDirection.WEAK_UPTREND, TrendDirection.WEAK_DOWNTREND)


def _stack_order(ema: EMASnapshot) -> Tuple[bool, bool]:
    """(bullish_stack, bearish_stack) over sentinel values, short to long."""
    values = [ema.sentinel(p) for p in STACK_PERIODS]
    pairs = list(zip(values, values[1:]))
    bullish = all(shorter >= longer for shorter, longer in pairs)
    bearish = all(shorter <= longer for shorter, longer in pairs)
    return bullish, bearish


def classify_alignment(above_count: int, total: int, bullish_stack: bool, bearish_stack: bool) -> EMAAlignment:
    if bullish_stack and above_count == total:
        return EMAAlignment.PERFECTLY_BULLISH
    if above_count >= total * 0.8:
        return EMAAlignment.MOSTLY_BULLISH
    if bearish_stack and above_count == 0:
        return EMAAlignment.PERFECTLY_BEARISH
    if above_count <= total * 0.2:
        return EMAAlignment.MOSTLY_BEARISH
    return EMAAlignment.MIXED


def trend_strength(direction: TrendDirection, above_ratio: float) -> int:
    """Strength 0-100 for a direction given the share of EMAs price is above."""
    if direction in _STRONG:
        strength = 85 + above_ratio * 15
    elif direction in _MODERATE:
        strength = 60 + above_ratio * 20
    elif direction in _WEAK:
        strength = 40 + above_ratio * 10
    else:
        strength = 30 + abs(above_ratio - 0.5) * 20
    return min(100, max(0, round_to_int(strength)))


def classify_trend(current_price: float, ema: EMASnapshot) -> TrendState:
    """
    Classify the trend from the EMA snapshot.

    Args:
        current_price: Last close
        ema: EMA snapshot (periods 9/21/65/100/200)

    Returns:
        TrendState; the first matching branch of the direction ladder wins
    """
    available = ema.available()
    total = len(available)
    above_count = sum(1 for e in available if current_price >= e.value)
    above_ratio = above_count / total if total else 0.0

    bullish_stack, bearish_stack = _stack_order(ema)
    ema200 = ema.sentinel(LONG_TERM_PERIOD)

    alignment = classify_alignment(above_count, total, bullish_stack, bearish_stack)

    if bullish_stack and above_count == total:
        direction = TrendDirection.STRONG_UPTREND
        bias = TradingBias.LONG
        reason = "Price above all EMAs with perfect bullish alignment"
    elif above_ratio >= 0.8 and current_price > ema200:
        direction = TrendDirection.UPTREND
        bias = TradingBias.LONG
        reason = "Price above most EMAs and above 200 EMA"
    elif current_price > ema200 and above_ratio < 0.6:
        direction = TrendDirection.WEAK_UPTREND
        bias = TradingBias.NEUTRAL
        reason = "Price above 200 EMA but below shorter-term EMAs"
    elif bearish_stack and above_count == 0:
        direction = TrendDirection.STRONG_DOWNTREND
        bias = TradingBias.SHORT
        reason = "Price below all EMAs with perfect bearish alignment"
    elif above_ratio <= 0.2 and current_price < ema200:
        direction = TrendDirection.DOWNTREND
        bias = TradingBias.SHORT
        reason = "Price below most EMAs and below 200 EMA"
    elif current_price < ema200 and above_ratio > 0.4:
        direction = TrendDirection.WEAK_DOWNTREND
        bias = TradingBias.NEUTRAL
        reason = "Price below 200 EMA but above some shorter-term EMAs"
    else:
        direction = TrendDirection.RANGING
        bias = TradingBias.NEUTRAL
        reason = "EMAs intertwined, no clear trend direction"

    strength = trend_strength(direction, above_ratio)
    logger.debug(
        "Trend: %s (%d) alignment=%s above=%d/%d",
        direction.value, strength, alignment.value, above_count, total
    )

    return TrendState(
        direction=direction,
        ema_alignment=alignment,
        strength=strength,
        trading_bias=bias,
        bias_reason=reason,
    )
