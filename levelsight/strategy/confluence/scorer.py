"""
Confluence Scorer Module

Scores a single price level against six independent factors and sums the
raw points (no normalisation, each factor capped on its own):

1. Historical touches: touch count of swings near the price
2. Fibonacci alignment: closest retracement level within tolerance
3. EMA proximity: any available EMA within tolerance
4. Volume node: price near or inside a high-volume node
5. Round number: price near a psychologically round value
6. Recent relevance: a nearby swing was formed recently

"Near" always means within the tolerance band, measured relative to the
scored price: |price - other| / price <= tolerance.
"""

from typing import Optional, Tuple

import logging

from levelsight.shared.config.defaults import AnalysisConfig, DEFAULT_ANALYSIS_CONFIG
from levelsight.shared.models.indicators import TechnicalIndicators
from levelsight.shared.models.scoring import (
    ConfluenceFactors,
    EMAProximityFactor,
    FibonacciFactor,
    HistoricalTouchesFactor,
    LevelSide,
    RecentRelevanceFactor,
    RoundNumberFactor,
    VolumeNodeFactor,
)
from levelsight.shared.utils.rounding import round_half_up

logger = logging.getLogger(__name__)


def is_within_tolerance(price1: float, price2: float, tolerance: float) -> bool:
    """True when price2 lies within ``tolerance`` (fraction) of price1."""
    return abs(price1 - price2) / price1 <= tolerance


def find_nearest_round_number(
    price: float,
    config: AnalysisConfig = DEFAULT_ANALYSIS_CONFIG
) -> Optional[float]:
    """
    Nearest round number within tolerance of ``price``.

    Divisors are tried from most to least significant; the first one whose
    nearest multiple (ties rounding up) is within tolerance wins.
    """
    for divisor in config.round_number_divisors:
        rounded = round_half_up(price / divisor) * divisor
        if is_within_tolerance(price, rounded, config.tolerance_fraction):
            return rounded
    return None


def _score_touches(
    price: float,
    indicators: TechnicalIndicators,
    config: AnalysisConfig
) -> Tuple[HistoricalTouchesFactor, bool]:
    weights = config.weights.historical_touches
    max_touches = 0
    is_recent = False
    for swing in indicators.swing_points:
        if is_within_tolerance(price, swing.price, config.tolerance_fraction):
            max_touches = max(max_touches, swing.touches)
            is_recent = is_recent or swing.is_recent

    points = min(max_touches * weights.per_touch, weights.max_points)
    return HistoricalTouchesFactor(count=max_touches, points=points), is_recent


def _score_fibonacci(price: float, indicators: TechnicalIndicators, config: AnalysisConfig) -> FibonacciFactor:
    if not indicators.fibonacci:
        return FibonacciFactor()

    best = None
    min_distance = float('inf')
    for fib in indicators.fibonacci.levels:
        distance = abs(price - fib.price) / price
        # Strict < keeps the first level on equal distances
        if distance <= config.tolerance_fraction and distance < min_distance:
            min_distance = distance
            best = fib

    if best is None:
        return FibonacciFactor()
    points = min(best.weight, config.weights.fibonacci_max_points)
    return FibonacciFactor(level=best.label, distance=min_distance, points=points)


def _score_ema(price: float, indicators: TechnicalIndicators, config: AnalysisConfig) -> EMAProximityFactor:
    closest = None
    min_distance = float('inf')
    for ema in indicators.ema.available():
        distance = abs(price - ema.value) / price
        if distance <= config.tolerance_fraction and distance < min_distance:
            min_distance = distance
            closest = ema

    if closest is None:
        return EMAProximityFactor()
    return EMAProximityFactor(
        ema=str(closest.period),
        distance=min_distance,
        points=config.weights.ema_proximity_points,
    )


def _score_volume(price: float, indicators: TechnicalIndicators, config: AnalysisConfig) -> VolumeNodeFactor:
    for node in indicators.volume_profile.high_volume_nodes:
        if is_within_tolerance(price, node.price_mid, config.tolerance_fraction) or node.contains(price):
            return VolumeNodeFactor(
                is_high_volume=True,
                volume_percent=node.volume_percent,
                points=config.weights.volume_node_points,
            )
    return VolumeNodeFactor()


def _score_round_number(price: float, config: AnalysisConfig) -> RoundNumberFactor:
    nearest = find_nearest_round_number(price, config)
    if nearest is None:
        return RoundNumberFactor()
    return RoundNumberFactor(
        is_round=True,
        nearest_round=nearest,
        points=config.weights.round_number_points,
    )


def score_level(
    price: float,
    indicators: TechnicalIndicators,
    config: AnalysisConfig = DEFAULT_ANALYSIS_CONFIG
) -> Tuple[int, ConfluenceFactors]:
    """
    Score one price against the six confluence factors.

    Args:
        price: Level price (positive)
        indicators: Indicator bundle providing swings, Fibonacci, EMAs, volume nodes
        config: Tolerance and factor weights

    Returns:
        (total score, factor breakdown)
    """
    touches, is_recent = _score_touches(price, indicators, config)
    recent = (
        RecentRelevanceFactor(is_recent=True, points=config.weights.recent_relevance_points)
        if is_recent else RecentRelevanceFactor()
    )

    factors = ConfluenceFactors(
        historical_touches=touches,
        fibonacci_alignment=_score_fibonacci(price, indicators, config),
        ema_proximity=_score_ema(price, indicators, config),
        volume_node=_score_volume(price, indicators, config),
        round_number=_score_round_number(price, config),
        recent_relevance=recent,
    )
    score = factors.total_points
    logger.debug("Level %.4f scored %d", price, score)
    return score, factors


def _format_round(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:g}"


def build_description(factors: ConfluenceFactors, side: LevelSide) -> str:
    """
    Join the contributing factors into a one-line description, e.g.
    "Support: 4 historical touches + 61.8% Fib + near 21 EMA".
    """
    parts = []

    if factors.historical_touches.count >= 3:
        parts.append(f"{factors.historical_touches.count} historical touches")
    if factors.fibonacci_alignment.level:
        parts.append(f"{factors.fibonacci_alignment.level} Fib")
    if factors.ema_proximity.ema:
        parts.append(f"near {factors.ema_proximity.ema} EMA")
    if factors.volume_node.is_high_volume:
        parts.append("high volume node")
    if factors.round_number.is_round and factors.round_number.nearest_round:
        parts.append(f"${_format_round(factors.round_number.nearest_round)} psychological level")
    if factors.recent_relevance.is_recent:
        parts.append("recently tested")

    if not parts:
        return f"{side.display_name} level"
    return f"{side.display_name}: {' + '.join(parts)}"
