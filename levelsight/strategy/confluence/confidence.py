"""
Overall Confidence Scoring

Starts from a base score and applies fixed bonuses and penalties:

    + Clear Trend         trend is not ranging
    + Strong Levels       strong support AND strong resistance exist
    + Not Overextended    price within normal range of the medium EMA
    - Bollinger Squeeze   volatility compressed, breakout pending
    - Conflicting Signals bias points into a nearby strong level
    - Limited Data        fewer bars than recommended

The total is rounded, clamped to [min_score, max_score] and labelled.
"""

from typing import List, Sequence

import logging

from levelsight.shared.config.defaults import AnalysisConfig, DEFAULT_ANALYSIS_CONFIG
from levelsight.shared.models.indicators import (
    BollingerState,
    ExtensionStatus,
    TradingBias,
    TrendDirection,
    TrendState,
)
from levelsight.shared.models.scoring import (
    ConfidenceAdjustment,
    ConfidenceLabel,
    ConfidenceScoring,
    ScoredLevel,
    StrengthTier,
)
from levelsight.shared.utils.rounding import round_to_int

logger = logging.getLogger(__name__)


def confidence_label(score: int, config: AnalysisConfig = DEFAULT_ANALYSIS_CONFIG) -> ConfidenceLabel:
    bands = config.confidence
    if score >= bands.high_label:
        return ConfidenceLabel.HIGH
    if score >= bands.moderate_label:
        return ConfidenceLabel.MODERATE
    if score >= bands.low_label:
        return ConfidenceLabel.LOW
    return ConfidenceLabel.VERY_LOW


def _has_strong(levels: Sequence[ScoredLevel]) -> bool:
    return any(level.strength is StrengthTier.STRONG for level in levels)


def _strong_within(levels: Sequence[ScoredLevel], percent: float) -> bool:
    return any(
        level.strength is StrengthTier.STRONG and level.distance_percent < percent
        for level in levels
    )


def calculate_overall_confidence(
    trend: TrendState,
    support_levels: Sequence[ScoredLevel],
    resistance_levels: Sequence[ScoredLevel],
    bollinger: BollingerState,
    overextension_status: ExtensionStatus,
    data_points: int,
    config: AnalysisConfig = DEFAULT_ANALYSIS_CONFIG
) -> ConfidenceScoring:
    """
    Combine trend, level strength, squeeze, conflict and data sufficiency
    into one confidence score.

    Args:
        trend: Trend classification
        support_levels: All consolidated support levels
        resistance_levels: All consolidated resistance levels
        bollinger: Bollinger reading (squeeze flag)
        overextension_status: Overextension tier
        data_points: Number of bars analysed
        config: Bonus/penalty values, clamp range and label bands

    Returns:
        ConfidenceScoring with the applied adjustments in evaluation order
    """
    cfg = config.confidence
    score = cfg.base_score
    applied: List[ConfidenceAdjustment] = []

    def apply(name: str, impact: int, reason: str) -> None:
        nonlocal score
        score += impact
        applied.append(ConfidenceAdjustment(name=name, impact=impact, reason=reason))

    if trend.direction is not TrendDirection.RANGING:
        apply("Clear Trend", cfg.clear_trend, f"{trend.direction.value} detected")

    if _has_strong(support_levels) and _has_strong(resistance_levels):
        apply("Strong Levels", cfg.strong_levels, "Both strong support and resistance identified")

    if overextension_status is ExtensionStatus.NORMAL:
        apply(
            "Not Overextended",
            cfg.not_overextended,
            f"Price within normal range of {config.medium_ema_period} EMA",
        )

    if bollinger.is_squeeze:
        apply(
            "Bollinger Squeeze",
            cfg.bollinger_squeeze,
            "Low volatility squeeze detected - breakout pending",
        )

    near_resistance = _strong_within(resistance_levels, cfg.conflict_distance_percent)
    near_support = _strong_within(support_levels, cfg.conflict_distance_percent)
    if trend.trading_bias is TradingBias.LONG and near_resistance:
        apply(
            "Conflicting Signals",
            cfg.conflicting_signals,
            "Bullish trend but approaching strong resistance",
        )
    elif trend.trading_bias is TradingBias.SHORT and near_support:
        apply(
            "Conflicting Signals",
            cfg.conflicting_signals,
            "Bearish trend but approaching strong support",
        )

    if data_points < cfg.min_data_points:
        apply(
            "Limited Data",
            cfg.insufficient_data,
            f"Only {data_points} data points (recommend {cfg.min_data_points}+)",
        )

    overall = max(cfg.min_score, min(cfg.max_score, round_to_int(score)))
    label = confidence_label(overall, config)
    logger.debug("Confidence %d (%s) from %d adjustments", overall, label.value, len(applied))

    return ConfidenceScoring(overall=overall, label=label, factors=tuple(applied))
