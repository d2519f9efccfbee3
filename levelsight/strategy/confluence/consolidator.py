"""
Level Consolidation

Clusters nearby candidates, scores each cluster at its mean price and
turns the survivors into ScoredLevels with ATR-sized zones.

Clustering is greedy and order dependent: each candidate joins the first
existing group whose anchor (the price that opened the group) is within
tolerance, otherwise it opens a new group. Candidate order therefore
matters; see generate_candidate_levels.
"""

from typing import List

import logging

from levelsight.indicators.volatility import threshold_adjustment
from levelsight.shared.config.defaults import AnalysisConfig, DEFAULT_ANALYSIS_CONFIG
from levelsight.shared.models.indicators import TechnicalIndicators, VolatilityRegime
from levelsight.shared.models.scoring import (
    CandidateLevel,
    LevelSide,
    LevelZone,
    ScoredLevel,
    StrengthTier,
)
from levelsight.shared.utils.rounding import round_to_cents
from levelsight.strategy.confluence.candidates import side_for_price
from levelsight.strategy.confluence.scorer import build_description, is_within_tolerance, score_level

logger = logging.getLogger(__name__)


def get_strength_tier(
    score: int,
    regime: VolatilityRegime,
    config: AnalysisConfig = DEFAULT_ANALYSIS_CONFIG
) -> StrengthTier:
    """Strength tier with every threshold raised by the regime adjustment."""
    adjustment = threshold_adjustment(regime, config)
    if score >= config.strength.strong + adjustment:
        return StrengthTier.STRONG
    if score >= config.strength.medium + adjustment:
        return StrengthTier.MEDIUM
    return StrengthTier.WEAK


def group_candidates(candidates: List[CandidateLevel], tolerance: float) -> List[List[CandidateLevel]]:
    """Greedy anchor-based grouping; groups keep insertion order."""
    groups: List[List[CandidateLevel]] = []
    anchors: List[float] = []
    for candidate in candidates:
        for anchor, group in zip(anchors, groups):
            if is_within_tolerance(candidate.price, anchor, tolerance):
                group.append(candidate)
                break
        else:
            anchors.append(candidate.price)
            groups.append([candidate])
    return groups


def consolidate_levels(
    candidates: List[CandidateLevel],
    indicators: TechnicalIndicators,
    config: AnalysisConfig = DEFAULT_ANALYSIS_CONFIG
) -> List[ScoredLevel]:
    """
    Consolidate candidates into scored levels.

    Per group: mean price, side re-derived from the mean, groups closer to
    price than ``min_level_distance_percent`` dropped, groups scoring below
    the weak floor dropped. IDs are assigned per side in group order.

    Returns:
        Scored levels in group order (both sides mixed)
    """
    current_price = indicators.current_price
    atr = indicators.atr
    zone_half_width = atr.atr * atr.atr_multiplier * config.zone_width_factor

    levels: List[ScoredLevel] = []
    counters = {LevelSide.SUPPORT: 0, LevelSide.RESISTANCE: 0}
    skipped_near = skipped_weak = 0

    for group in group_candidates(candidates, config.tolerance_fraction):
        avg_price = sum(c.price for c in group) / len(group)
        side = side_for_price(avg_price, current_price)

        distance = abs(avg_price - current_price)
        distance_percent = distance / current_price * 100
        if distance_percent < config.min_level_distance_percent:
            skipped_near += 1
            continue

        score, factors = score_level(avg_price, indicators, config)
        if score < config.strength.weak:
            skipped_weak += 1
            continue

        counters[side] += 1
        level_id = f"{side.value[0]}{counters[side]}"

        levels.append(ScoredLevel(
            id=level_id,
            price=round_to_cents(avg_price),
            side=side,
            confluence_score=score,
            strength=get_strength_tier(score, atr.volatility_regime, config),
            factors=factors,
            description=build_description(factors, side),
            zone=LevelZone(
                high=round_to_cents(avg_price + zone_half_width),
                low=round_to_cents(avg_price - zone_half_width),
            ),
            distance_from_price=distance,
            distance_percent=distance_percent,
        ))

    logger.debug(
        "Consolidated %d candidates into %d levels (%d too close, %d too weak)",
        len(candidates), len(levels), skipped_near, skipped_weak,
    )
    return levels
