"""
Level Analysis

Runs the confluence stages end to end for one indicator bundle:
candidates -> scored & consolidated levels -> display selection ->
overall confidence.
"""

from typing import Optional

import logging

from levelsight.shared.config.defaults import AnalysisConfig, DEFAULT_ANALYSIS_CONFIG
from levelsight.shared.models.indicators import TechnicalIndicators
from levelsight.shared.models.scoring import DisplayLevels, LevelSide, ScoredAnalysis
from levelsight.strategy.confluence.candidates import generate_candidate_levels
from levelsight.strategy.confluence.confidence import calculate_overall_confidence
from levelsight.strategy.confluence.consolidator import consolidate_levels
from levelsight.strategy.confluence.display import select_both_sides

logger = logging.getLogger(__name__)


def score_levels(
    indicators: TechnicalIndicators,
    config: AnalysisConfig = DEFAULT_ANALYSIS_CONFIG
) -> ScoredAnalysis:
    """
    Score support/resistance levels for an indicator bundle.

    Returns:
        ScoredAnalysis with per-side levels (score-descending), the default
        and expanded display selections and the overall confidence
    """
    candidates = generate_candidate_levels(indicators)
    levels = consolidate_levels(candidates, indicators, config)

    def by_score(side: LevelSide):
        # sorted() is stable: equal scores keep consolidation order
        return tuple(sorted(
            (level for level in levels if level.side is side),
            key=lambda level: level.confluence_score,
            reverse=True,
        ))

    support = by_score(LevelSide.SUPPORT)
    resistance = by_score(LevelSide.RESISTANCE)
    price = indicators.current_price

    display = select_both_sides(support, resistance, config.default_levels_per_side, price, config)
    expanded = select_both_sides(support, resistance, config.expanded_levels_per_side, price, config)

    confidence = calculate_overall_confidence(
        indicators.trend,
        support,
        resistance,
        indicators.bollinger,
        indicators.overextension.status,
        indicators.data_points,
        config,
    )

    logger.info(
        "%s: %d candidates -> %d support / %d resistance levels, confidence %d",
        indicators.symbol, len(candidates), len(support), len(resistance), confidence.overall,
    )

    return ScoredAnalysis(
        support_levels=support,
        resistance_levels=resistance,
        display_levels=display,
        expanded_levels=expanded,
        confidence=confidence,
    )


def get_expanded_levels(
    analysis: ScoredAnalysis,
    current_price: float,
    config: AnalysisConfig = DEFAULT_ANALYSIS_CONFIG,
    per_side: Optional[int] = None
) -> DisplayLevels:
    """
    Re-run display selection with the expanded cap ("show more").

    Args:
        analysis: Output of score_levels
        current_price: Price the spacing is measured against
        config: Spacing threshold and expanded cap
        per_side: Override for the per-side cap

    Returns:
        DisplayLevels with up to ``expanded_levels_per_side`` levels per side
    """
    cap = per_side if per_side is not None else config.expanded_levels_per_side
    return select_both_sides(
        analysis.support_levels, analysis.resistance_levels, cap, current_price, config
    )
