"""
Display Level Selection

Picks the levels actually drawn on a chart: best-scored first, skipping
any level crowding one already chosen, then presented nearest-first.
"""

from typing import Iterable, List

from levelsight.shared.config.defaults import AnalysisConfig, DEFAULT_ANALYSIS_CONFIG
from levelsight.shared.models.scoring import DisplayLevels, LevelSide, ScoredLevel


def select_display_levels(
    levels: Iterable[ScoredLevel],
    side: LevelSide,
    max_levels: int,
    current_price: float,
    config: AnalysisConfig = DEFAULT_ANALYSIS_CONFIG
) -> List[ScoredLevel]:
    """
    Select up to ``max_levels`` well-spaced levels for one side.

    Levels are visited by confluence score (highest first, stable). A level
    is rejected when it sits closer than ``min_level_spacing_percent`` of
    current price to any already accepted level.

    Returns:
        Accepted levels sorted by distance from current price (closest first)
    """
    candidates = sorted(
        (level for level in levels if level.side is side),
        key=lambda level: level.confluence_score,
        reverse=True,
    )

    selected: List[ScoredLevel] = []
    for level in candidates:
        if len(selected) >= max_levels:
            break
        crowded = any(
            abs(level.price - existing.price) / current_price * 100 < config.min_level_spacing_percent
            for existing in selected
        )
        if not crowded:
            selected.append(level)

    selected.sort(key=lambda level: level.distance_from_price)
    return selected


def select_both_sides(
    support_levels: Iterable[ScoredLevel],
    resistance_levels: Iterable[ScoredLevel],
    per_side: int,
    current_price: float,
    config: AnalysisConfig = DEFAULT_ANALYSIS_CONFIG
) -> DisplayLevels:
    return DisplayLevels(
        support=tuple(select_display_levels(support_levels, LevelSide.SUPPORT, per_side, current_price, config)),
        resistance=tuple(select_display_levels(resistance_levels, LevelSide.RESISTANCE, per_side, current_price, config)),
    )
