"""
Candidate Level Generation

Pools raw support/resistance prices from four indicator sources into one
flat list, in a fixed order: swing points, Fibonacci levels, EMAs, then
high-volume node midpoints. Consolidation depends on this order.
"""

from typing import List

from levelsight.shared.models.indicators import SwingType, TechnicalIndicators
from levelsight.shared.models.scoring import CandidateLevel, CandidateSource, LevelSide


def side_for_price(price: float, current_price: float) -> LevelSide:
    """Support strictly below current price, resistance at or above it."""
    return LevelSide.SUPPORT if price < current_price else LevelSide.RESISTANCE


def generate_candidate_levels(indicators: TechnicalIndicators) -> List[CandidateLevel]:
    """
    Build the candidate pool for an indicator bundle.

    Swing highs are always resistance and swing lows always support; every
    other source takes its side from the current price.
    """
    current_price = indicators.current_price
    candidates: List[CandidateLevel] = []

    for swing in indicators.swing_points:
        candidates.append(CandidateLevel(
            price=swing.price,
            side=LevelSide.RESISTANCE if swing.type is SwingType.HIGH else LevelSide.SUPPORT,
            source=CandidateSource.SWING,
            touches=swing.touches,
            is_recent=swing.is_recent,
        ))

    if indicators.fibonacci:
        for fib in indicators.fibonacci.levels:
            candidates.append(CandidateLevel(
                price=fib.price,
                side=side_for_price(fib.price, current_price),
                source=CandidateSource.FIB,
            ))

    for ema in indicators.ema.available():
        candidates.append(CandidateLevel(
            price=ema.value,
            side=side_for_price(ema.value, current_price),
            source=CandidateSource.EMA,
        ))

    for node in indicators.volume_profile.high_volume_nodes:
        candidates.append(CandidateLevel(
            price=node.price_mid,
            side=side_for_price(node.price_mid, current_price),
            source=CandidateSource.VOLUME,
        ))

    return candidates
