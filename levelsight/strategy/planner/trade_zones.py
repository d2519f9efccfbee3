"""
Trade Zone Planner

Derives the numeric framing of a trade idea from the scored levels:
- Entry: the best-scored level on the entry side (support for longs,
  resistance for shorts) and its zone
- Target: the best-scored level on the opposite side
- Stop: entry offset by a multiple of ATR, away from the target

When either side has no level the zones fall back to fixed percentages
around current price.
"""

import logging

from levelsight.shared.config.defaults import AnalysisConfig, DEFAULT_ANALYSIS_CONFIG
from levelsight.shared.models.indicators import TechnicalIndicators
from levelsight.shared.models.planner import EntryZone, TradeDirection, TradeZones
from levelsight.shared.models.scoring import ScoredAnalysis
from levelsight.shared.utils.rounding import round_half_up

logger = logging.getLogger(__name__)


def risk_reward(entry: float, target: float, stop: float) -> float:
    """Reward-to-risk ratio to two decimals; 0 when the stop sits on the entry."""
    risk = abs(entry - stop)
    if risk == 0:
        return 0.0
    return round_half_up(abs(target - entry) / risk, 2)


def _fallback_zones(direction: TradeDirection, price: float, config: AnalysisConfig) -> TradeZones:
    cfg = config.trade_zones
    is_long = direction is TradeDirection.LONG
    zone_pct = cfg.fallback_zone_percent / 100
    target_pct = cfg.fallback_target_percent / 100
    stop_pct = cfg.fallback_stop_percent / 100

    return TradeZones(
        direction=direction,
        entry_zone=EntryZone(low=price * (1 - zone_pct), high=price * (1 + zone_pct)),
        entry_price=price,
        target=price * (1 + target_pct) if is_long else price * (1 - target_pct),
        stop=price * (1 - stop_pct) if is_long else price * (1 + stop_pct),
        risk_reward_ratio=cfg.fallback_risk_reward,
        from_levels=False,
    )


def plan_trade_zones(
    direction: TradeDirection,
    indicators: TechnicalIndicators,
    analysis: ScoredAnalysis,
    config: AnalysisConfig = DEFAULT_ANALYSIS_CONFIG
) -> TradeZones:
    """
    Entry zone, target, stop and R:R for one direction.

    Args:
        direction: Long or short
        indicators: Indicator bundle (current price, ATR)
        analysis: Scored levels; per-side lists are score-descending
        config: Stop ATR multiple and fallback percentages

    Returns:
        TradeZones, with ``from_levels=False`` when the fallback was used
    """
    is_long = direction is TradeDirection.LONG
    entry_levels = analysis.support_levels if is_long else analysis.resistance_levels
    target_levels = analysis.resistance_levels if is_long else analysis.support_levels

    if not entry_levels or not target_levels:
        logger.debug(
            "No %s level pair for %s, using percent fallback",
            direction.value, indicators.symbol,
        )
        return _fallback_zones(direction, indicators.current_price, config)

    entry = entry_levels[0]
    target = target_levels[0]
    stop_distance = indicators.atr.atr * config.trade_zones.stop_atr_multiple
    stop = entry.price - stop_distance if is_long else entry.price + stop_distance

    return TradeZones(
        direction=direction,
        entry_zone=EntryZone(low=entry.zone.low, high=entry.zone.high),
        entry_price=entry.price,
        target=target.price,
        stop=stop,
        risk_reward_ratio=risk_reward(entry.price, target.price, stop),
        from_levels=True,
    )
