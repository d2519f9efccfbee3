"""
LevelSight Orchestrator

The pipeline controller that wires together all components for one
instrument and timeframe:
1. Indicator computation
2. Confluence scoring and level consolidation
3. Display selection and overall confidence
4. Technical summary
5. Trade zone framing (long and short)

Produces one immutable AnalysisResult per call; no state is carried
between calls apart from the injected configuration.
"""

import time
from typing import Any, Dict, Optional, Sequence

import logging

from levelsight.analysis.indicator_engine import calculate_all_indicators
from levelsight.analysis.technical_summary import build_technical_summary
from levelsight.shared.config.defaults import AnalysisConfig, DEFAULT_ANALYSIS_CONFIG
from levelsight.shared.models.data import Bar
from levelsight.shared.models.planner import TradeDirection
from levelsight.shared.models.report import AnalysisResult
from levelsight.shared.utils.logging_utils import TimingContext, log_level_summary, log_pipeline_stage
from levelsight.strategy.confluence.level_analysis import score_levels
from levelsight.strategy.planner.trade_zones import plan_trade_zones

logger = logging.getLogger(__name__)


class Orchestrator:
    """
    Main pipeline orchestrator.

    Usage:
        orchestrator = Orchestrator(config)
        result = orchestrator.analyze(bars, "AAPL", "1d")

        if result:
            for level in result.levels.display_levels.support:
                print(f"{level.id}: {level.price} ({level.strength.value})")
    """

    def __init__(self, config: AnalysisConfig = DEFAULT_ANALYSIS_CONFIG):
        """
        Initialize orchestrator.

        Args:
            config: Analysis configuration (validated here)
        """
        config.validate()
        self.config = config
        logger.info(
            "Orchestrator initialized: EMAs=%s | ATR=%d | tolerance=%.2f%%",
            ','.join(str(p) for p in config.ema_periods),
            config.atr_period,
            config.tolerance_band_percent,
        )

    def analyze(self, bars: Sequence[Bar], symbol: str, timeframe: str) -> Optional[AnalysisResult]:
        """
        Run the complete pipeline for one bar series.

        Args:
            bars: Bars in ascending timestamp order
            symbol: Instrument symbol
            timeframe: Bar interval label

        Returns:
            AnalysisResult, or None when there is not enough data for the
            indicator bundle
        """
        start = time.perf_counter()
        log_pipeline_stage("INDICATORS", symbol, "START", level="DEBUG")

        with TimingContext("calculate_all_indicators", symbol):
            indicators = calculate_all_indicators(bars, symbol, timeframe, self.config)

        if indicators is None:
            log_pipeline_stage(
                "INDICATORS", symbol, "FAILED",
                data={"reason": f"insufficient data ({len(bars)} bars)"},
                level="WARNING",
            )
            return None

        log_pipeline_stage("CONFLUENCE", symbol, "START", level="DEBUG")
        with TimingContext("score_levels", symbol):
            levels = score_levels(indicators, self.config)

        summary = build_technical_summary(indicators, self.config.medium_ema_period)
        long_zones = plan_trade_zones(TradeDirection.LONG, indicators, levels, self.config)
        short_zones = plan_trade_zones(TradeDirection.SHORT, indicators, levels, self.config)

        result = AnalysisResult(
            indicators=indicators,
            levels=levels,
            summary=summary,
            long_zones=long_zones,
            short_zones=short_zones,
        )

        log_level_summary(
            symbol,
            [level.price for level in levels.display_levels.support],
            [level.price for level in levels.display_levels.resistance],
            levels.confidence.overall,
        )
        log_pipeline_stage("ANALYSIS", symbol, "COMPLETE", data={
            "duration_ms": (time.perf_counter() - start) * 1000,
            "bars": indicators.data_points,
            "trend": indicators.trend.direction.value,
            "confidence": f"{levels.confidence.overall} ({levels.confidence.label.value})",
        })
        return result

    def update_configuration(self, config: AnalysisConfig) -> None:
        """
        Replace the analysis configuration.

        Args:
            config: New configuration (validated before use)
        """
        config.validate()
        self.config = config
        logger.info("Configuration updated")

    def get_pipeline_status(self) -> Dict[str, Any]:
        """Current configuration snapshot for diagnostics."""
        return {"config": self.config.to_dict()}
