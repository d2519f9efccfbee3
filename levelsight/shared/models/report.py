"""
Analysis report models.

The technical summary rows shown next to the levels, and AnalysisResult,
the single value returned by the orchestrator for one run.
"""

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Tuple

from levelsight.shared.models.indicators import TechnicalIndicators
from levelsight.shared.models.planner import TradeZones
from levelsight.shared.models.scoring import ScoredAnalysis


class SummaryStatus(str, Enum):
    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"
    WARNING = "warning"


@dataclass(frozen=True)
class SummaryRow:
    """
    One line of the technical summary.

    Attributes:
        indicator: Indicator name ("Trend", "EMA Alignment", ...)
        value: Formatted reading
        status: Colour-coding hint for the reading
        status_label: Short explanation of the status
    """
    indicator: str
    value: str
    status: SummaryStatus
    status_label: str

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        return data


@dataclass(frozen=True)
class TechnicalSummary:
    rows: Tuple[SummaryRow, ...]
    overextension_description: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rows": [row.to_dict() for row in self.rows],
            "overextension_description": self.overextension_description,
        }


@dataclass(frozen=True)
class AnalysisResult:
    """
    Everything one analysis run produces.

    Attributes:
        indicators: Indicator bundle
        levels: Scored levels, display selections and confidence
        summary: Technical summary rows and overextension description
        long_zones: Long entry/target/stop framing
        short_zones: Short entry/target/stop framing
    """
    indicators: TechnicalIndicators
    levels: ScoredAnalysis
    summary: TechnicalSummary
    long_zones: TradeZones
    short_zones: TradeZones

    @property
    def symbol(self) -> str:
        return self.indicators.symbol

    def to_dict(self) -> Dict[str, Any]:
        return {
            "symbol": self.indicators.symbol,
            "timeframe": self.indicators.timeframe,
            "indicators": self.indicators.to_dict(),
            "levels": self.levels.to_dict(),
            "summary": self.summary.to_dict(),
            "trade_zones": {
                "long": self.long_zones.to_dict(),
                "short": self.short_zones.to_dict(),
            },
        }
