"""
Confluence scoring models.

This module defines the data structures for level confluence scoring:
raw candidate levels, the six factor records attached to every scored
level, the consolidated ScoredLevel itself and the overall confidence
score that summarises the analysis.
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class LevelSide(str, Enum):
    SUPPORT = "support"
    RESISTANCE = "resistance"

    @property
    def display_name(self) -> str:
        return "Support" if self is LevelSide.SUPPORT else "Resistance"


class StrengthTier(str, Enum):
    STRONG = "strong"
    MEDIUM = "medium"
    WEAK = "weak"


class ConfidenceLabel(str, Enum):
    HIGH = "high"
    MODERATE = "moderate"
    LOW = "low"
    VERY_LOW = "very_low"


class CandidateSource(str, Enum):
    SWING = "swing"
    FIB = "fib"
    EMA = "ema"
    VOLUME = "volume"


@dataclass(frozen=True)
class CandidateLevel:
    """
    Raw price level pooled from one indicator before consolidation.

    Attributes:
        price: Candidate price
        side: Support when below current price, resistance otherwise
              (swing highs are always resistance, swing lows always support)
        source: Which indicator produced the candidate
        touches: Swing touch count (swing candidates only)
        is_recent: Swing recency flag (swing candidates only)
    """
    price: float
    side: LevelSide
    source: CandidateSource
    touches: Optional[int] = None
    is_recent: Optional[bool] = None


@dataclass(frozen=True)
class HistoricalTouchesFactor:
    count: int = 0
    points: int = 0


@dataclass(frozen=True)
class FibonacciFactor:
    level: Optional[str] = None
    distance: float = 0.0
    points: int = 0


@dataclass(frozen=True)
class EMAProximityFactor:
    ema: Optional[str] = None
    distance: float = 0.0
    points: int = 0


@dataclass(frozen=True)
class VolumeNodeFactor:
    is_high_volume: bool = False
    volume_percent: float = 0.0
    points: int = 0


@dataclass(frozen=True)
class RoundNumberFactor:
    is_round: bool = False
    nearest_round: Optional[float] = None
    points: int = 0


@dataclass(frozen=True)
class RecentRelevanceFactor:
    is_recent: bool = False
    points: int = 0


@dataclass(frozen=True)
class ConfluenceFactors:
    """
    The six independent factor records behind a level's confluence score.

    Each record carries its own ``points``; the confluence score is their
    plain sum (no normalisation).
    """
    historical_touches: HistoricalTouchesFactor = field(default_factory=HistoricalTouchesFactor)
    fibonacci_alignment: FibonacciFactor = field(default_factory=FibonacciFactor)
    ema_proximity: EMAProximityFactor = field(default_factory=EMAProximityFactor)
    volume_node: VolumeNodeFactor = field(default_factory=VolumeNodeFactor)
    round_number: RoundNumberFactor = field(default_factory=RoundNumberFactor)
    recent_relevance: RecentRelevanceFactor = field(default_factory=RecentRelevanceFactor)

    @property
    def total_points(self) -> int:
        return (
            self.historical_touches.points
            + self.fibonacci_alignment.points
            + self.ema_proximity.points
            + self.volume_node.points
            + self.round_number.points
            + self.recent_relevance.points
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class LevelZone:
    """Symmetric band around a level price."""
    high: float
    low: float

    def contains(self, price: float) -> bool:
        return self.low <= price <= self.high

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ScoredLevel:
    """
    Consolidated, scored support or resistance level.

    Attributes:
        id: Display id, 's1', 's2', ... / 'r1', 'r2', ...
        price: Mean price of the consolidated group, rounded to cents
        side: Support or resistance relative to current price
        confluence_score: Sum of factor points
        strength: Tier from volatility-adjusted thresholds
        factors: Factor breakdown
        description: Human-readable summary of the contributing factors
        zone: ATR-sized band around the price, rounded to cents
        distance_from_price: |mean price - current price| (unrounded)
        distance_percent: distance_from_price as a percentage of current price
    """
    id: str
    price: float
    side: LevelSide
    confluence_score: int
    strength: StrengthTier
    factors: ConfluenceFactors
    description: str
    zone: LevelZone
    distance_from_price: float
    distance_percent: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "price": self.price,
            "type": self.side.value,
            "confluence_score": self.confluence_score,
            "strength": self.strength.value,
            "factors": self.factors.to_dict(),
            "description": self.description,
            "zone": self.zone.to_dict(),
            "distance_from_price": self.distance_from_price,
            "distance_percent": self.distance_percent,
        }


@dataclass(frozen=True)
class ConfidenceAdjustment:
    """Single applied confidence rule: name, signed impact and reason."""
    name: str
    impact: int
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ConfidenceScoring:
    """
    Overall analysis confidence.

    Attributes:
        overall: Clamped score 30-100
        label: high / moderate / low / very_low
        factors: Applied adjustments in evaluation order
    """
    overall: int
    label: ConfidenceLabel
    factors: Tuple[ConfidenceAdjustment, ...]

    def __post_init__(self):
        if not 0 <= self.overall <= 100:
            raise ValueError(f"Confidence must be 0-100, got {self.overall}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overall": self.overall,
            "label": self.label.value,
            "factors": [f.to_dict() for f in self.factors],
        }


@dataclass(frozen=True)
class DisplayLevels:
    """Spacing-constrained selection of levels per side, nearest first."""
    support: Tuple[ScoredLevel, ...]
    resistance: Tuple[ScoredLevel, ...]

    @property
    def all_levels(self) -> List[ScoredLevel]:
        return list(self.support) + list(self.resistance)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "support": [level.to_dict() for level in self.support],
            "resistance": [level.to_dict() for level in self.resistance],
        }


@dataclass(frozen=True)
class ScoredAnalysis:
    """
    Complete level scoring output.

    Attributes:
        support_levels: Every surviving support level, score-descending
        resistance_levels: Every surviving resistance level, score-descending
        display_levels: Default selection (two per side)
        expanded_levels: "Show more" selection (three per side)
        confidence: Overall confidence scoring
    """
    support_levels: Tuple[ScoredLevel, ...]
    resistance_levels: Tuple[ScoredLevel, ...]
    display_levels: DisplayLevels
    expanded_levels: DisplayLevels
    confidence: ConfidenceScoring

    def to_dict(self) -> Dict[str, Any]:
        return {
            "support_levels": [level.to_dict() for level in self.support_levels],
            "resistance_levels": [level.to_dict() for level in self.resistance_levels],
            "display_levels": self.display_levels.to_dict(),
            "expanded_levels": self.expanded_levels.to_dict(),
            "confidence": self.confidence.to_dict(),
        }
