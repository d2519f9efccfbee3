"""
Technical indicators data models.

This module defines the data structures produced by the indicator engine:
the EMA family, trend state, volatility (ATR / Bollinger), swing points,
Fibonacci retracement, volume profile and overextension, plus the
TechnicalIndicators bundle that carries all of them downstream.
"""

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class TrendDirection(str, Enum):
    STRONG_UPTREND = "strong_uptrend"
    UPTREND = "uptrend"
    WEAK_UPTREND = "weak_uptrend"
    RANGING = "ranging"
    WEAK_DOWNTREND = "weak_downtrend"
    DOWNTREND = "downtrend"
    STRONG_DOWNTREND = "strong_downtrend"


class EMAAlignment(str, Enum):
    PERFECTLY_BULLISH = "perfectly_bullish"
    MOSTLY_BULLISH = "mostly_bullish"
    MIXED = "mixed"
    MOSTLY_BEARISH = "mostly_bearish"
    PERFECTLY_BEARISH = "perfectly_bearish"


class TradingBias(str, Enum):
    LONG = "long"
    NEUTRAL = "neutral"
    SHORT = "short"


class VolatilityRegime(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class BandPosition(str, Enum):
    ABOVE_UPPER = "above_upper"
    UPPER_HALF = "upper_half"
    LOWER_HALF = "lower_half"
    BELOW_LOWER = "below_lower"


class SwingType(str, Enum):
    HIGH = "high"
    LOW = "low"


class SwingDirection(str, Enum):
    UP = "up"
    DOWN = "down"


class ExtensionStatus(str, Enum):
    NORMAL = "normal"
    MODERATELY_EXTENDED = "moderately_extended"
    OVEREXTENDED = "overextended"
    EXTREMELY_EXTENDED = "extremely_extended"


class ExtensionDirection(str, Enum):
    ABOVE = "above"
    BELOW = "below"


class ReversionSignal(str, Enum):
    NONE = "none"
    PULLBACK_EXPECTED = "pullback_expected"
    REVERSAL_CANDIDATE = "reversal_candidate"
    STRONG_REVERSAL = "strong_reversal"


def _enum_dict(obj) -> Dict[str, Any]:
    """asdict() with Enum members flattened to their values."""
    return asdict(obj, dict_factory=lambda items: {
        k: (v.value if isinstance(v, Enum) else v) for k, v in items
    })


@dataclass(frozen=True)
class EMAValue:
    """
    Current reading of one EMA period.

    Attributes:
        period: EMA lookback period
        value: Latest EMA value, None when fewer closes than the period exist
        price_above: True when current price >= value (None when unavailable)
    """
    period: int
    value: Optional[float]
    price_above: Optional[bool]

    @property
    def available(self) -> bool:
        return self.value is not None


@dataclass(frozen=True)
class EMASnapshot:
    """Latest values of every configured EMA period, in period order."""
    values: Tuple[EMAValue, ...]

    def get(self, period: int) -> Optional[EMAValue]:
        for ema in self.values:
            if ema.period == period:
                return ema
        return None

    def value(self, period: int) -> Optional[float]:
        ema = self.get(period)
        return ema.value if ema else None

    def sentinel(self, period: int) -> float:
        """Value or 0.0; only the trend decision ladder reads missing EMAs as zero."""
        value = self.value(period)
        return value if value is not None else 0.0

    def available(self) -> List[EMAValue]:
        """EMAs with a positive value, in period order."""
        return [ema for ema in self.values if ema.value is not None and ema.value > 0]

    def to_dict(self) -> Dict[str, Any]:
        return {
            f"ema_{ema.period}": {"value": ema.value, "price_above": ema.price_above}
            for ema in self.values
        }


@dataclass(frozen=True)
class TrendState:
    """
    Discrete trend classification derived from the EMA stack.

    Attributes:
        direction: Seven-state trend direction
        ema_alignment: How the EMAs are stacked relative to each other and price
        strength: Trend strength 0-100
        trading_bias: Directional bias implied by the trend
        bias_reason: Fixed human-readable explanation of the bias
    """
    direction: TrendDirection
    ema_alignment: EMAAlignment
    strength: int
    trading_bias: TradingBias
    bias_reason: str

    def __post_init__(self):
        if not 0 <= self.strength <= 100:
            raise ValueError(f"Trend strength must be 0-100, got {self.strength}")

    def to_dict(self) -> Dict[str, Any]:
        return _enum_dict(self)


@dataclass(frozen=True)
class ATRState:
    """
    Average True Range reading with its volatility regime.

    Attributes:
        atr: Average True Range (price units, >= 0)
        atr_percent: ATR as percentage of the last close
        volatility_regime: low / medium / high
        atr_multiplier: Zone-width multiplier for the regime
    """
    atr: float
    atr_percent: float
    volatility_regime: VolatilityRegime
    atr_multiplier: float

    def to_dict(self) -> Dict[str, Any]:
        return _enum_dict(self)


@dataclass(frozen=True)
class BollingerState:
    """
    Bollinger Band reading at the last bar.

    Attributes:
        upper: Upper band (middle + k * sigma)
        middle: Middle band (SMA)
        lower: Lower band (middle - k * sigma)
        bandwidth: (upper - lower) / middle
        percent_b: Position of price within the bands (0.5 when bands have zero width)
        is_squeeze: Bandwidth compressed relative to its recent history
        position: Which half of the band price sits in
    """
    upper: float
    middle: float
    lower: float
    bandwidth: float
    percent_b: float
    is_squeeze: bool
    position: BandPosition

    def __post_init__(self):
        if not self.upper >= self.middle >= self.lower:
            raise ValueError(
                f"Bollinger Bands must satisfy: upper ({self.upper}) >= "
                f"middle ({self.middle}) >= lower ({self.lower})"
            )

    def to_dict(self) -> Dict[str, Any]:
        return _enum_dict(self)


@dataclass(frozen=True)
class SwingPoint:
    """
    Local price extreme confirmed by a symmetric window of bars.

    Attributes:
        price: High (swing high) or low (swing low) of the pivot bar
        type: SwingType.HIGH or SwingType.LOW
        date: Date label of the pivot bar
        index: Position of the pivot bar in the series
        touches: Bars whose high or low came within tolerance of the price
        last_touch_date: Date of the most recent touching bar
        is_recent: Pivot lies in the last 20% of the series
    """
    price: float
    type: SwingType
    date: str
    index: int
    touches: int
    last_touch_date: Optional[str]
    is_recent: bool

    def to_dict(self) -> Dict[str, Any]:
        return _enum_dict(self)


@dataclass(frozen=True)
class FibLevel:
    """Single Fibonacci retracement level with its confluence weight."""
    ratio: float
    price: float
    label: str
    weight: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class FibonacciState:
    """
    Fibonacci retracement of the dominant swing in the series.

    Attributes:
        swing_high: Highest high of the series
        swing_high_date: Date label of the swing high bar
        swing_low: Lowest low of the series
        swing_low_date: Date label of the swing low bar
        swing_direction: UP when the low precedes the high
        levels: Retracement levels in ratio order
        current_retracement: How far price has retraced, clamped to [0, 1]
    """
    swing_high: float
    swing_high_date: str
    swing_low: float
    swing_low_date: str
    swing_direction: SwingDirection
    levels: Tuple[FibLevel, ...]
    current_retracement: float

    def __post_init__(self):
        if not 0 <= self.current_retracement <= 1:
            raise ValueError(
                f"current_retracement must be within [0, 1], got {self.current_retracement}"
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "swing_high": self.swing_high,
            "swing_high_date": self.swing_high_date,
            "swing_low": self.swing_low,
            "swing_low_date": self.swing_low_date,
            "swing_direction": self.swing_direction.value,
            "levels": [level.to_dict() for level in self.levels],
            "current_retracement": self.current_retracement,
        }


@dataclass(frozen=True)
class VolumeNode:
    """Price bucket holding an outsized share of traded volume."""
    price_low: float
    price_high: float
    price_mid: float
    volume_percent: float

    def contains(self, price: float) -> bool:
        return self.price_low <= price <= self.price_high

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class VolumeProfile:
    """
    Close-based volume distribution over the series price range.

    Attributes:
        high_volume_nodes: Up to five buckets above the node threshold, volume-desc
        point_of_control: Midpoint of the bucket with the most volume
        average_volume: Total volume divided by bar count
    """
    high_volume_nodes: Tuple[VolumeNode, ...]
    point_of_control: float
    average_volume: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "high_volume_nodes": [node.to_dict() for node in self.high_volume_nodes],
            "point_of_control": self.point_of_control,
            "average_volume": self.average_volume,
        }


@dataclass(frozen=True)
class OverextensionState:
    """
    Displacement of price from the medium EMA, normalised by ATR.

    Attributes:
        distance: price - EMA (signed)
        distance_percent: distance / EMA * 100
        atr_distance: |distance| / ATR
        status: Extension tier
        direction: ABOVE when distance >= 0
        mean_reversion_signal: True for every tier except NORMAL
        signal_type: Expected reaction for the tier
    """
    distance: float
    distance_percent: float
    atr_distance: float
    status: ExtensionStatus
    direction: ExtensionDirection
    mean_reversion_signal: bool
    signal_type: ReversionSignal

    def to_dict(self) -> Dict[str, Any]:
        return _enum_dict(self)


@dataclass(frozen=True)
class TechnicalIndicators:
    """
    Complete indicator bundle for one instrument and timeframe.

    Attributes:
        symbol: Instrument symbol
        timeframe: Bar interval label
        current_price: Last close
        price_change: Last close minus first close
        price_change_percent: price_change relative to the first close
        data_points: Number of bars analysed
        ema: Snapshot of all configured EMA periods
        trend: Trend classification
        atr: ATR reading
        bollinger: Bollinger reading
        swing_points: Swing highs and lows in relevance order
        fibonacci: Retracement, None on intraday data or short series
        volume_profile: Close-based volume profile
        overextension: Distance from the medium EMA
    """
    symbol: str
    timeframe: str
    current_price: float
    price_change: float
    price_change_percent: float
    data_points: int
    ema: EMASnapshot
    trend: TrendState
    atr: ATRState
    bollinger: BollingerState
    swing_points: Tuple[SwingPoint, ...]
    fibonacci: Optional[FibonacciState]
    volume_profile: VolumeProfile
    overextension: OverextensionState

    @property
    def swing_highs(self) -> List[SwingPoint]:
        return [s for s in self.swing_points if s.type is SwingType.HIGH]

    @property
    def swing_lows(self) -> List[SwingPoint]:
        return [s for s in self.swing_points if s.type is SwingType.LOW]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "symbol": self.symbol,
            "timeframe": self.timeframe,
            "current_price": self.current_price,
            "price_change": self.price_change,
            "price_change_percent": self.price_change_percent,
            "data_points": self.data_points,
            "ema": self.ema.to_dict(),
            "trend": self.trend.to_dict(),
            "atr": self.atr.to_dict(),
            "bollinger": self.bollinger.to_dict(),
            "swing_points": [s.to_dict() for s in self.swing_points],
            "fibonacci": self.fibonacci.to_dict() if self.fibonacci else None,
            "volume_profile": self.volume_profile.to_dict(),
            "overextension": self.overextension.to_dict(),
        }
