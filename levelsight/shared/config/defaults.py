"""
Default configuration for the LevelSight analysis engine.

Every tunable heuristic (periods, weights, thresholds, caps, divisor lists)
lives here as a frozen dataclass. A single ``AnalysisConfig`` value is
injected into each pipeline call; there is no runtime mutation path.
"""
from dataclasses import asdict, dataclass, field, fields, is_dataclass, replace
from typing import Any, Dict, Tuple


@dataclass(frozen=True)
class FibLevelSpec:
    """A Fibonacci retracement ratio with its display label and score weight."""
    ratio: float
    label: str
    weight: int


@dataclass(frozen=True)
class TouchWeights:
    """Historical-touch factor weights."""
    per_touch: int = 5
    max_touches: int = 5
    max_points: int = 25


@dataclass(frozen=True)
class ConfluenceWeights:
    """Raw point values for the six confluence factors."""
    historical_touches: TouchWeights = field(default_factory=TouchWeights)
    fibonacci_max_points: int = 25  # Individual level weights live on FibLevelSpec
    ema_proximity_points: int = 20
    volume_node_points: int = 15
    round_number_points: int = 10
    recent_relevance_points: int = 5
    recent_fraction: float = 0.2  # Last 20% of the series counts as recent


@dataclass(frozen=True)
class StrengthThresholds:
    """Confluence score floors for each strength tier (before volatility adjustment)."""
    strong: int = 60
    medium: int = 40
    weak: int = 25


@dataclass(frozen=True)
class VolatilityConfig:
    """ATR% regime boundaries and the per-regime zone multiplier / threshold adjustment."""
    low_threshold: float = 1.5   # ATR% below this = low volatility
    high_threshold: float = 3.0  # ATR% above this = high volatility

    low_atr_multiplier: float = 1.0
    medium_atr_multiplier: float = 1.2
    high_atr_multiplier: float = 1.5

    low_threshold_adjustment: int = 0
    medium_threshold_adjustment: int = 5
    high_threshold_adjustment: int = 15  # Stricter tiers for volatile instruments


@dataclass(frozen=True)
class OverextensionThresholds:
    """ATR-normalised distance from the medium EMA for each extension tier."""
    moderate: float = 1.5
    overextended: float = 2.0
    extreme: float = 3.0


@dataclass(frozen=True)
class ConfidenceConfig:
    """Overall confidence scoring: base, bonuses, penalties and label bands."""
    base_score: int = 50

    clear_trend: int = 15
    strong_levels: int = 10
    not_overextended: int = 10

    bollinger_squeeze: int = -15
    conflicting_signals: int = -10
    insufficient_data: int = -10

    min_data_points: int = 50
    conflict_distance_percent: float = 3.0

    min_score: int = 30
    max_score: int = 100

    high_label: int = 80
    moderate_label: int = 60
    low_label: int = 40


@dataclass(frozen=True)
class TradeZoneConfig:
    """Deterministic entry/stop/target derivation from scored levels."""
    stop_atr_multiple: float = 2.0
    fallback_zone_percent: float = 2.0
    fallback_target_percent: float = 5.0
    fallback_stop_percent: float = 3.0
    fallback_risk_reward: float = 1.5


DEFAULT_FIB_LEVELS: Tuple[FibLevelSpec, ...] = (
    FibLevelSpec(0.236, "23.6%", 10),
    FibLevelSpec(0.382, "38.2%", 15),
    FibLevelSpec(0.5, "50%", 25),
    FibLevelSpec(0.618, "61.8%", 25),
    FibLevelSpec(0.786, "78.6%", 15),
)


@dataclass(frozen=True)
class AnalysisConfig:
    """Complete, read-only configuration for one analysis run."""

    # Moving averages
    ema_periods: Tuple[int, ...] = (9, 21, 65, 100, 200)
    medium_ema_period: int = 21  # Overextension is measured from this EMA

    # Volatility
    atr_period: int = 10
    bollinger_period: int = 20
    bollinger_std_dev: float = 2.0
    squeeze_ratio: float = 0.8

    # Swing detection (bars required on each side)
    swing_bars_intraday: int = 3
    swing_bars_daily: int = 5
    swing_bars_weekly: int = 8

    # Fibonacci
    fib_levels: Tuple[FibLevelSpec, ...] = DEFAULT_FIB_LEVELS
    fib_min_bars: int = 20

    # Whole-engine minimum
    min_bars: int = 20

    # Confluence
    tolerance_band_percent: float = 1.0
    weights: ConfluenceWeights = field(default_factory=ConfluenceWeights)
    strength: StrengthThresholds = field(default_factory=StrengthThresholds)
    round_number_divisors: Tuple[int, ...] = (100, 50, 25, 10, 5)  # Most significant first

    # Consolidation / display
    min_level_distance_percent: float = 0.5  # Levels closer than this are not actionable
    zone_width_factor: float = 0.5
    max_levels_default: int = 4   # 2 support + 2 resistance
    max_levels_expanded: int = 6  # 3 support + 3 resistance
    min_level_spacing_percent: float = 2.0

    volatility: VolatilityConfig = field(default_factory=VolatilityConfig)
    overextension: OverextensionThresholds = field(default_factory=OverextensionThresholds)

    # Volume profile
    volume_profile_buckets: int = 20
    volume_node_threshold: float = 1.5  # Bucket volume > 1.5x average bucket = high volume node
    max_volume_nodes: int = 5

    confidence: ConfidenceConfig = field(default_factory=ConfidenceConfig)
    trade_zones: TradeZoneConfig = field(default_factory=TradeZoneConfig)

    @property
    def tolerance_fraction(self) -> float:
        return self.tolerance_band_percent / 100

    @property
    def default_levels_per_side(self) -> int:
        return self.max_levels_default // 2

    @property
    def expanded_levels_per_side(self) -> int:
        return self.max_levels_expanded // 2

    def validate(self) -> None:
        """Validate configuration values, raising ValueError on invalid entries."""
        minimums = [
            ("atr_period", self.atr_period, 1),
            ("bollinger_period", self.bollinger_period, 2),
            ("bollinger_std_dev", self.bollinger_std_dev, 0),
            ("swing_bars_intraday", self.swing_bars_intraday, 1),
            ("swing_bars_daily", self.swing_bars_daily, 1),
            ("swing_bars_weekly", self.swing_bars_weekly, 1),
            ("min_bars", self.min_bars, 2),
            ("tolerance_band_percent", self.tolerance_band_percent, 0),
            ("min_level_distance_percent", self.min_level_distance_percent, 0),
            ("min_level_spacing_percent", self.min_level_spacing_percent, 0),
            ("max_levels_default", self.max_levels_default, 2),
            ("max_levels_expanded", self.max_levels_expanded, 2),
            ("volume_profile_buckets", self.volume_profile_buckets, 1),
            ("volume_node_threshold", self.volume_node_threshold, 0),
            ("max_volume_nodes", self.max_volume_nodes, 0),
        ]
        for name, value, minimum in minimums:
            if value < minimum:
                raise ValueError(f"{name} must be >= {minimum}, got {value}")

        if not self.ema_periods or any(p < 1 for p in self.ema_periods):
            raise ValueError(f"ema_periods must be positive, got {self.ema_periods}")
        if self.medium_ema_period not in self.ema_periods:
            raise ValueError(
                f"medium_ema_period {self.medium_ema_period} must be one of {self.ema_periods}"
            )
        if not 0 < self.squeeze_ratio <= 1:
            raise ValueError(f"squeeze_ratio must be in (0, 1], got {self.squeeze_ratio}")
        if not 0 < self.weights.recent_fraction < 1:
            raise ValueError(
                f"recent_fraction must be in (0, 1), got {self.weights.recent_fraction}"
            )
        if not self.strength.strong >= self.strength.medium >= self.strength.weak >= 0:
            raise ValueError(
                "strength thresholds must satisfy strong >= medium >= weak >= 0, got "
                f"{self.strength.strong}/{self.strength.medium}/{self.strength.weak}"
            )
        if self.volatility.low_threshold > self.volatility.high_threshold:
            raise ValueError(
                f"volatility low_threshold ({self.volatility.low_threshold}) must not exceed "
                f"high_threshold ({self.volatility.high_threshold})"
            )
        ext = self.overextension
        if not 0 <= ext.moderate <= ext.overextended <= ext.extreme:
            raise ValueError(
                f"overextension thresholds must be ascending, got "
                f"{ext.moderate}/{ext.overextended}/{ext.extreme}"
            )
        if self.confidence.min_score > self.confidence.max_score:
            raise ValueError("confidence min_score must not exceed max_score")
        if any(d <= 0 for d in self.round_number_divisors):
            raise ValueError(f"round_number_divisors must be positive, got {self.round_number_divisors}")
        for fib in self.fib_levels:
            if not 0 < fib.ratio < 1:
                raise ValueError(f"Fibonacci ratio must be in (0, 1), got {fib.ratio}")

    def to_dict(self) -> Dict[str, Any]:
        """Return a dict representation suitable for serialization."""
        return asdict(self)

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "AnalysisConfig":
        """Create configuration from a partial dict, applying defaults for missing keys."""
        config = _merge(AnalysisConfig(), data)
        config.validate()
        return config


def _merge(base: Any, overrides: Dict[str, Any]) -> Any:
    """Return a copy of a frozen dataclass with (nested) overrides applied."""
    known = {f.name for f in fields(base)}
    changes = {}
    for key, value in overrides.items():
        if key not in known:
            continue
        current = getattr(base, key)
        if is_dataclass(current) and isinstance(value, dict):
            changes[key] = _merge(current, value)
        elif key == "fib_levels":
            changes[key] = tuple(
                v if isinstance(v, FibLevelSpec) else FibLevelSpec(**v) for v in value
            )
        elif isinstance(current, tuple):
            changes[key] = tuple(value)
        else:
            changes[key] = value
    return replace(base, **changes)


DEFAULT_ANALYSIS_CONFIG = AnalysisConfig()
