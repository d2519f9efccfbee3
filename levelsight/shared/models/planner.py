"""
Trade zone models.

A TradeZones value is the deterministic entry / target / stop framing for
one direction, derived from the scored levels. Narrative text about the
idea is produced elsewhere; only the numbers live here.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict


class TradeDirection(str, Enum):
    LONG = "long"
    SHORT = "short"


@dataclass(frozen=True)
class EntryZone:
    """Price band in which an entry is considered."""
    low: float
    high: float

    def __post_init__(self):
        if self.low > self.high:
            raise ValueError(f"Entry zone low ({self.low}) cannot exceed high ({self.high})")

    @property
    def midpoint(self) -> float:
        return (self.low + self.high) / 2


@dataclass(frozen=True)
class TradeZones:
    """
    Entry, target and stop for one trade direction.

    Attributes:
        direction: Long or short
        entry_zone: Zone of the entry level (or a percent band around price)
        entry_price: Level price the stop and R:R are measured from
        target: Opposite-side level price (or a percent target)
        stop: Entry offset by a multiple of ATR (or a percent stop)
        risk_reward_ratio: |target - entry| / |entry - stop|, 2 decimals
        from_levels: False when there were not enough levels and the
                     percent-based fallback was used
    """
    direction: TradeDirection
    entry_zone: EntryZone
    entry_price: float
    target: float
    stop: float
    risk_reward_ratio: float
    from_levels: bool

    @property
    def risk(self) -> float:
        return abs(self.entry_price - self.stop)

    @property
    def reward(self) -> float:
        return abs(self.target - self.entry_price)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "direction": self.direction.value,
            "entry_zone": {"low": self.entry_zone.low, "high": self.entry_zone.high},
            "entry_price": self.entry_price,
            "target": self.target,
            "stop": self.stop,
            "risk_reward_ratio": self.risk_reward_ratio,
            "from_levels": self.from_levels,
        }
