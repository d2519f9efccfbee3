"""
Data models for OHLCV price bars.

This module defines the core input structure for the level analysis
pipeline and the conversion to the pandas frame the indicator functions
operate on.
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Sequence

import pandas as pd


@dataclass(frozen=True)
class Bar:
    """
    Single OHLCV (Open, High, Low, Close, Volume) price bar.

    Attributes:
        timestamp: Bar open time as Unix epoch milliseconds
        date: Display label for the bar (ISO date string)
        open: Opening price
        high: Highest price during period
        low: Lowest price during period
        close: Closing price
        volume: Traded volume
    """
    timestamp: int
    date: str
    open: float
    high: float
    low: float
    close: float
    volume: float

    def __post_init__(self):
        """Validate OHLCV relationships."""
        if self.close <= 0:
            raise ValueError(f"Close must be positive, got {self.close}")
        if self.high < self.low:
            raise ValueError(f"High ({self.high}) cannot be less than Low ({self.low})")
        if self.volume < 0:
            raise ValueError(f"Volume cannot be negative, got {self.volume}")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


OHLCV_COLUMNS = ['timestamp', 'date', 'open', 'high', 'low', 'close', 'volume']


def bars_to_frame(bars: Sequence[Bar]) -> pd.DataFrame:
    """
    Convert bars to a DataFrame with a positional RangeIndex.

    Column order follows OHLCV_COLUMNS; row order is preserved (callers are
    responsible for ascending timestamps).
    """
    if not bars:
        return pd.DataFrame(columns=OHLCV_COLUMNS)
    return pd.DataFrame([asdict(bar) for bar in bars], columns=OHLCV_COLUMNS)


def frame_to_bars(df: pd.DataFrame) -> List[Bar]:
    """Build Bar objects from a frame that already has all OHLCV_COLUMNS."""
    return [
        Bar(
            timestamp=int(row.timestamp),
            date=str(row.date),
            open=float(row.open),
            high=float(row.high),
            low=float(row.low),
            close=float(row.close),
            volume=float(row.volume),
        )
        for row in df[OHLCV_COLUMNS].itertuples(index=False)
    ]
