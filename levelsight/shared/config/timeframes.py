"""Timeframe classification.

Bar intervals arrive as free-form labels ('5m', '1h', '1d', 'daily', '1wk',
...). They are bucketed into three categories which drive the swing
detection window and gate the Fibonacci computation.
"""

from enum import Enum

from levelsight.shared.config.defaults import AnalysisConfig, DEFAULT_ANALYSIS_CONFIG


class TimeframeCategory(str, Enum):
    INTRADAY = "intraday"
    DAILY = "daily"
    WEEKLY = "weekly"


def get_timeframe_category(timeframe: str) -> TimeframeCategory:
    """
    Classify a timeframe label.

    Minute labels and '1h' / '60' are intraday; anything mentioning weeks or
    months is weekly; everything else is treated as daily.

    Note: the intraday check runs first, so labels that contain an 'm'
    ('1mo', 'month') land in intraday.
    """
    tf = timeframe.lower()

    if "m" in tf or "min" in tf or tf == "1h" or tf == "60":
        return TimeframeCategory.INTRADAY

    if "w" in tf or "week" in tf or "month" in tf or tf == "m":
        return TimeframeCategory.WEEKLY

    return TimeframeCategory.DAILY


def is_fibonacci_timeframe(timeframe: str) -> bool:
    """Fibonacci retracement is only meaningful on daily and higher bars."""
    return get_timeframe_category(timeframe) in (TimeframeCategory.DAILY, TimeframeCategory.WEEKLY)


def get_swing_bars(timeframe: str, config: AnalysisConfig = DEFAULT_ANALYSIS_CONFIG) -> int:
    """Bars required on each side of a bar to confirm it as a swing point."""
    category = get_timeframe_category(timeframe)
    if category is TimeframeCategory.INTRADAY:
        return config.swing_bars_intraday
    if category is TimeframeCategory.WEEKLY:
        return config.swing_bars_weekly
    return config.swing_bars_daily
