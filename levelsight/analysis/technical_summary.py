"""Technical summary rows and overextension narrative.

Deterministic, human-readable digest of the indicator bundle, shown next
to the scored levels.
"""

from typing import Optional

from levelsight.shared.models.indicators import (
    EMAAlignment,
    ExtensionStatus,
    TechnicalIndicators,
    TradingBias,
)
from levelsight.shared.models.report import SummaryRow, SummaryStatus, TechnicalSummary

BAND_HIGH = 0.8
BAND_LOW = 0.2
HIGH_ATR_PERCENT = 3.0

_BIAS_STATUS = {
    TradingBias.LONG: SummaryStatus.BULLISH,
    TradingBias.SHORT: SummaryStatus.BEARISH,
    TradingBias.NEUTRAL: SummaryStatus.NEUTRAL,
}

_ALIGNMENT_STATUS = {
    EMAAlignment.PERFECTLY_BULLISH: SummaryStatus.BULLISH,
    EMAAlignment.MOSTLY_BULLISH: SummaryStatus.BULLISH,
    EMAAlignment.MIXED: SummaryStatus.NEUTRAL,
    EMAAlignment.MOSTLY_BEARISH: SummaryStatus.BEARISH,
    EMAAlignment.PERFECTLY_BEARISH: SummaryStatus.BEARISH,
}


def _fmt(value: Optional[float]) -> str:
    return f"{value:.2f}" if value is not None else "n/a"


def describe_overextension(indicators: TechnicalIndicators, ema_label: str = "21 EMA") -> str:
    ext = indicators.overextension
    side = ext.direction.value
    if ext.status is ExtensionStatus.NORMAL:
        return f"Price is trading near the {ema_label}. No overextension detected."
    if ext.status is ExtensionStatus.MODERATELY_EXTENDED:
        return f"Price is moderately extended {side} the {ema_label}. A pullback may be healthy."
    if ext.status is ExtensionStatus.OVEREXTENDED:
        return f"Price is overextended {side} the {ema_label}. Mean reversion is likely."
    return f"Price is extremely extended {side} the {ema_label}. High probability of reversal."


def build_technical_summary(indicators: TechnicalIndicators, medium_ema_period: int = 21) -> TechnicalSummary:
    """
    Build the four summary rows (Trend, EMA Alignment, Volatility, Bollinger
    Position) and the overextension description.
    """
    trend = indicators.trend
    ema = indicators.ema
    atr = indicators.atr
    percent_b = indicators.bollinger.percent_b

    if percent_b > BAND_HIGH:
        band_status, band_label = SummaryStatus.WARNING, "Near upper band"
    elif percent_b < BAND_LOW:
        band_status, band_label = SummaryStatus.WARNING, "Near lower band"
    else:
        band_status, band_label = SummaryStatus.NEUTRAL, "Mid-range"

    rows = (
        SummaryRow(
            indicator="Trend",
            value=f"{trend.direction.value} ({trend.strength}%)",
            status=_BIAS_STATUS[trend.trading_bias],
            status_label=trend.bias_reason,
        ),
        SummaryRow(
            indicator="EMA Alignment",
            value=trend.ema_alignment.value,
            status=_ALIGNMENT_STATUS[trend.ema_alignment],
            status_label=f"9: {_fmt(ema.value(9))}, 21: {_fmt(ema.value(21))}, 65: {_fmt(ema.value(65))}",
        ),
        SummaryRow(
            indicator="Volatility (ATR)",
            value=f"{atr.atr_percent:.2f}%",
            status=SummaryStatus.WARNING if atr.atr_percent > HIGH_ATR_PERCENT else SummaryStatus.NEUTRAL,
            status_label=f"${atr.atr:.2f} average range",
        ),
        SummaryRow(
            indicator="Bollinger Position",
            value=f"{percent_b * 100:.0f}%",
            status=band_status,
            status_label=band_label,
        ),
    )

    return TechnicalSummary(
        rows=rows,
        overextension_description=describe_overextension(indicators, f"{medium_ema_period} EMA"),
    )
