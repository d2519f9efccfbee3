"""Overextension Detector

Measures how far price has stretched from the medium EMA in ATR units and
maps the stretch onto a mean-reversion tier.
"""

from typing import Optional

from levelsight.shared.config.defaults import AnalysisConfig, DEFAULT_ANALYSIS_CONFIG
from levelsight.shared.models.indicators import (
    ExtensionDirection,
    ExtensionStatus,
    OverextensionState,
    ReversionSignal,
)


def detect_overextension(
    current_price: float,
    ema_medium: Optional[float],
    atr: float,
    config: AnalysisConfig = DEFAULT_ANALYSIS_CONFIG
) -> OverextensionState:
    """
    Classify price displacement from the medium EMA.

    Args:
        current_price: Last close
        ema_medium: Medium EMA value (EMA21 by default), None if unavailable
        atr: Current ATR; zero ATR yields an ATR distance of 0
        config: Thresholds for each tier

    Returns:
        OverextensionState. Without a medium EMA every distance is 0 and the
        state is NORMAL.
    """
    if ema_medium is None or ema_medium <= 0:
        return OverextensionState(
            distance=0.0,
            distance_percent=0.0,
            atr_distance=0.0,
            status=ExtensionStatus.NORMAL,
            direction=ExtensionDirection.ABOVE,
            mean_reversion_signal=False,
            signal_type=ReversionSignal.NONE,
        )

    distance = current_price - ema_medium
    distance_percent = distance / ema_medium * 100
    atr_distance = abs(distance) / atr if atr > 0 else 0.0
    direction = ExtensionDirection.ABOVE if distance >= 0 else ExtensionDirection.BELOW

    thresholds = config.overextension
    if atr_distance < thresholds.moderate:
        status, signal = ExtensionStatus.NORMAL, ReversionSignal.NONE
    elif atr_distance < thresholds.overextended:
        status, signal = ExtensionStatus.MODERATELY_EXTENDED, ReversionSignal.PULLBACK_EXPECTED
    elif atr_distance < thresholds.extreme:
        status, signal = ExtensionStatus.OVEREXTENDED, ReversionSignal.REVERSAL_CANDIDATE
    else:
        status, signal = ExtensionStatus.EXTREMELY_EXTENDED, ReversionSignal.STRONG_REVERSAL

    return OverextensionState(
        distance=distance,
        distance_percent=distance_percent,
        atr_distance=atr_distance,
        status=status,
        direction=direction,
        mean_reversion_signal=status is not ExtensionStatus.NORMAL,
        signal_type=signal,
    )
