"""
OHLCV Data Validation Utilities

Provides centralized input validation for indicator calculations to catch
data quality issues early and prevent NaN propagation into scored output.
"""

from typing import Optional
import pandas as pd
import logging

logger = logging.getLogger(__name__)


class DataValidationError(ValueError):
    """Raised when OHLCV data fails validation checks."""


class InsufficientDataError(DataValidationError):
    """Raised when a series is too short for the requested indicator."""

    def __init__(self, indicator: str, required: int, actual: int):
        self.indicator = indicator
        self.required = required
        self.actual = actual
        super().__init__(
            f"Not enough data for {indicator}: need {required} bars, got {actual}"
        )


def require_length(length: int, required: int, indicator: str) -> None:
    """Raise InsufficientDataError when ``length`` is below ``required``."""
    if length < required:
        raise InsufficientDataError(indicator, required, length)


def validate_ohlcv(
    df: pd.DataFrame,
    min_rows: Optional[int] = None,
    raise_on_error: bool = True,
) -> dict:
    """
    Validate OHLCV DataFrame before indicator calculation.

    Checks for missing columns, NaN values, non-positive prices, inverted
    candles (high < low) and negative volume. Zero volume is only a warning.

    Args:
        df: DataFrame with OHLCV columns
        min_rows: Minimum required rows (None = no minimum)
        raise_on_error: If True, raise on failure; else return dict

    Returns:
        dict with validation results:
            - valid: bool indicating if all checks passed
            - errors: list of error messages
            - warnings: list of warning messages

    Raises:
        InsufficientDataError: If the frame is shorter than ``min_rows``
        DataValidationError: If any other check fails and raise_on_error=True
    """
    result = {"valid": True, "errors": [], "warnings": []}

    required_cols = ["high", "low", "close", "volume"]
    missing_cols = [col for col in required_cols if col not in df.columns]
    if missing_cols:
        result["errors"].append(f"Missing required columns: {missing_cols}")
        result["valid"] = False
        if raise_on_error:
            raise DataValidationError("; ".join(result["errors"]))
        return result

    if min_rows is not None and len(df) < min_rows:
        if raise_on_error:
            raise InsufficientDataError("OHLCV series", min_rows, len(df))
        result["errors"].append(f"DataFrame too short: need {min_rows} rows, got {len(df)}")
        result["valid"] = False

    value_cols = [col for col in ("open", "high", "low", "close", "volume") if col in df.columns]
    for col in value_cols:
        nan_count = int(df[col].isna().sum())
        if nan_count > 0:
            result["errors"].append(f"Column '{col}' has {nan_count} NaN values")
            result["valid"] = False

    for col in ["high", "low", "close"]:
        non_positive = int((df[col] <= 0).sum())
        if non_positive > 0:
            result["errors"].append(
                f"Column '{col}' has {non_positive} non-positive values"
            )
            result["valid"] = False

    inverted = int((df["high"] < df["low"]).sum())
    if inverted > 0:
        result["errors"].append(
            f"Found {inverted} inverted candles (high < low) - data corruption suspected"
        )
        result["valid"] = False

    negative_volume = int((df["volume"] < 0).sum())
    if negative_volume > 0:
        result["errors"].append(f"Found {negative_volume} negative volume values")
        result["valid"] = False

    # Zero volume is legal (volume profile falls back), only worth a warning
    zero_volume = int((df["volume"] == 0).sum())
    if zero_volume > 0 and len(df) > 0:
        zero_pct = (zero_volume / len(df)) * 100
        if zero_pct > 10:
            result["warnings"].append(f"Found {zero_volume} zero volume bars ({zero_pct:.1f}%)")

    for warning in result["warnings"]:
        logger.warning(warning)

    if raise_on_error and not result["valid"]:
        raise DataValidationError("; ".join(result["errors"]))

    return result
