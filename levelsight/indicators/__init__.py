"""
Technical Indicators Package

Provides:
- Moving averages (SMA, SMA-seeded EMA, EMA snapshot)
- Volatility indicators (True Range, ATR, Bollinger Bands)
- Volume profile
- Data validation utilities

All indicator functions follow consistent patterns:
- Accept pandas DataFrame with OHLCV columns (or a close Series)
- Return pandas Series, a tuple of Series, or a latest-bar state model
- Raise InsufficientDataError for short series, ValueError for missing columns
"""

from levelsight.indicators.moving_averages import (
    compute_sma,
    compute_ema,
    latest_ema,
    compute_ema_snapshot,
)

from levelsight.indicators.volatility import (
    compute_true_range,
    compute_atr,
    compute_atr_state,
    classify_volatility,
    threshold_adjustment,
    compute_bollinger_bands,
    compute_bollinger_state,
)

from levelsight.indicators.volume import (
    compute_volume_profile,
)

from levelsight.indicators.validation_utils import (
    validate_ohlcv,
    require_length,
    DataValidationError,
    InsufficientDataError,
)

__all__ = [
    # Moving averages
    'compute_sma',
    'compute_ema',
    'latest_ema',
    'compute_ema_snapshot',
    # Volatility
    'compute_true_range',
    'compute_atr',
    'compute_atr_state',
    'classify_volatility',
    'threshold_adjustment',
    'compute_bollinger_bands',
    'compute_bollinger_state',
    # Volume
    'compute_volume_profile',
    # Validation
    'validate_ohlcv',
    'require_length',
    'DataValidationError',
    'InsufficientDataError',
]
