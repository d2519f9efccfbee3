"""
Bar file loader.

Reads OHLCV bars from CSV or JSON (list of records) and normalizes them to
the Bar model: numeric prices, epoch-millisecond timestamps, ISO date labels
and ascending time order.
"""

from pathlib import Path
from typing import List, Union

import pandas as pd
from loguru import logger

from levelsight.indicators.validation_utils import DataValidationError, validate_ohlcv
from levelsight.shared.models.data import Bar, OHLCV_COLUMNS, frame_to_bars

PRICE_COLUMNS = ['open', 'high', 'low', 'close', 'volume']

_EPOCH = pd.Timestamp("1970-01-01", tz="UTC")


def _read_frame(path: Path) -> pd.DataFrame:
    suffix = path.suffix.lower()
    if suffix == '.csv':
        return pd.read_csv(path)
    if suffix == '.json':
        # Dates stay as written; conversion happens in normalize_frame
        return pd.read_json(path, orient='records', convert_dates=False, dtype=False)
    raise DataValidationError(f"Unsupported bar file type '{suffix}' (expected .csv or .json)")


def _parse_dates(values: pd.Series) -> pd.Series:
    parsed = pd.to_datetime(values, utc=True, errors='coerce')
    bad = int(parsed.isna().sum())
    if bad:
        raise DataValidationError(f"Column 'date' has {bad} unparseable values")
    return parsed


def normalize_frame(df: pd.DataFrame) -> pd.DataFrame:
    """
    Normalize a raw bar frame to OHLCV_COLUMNS.

    Accepts a ``timestamp`` column (epoch milliseconds), a ``date`` column
    (any pandas-parseable date) or both. A missing timestamp is derived from
    the date and a missing date label from the timestamp.

    Raises:
        DataValidationError: On missing columns or non-numeric values
    """
    df = df.rename(columns=lambda col: str(col).strip().lower())

    missing = [col for col in PRICE_COLUMNS if col not in df.columns]
    if missing:
        raise DataValidationError(f"Missing required columns: {missing}")
    if 'timestamp' not in df.columns and 'date' not in df.columns:
        raise DataValidationError("Bar file needs a 'timestamp' or 'date' column")

    out = pd.DataFrame(index=df.index)
    for col in PRICE_COLUMNS:
        out[col] = pd.to_numeric(df[col], errors='coerce')

    if 'timestamp' in df.columns:
        timestamps = pd.to_numeric(df['timestamp'], errors='coerce')
        bad = int(timestamps.isna().sum())
        if bad:
            raise DataValidationError(f"Column 'timestamp' has {bad} non-numeric values")
        out['timestamp'] = timestamps.astype('int64')
    else:
        out['timestamp'] = (_parse_dates(df['date']) - _EPOCH) // pd.Timedelta(milliseconds=1)

    if 'date' in df.columns:
        out['date'] = df['date'].astype(str)
    else:
        out['date'] = pd.to_datetime(out['timestamp'], unit='ms', utc=True).dt.strftime('%Y-%m-%d')

    out = out.sort_values('timestamp', kind='stable').reset_index(drop=True)
    return out[OHLCV_COLUMNS]


def load_bars(path: Union[str, Path]) -> List[Bar]:
    """
    Load bars from a ``.csv`` or ``.json`` file.

    Args:
        path: File path

    Returns:
        Bars in ascending timestamp order

    Raises:
        DataValidationError: If the file is unreadable or fails OHLCV checks
    """
    path = Path(path)
    if not path.exists():
        raise DataValidationError(f"Bar file not found: {path}")

    try:
        raw = _read_frame(path)
    except DataValidationError:
        raise
    except ValueError as e:
        # pandas parser errors (ParserError, EmptyDataError) are ValueErrors
        raise DataValidationError(f"Could not parse {path.name}: {e}") from e

    df = normalize_frame(raw)
    validate_ohlcv(df)

    bars = frame_to_bars(df)
    logger.info(f"✓ Loaded {len(bars)} bars from {path.name}")
    return bars
