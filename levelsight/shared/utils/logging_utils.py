"""
Logging utilities for the analysis pipeline.

Provides consistent, structured logging helpers for tracking pipeline
stages, timing and level summaries across all components.
"""

import time
from typing import Any, Dict, List, Optional

from loguru import logger


def log_pipeline_stage(
    stage_name: str,
    symbol: str,
    status: str = "START",
    data: Optional[Dict[str, Any]] = None,
    level: str = "INFO"
) -> None:
    """
    Log a pipeline stage with consistent formatting.

    Args:
        stage_name: Name of the pipeline stage (e.g., "INDICATORS", "CONFLUENCE")
        symbol: Instrument symbol being processed
        status: Stage status ("START", "COMPLETE", "FAILED")
        data: Optional additional data to log
        level: Log level ("DEBUG", "INFO", "WARNING", "ERROR")
    """
    log_func = getattr(logger, level.lower(), logger.info)

    if status == "START":
        log_func(f"🔄 [{stage_name}] Starting for {symbol}")
    elif status == "COMPLETE":
        duration_msg = f" ({data.get('duration_ms', 0):.0f}ms)" if data and 'duration_ms' in data else ""
        log_func(f"✅ [{stage_name}] Completed for {symbol}{duration_msg}")
        if data:
            for key, value in data.items():
                if key != 'duration_ms':
                    log_func(f"   └─ {key}: {value}")
    elif status == "FAILED":
        log_func(f"❌ [{stage_name}] Failed for {symbol}")
        if data:
            log_func(f"   └─ Reason: {data.get('reason', 'Unknown')}")
            if 'error' in data:
                log_func(f"   └─ Error: {data['error']}")


def log_timing(
    operation_name: str,
    duration_ms: float,
    symbol: Optional[str] = None,
    level: str = "DEBUG"
) -> None:
    """
    Log timing information for performance monitoring.

    Args:
        operation_name: Name of the operation being timed
        duration_ms: Duration in milliseconds
        symbol: Optional symbol context
        level: Log level
    """
    log_func = getattr(logger, level.lower(), logger.debug)

    symbol_str = f" [{symbol}]" if symbol else ""

    if duration_ms < 100:
        emoji = "⚡"
    elif duration_ms < 1000:
        emoji = "⏱️"
    else:
        emoji = "🐌"

    log_func(f"{emoji} {operation_name}{symbol_str}: {duration_ms:.0f}ms")


def log_level_summary(
    symbol: str,
    support_prices: List[float],
    resistance_prices: List[float],
    confidence: int
) -> None:
    """Log the displayed support/resistance prices and overall confidence."""
    logger.info(f"📐 [{symbol}] Level Summary (confidence {confidence}):")
    logger.info(f"   └─ support: {', '.join(f'{p:.2f}' for p in support_prices) or 'none'}")
    logger.info(f"   └─ resistance: {', '.join(f'{p:.2f}' for p in resistance_prices) or 'none'}")


class TimingContext:
    """Context manager for timing operations."""

    def __init__(self, operation_name: str, symbol: Optional[str] = None):
        self.operation_name = operation_name
        self.symbol = symbol
        self.start_time = None
        self.duration_ms = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration_ms = (time.perf_counter() - self.start_time) * 1000
        log_timing(self.operation_name, self.duration_ms, self.symbol)
        return False
