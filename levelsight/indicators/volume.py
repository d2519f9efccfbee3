"""
Volume Indicators Module

Implements the close-based volume profile used for level confluence:
bar volume is bucketed by close price across the series range, and
buckets holding an outsized share of volume become high-volume nodes.
"""

import numpy as np
import pandas as pd
import logging

from levelsight.shared.config.defaults import AnalysisConfig, DEFAULT_ANALYSIS_CONFIG
from levelsight.shared.models.indicators import VolumeNode, VolumeProfile

logger = logging.getLogger(__name__)


def compute_volume_profile(
    df: pd.DataFrame,
    config: AnalysisConfig = DEFAULT_ANALYSIS_CONFIG
) -> VolumeProfile:
    """
    Compute a simplified volume profile.

    Each bar's whole volume goes to the bucket containing its close. A
    bucket is a high-volume node when its volume exceeds
    ``volume_node_threshold`` times the average bucket volume.

    Args:
        df: DataFrame with 'high', 'low', 'close', 'volume' columns
        config: Analysis configuration (bucket count, node threshold, node cap)

    Returns:
        VolumeProfile with nodes sorted by volume share (largest first)
    """
    for col in ('high', 'low', 'close', 'volume'):
        if col not in df.columns:
            raise ValueError(f"DataFrame must contain '{col}' column")

    if df.empty:
        return VolumeProfile(high_volume_nodes=(), point_of_control=0.0, average_volume=0.0)

    min_price = float(df['low'].min())
    max_price = float(df['high'].max())
    volumes = df['volume'].to_numpy(dtype=float)
    total_volume = float(volumes.sum())
    average_volume = total_volume / len(df)

    bucket_count = config.volume_profile_buckets
    bucket_size = (max_price - min_price) / bucket_count

    if bucket_size == 0:
        logger.debug("Volume profile skipped: zero price range at %.4f", min_price)
        return VolumeProfile(high_volume_nodes=(), point_of_control=min_price, average_volume=average_volume)

    bucket_lows = min_price + np.arange(bucket_count) * bucket_size
    bucket_highs = min_price + (np.arange(bucket_count) + 1) * bucket_size

    indices = np.floor((df['close'].to_numpy(dtype=float) - min_price) / bucket_size).astype(int)
    indices = np.minimum(indices, bucket_count - 1)
    valid = indices >= 0
    bucket_volumes = np.zeros(bucket_count)
    np.add.at(bucket_volumes, indices[valid], volumes[valid])

    # argmax returns the first maximal bucket, bucket 0 when there is no volume
    poc = int(np.argmax(bucket_volumes))
    point_of_control = (bucket_lows[poc] + bucket_highs[poc]) / 2

    nodes = []
    if total_volume > 0:
        threshold = (total_volume / bucket_count) * config.volume_node_threshold
        for i in range(bucket_count):
            if bucket_volumes[i] > threshold:
                nodes.append(VolumeNode(
                    price_low=float(bucket_lows[i]),
                    price_high=float(bucket_highs[i]),
                    price_mid=float((bucket_lows[i] + bucket_highs[i]) / 2),
                    volume_percent=float(bucket_volumes[i] / total_volume * 100),
                ))
        nodes.sort(key=lambda n: n.volume_percent, reverse=True)

    return VolumeProfile(
        high_volume_nodes=tuple(nodes[:config.max_volume_nodes]),
        point_of_control=float(point_of_control),
        average_volume=average_volume,
    )
