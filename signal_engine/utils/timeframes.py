"""Timeframe string helpers."""

from typing import Iterable, List


def timeframe_minutes(tf: str) -> int:
    """Convert Binance-style timeframe (e.g. '5m', '1h', '1d') to minutes."""
    tf = tf.strip().lower()
    if len(tf) < 2 or not tf[:-1].isdigit():
        raise ValueError(f"Unsupported timeframe: {tf}")
    if tf.endswith("m"):
        return int(tf[:-1])
    if tf.endswith("h"):
        return int(tf[:-1]) * 60
    if tf.endswith("d"):
        return int(tf[:-1]) * 60 * 24
    raise ValueError(f"Unsupported timeframe: {tf}")


def sort_timeframes(timeframes: Iterable[str]) -> List[str]:
    """Shortest first."""
    return sorted(timeframes, key=timeframe_minutes)
