"""Indicators over OHLCV DataFrames (columns open, high, low, close, volume)."""

from __future__ import annotations
from typing import Tuple

import numpy as np
import pandas as pd

from signal_engine.indicators.series import sma


def true_range(df: pd.DataFrame) -> np.ndarray:
    """True range for every bar after the first."""
    high = df["high"].to_numpy(dtype=float)
    low = df["low"].to_numpy(dtype=float)
    close = df["close"].to_numpy(dtype=float)
    if len(close) < 2:
        return np.array([], dtype=float)
    prev_close = close[:-1]
    high_low = high[1:] - low[1:]
    high_close = np.abs(high[1:] - prev_close)
    low_close = np.abs(low[1:] - prev_close)
    return np.maximum(high_low, np.maximum(high_close, low_close))


def atr(df: pd.DataFrame, period: int = 14) -> float:
    """Average true range: SMA(period) of the true-range sequence."""
    if len(df) < period + 1:
        return 0.0
    return sma(true_range(df), period)


def stochastic(df: pd.DataFrame, period: int = 14) -> Tuple[float, float]:
    """(%K, %D). %D is reported equal to %K; 50/50 on short or flat input."""
    if len(df) < period:
        return 50.0, 50.0
    recent = df.iloc[-period:]
    high = float(recent["high"].max())
    low = float(recent["low"].min())
    if high - low == 0:
        return 50.0, 50.0
    k = (float(df["close"].iloc[-1]) - low) / (high - low) * 100
    return k, k


def vwap(df: pd.DataFrame) -> float:
    """Volume-weighted typical price over the whole frame."""
    if len(df) == 0:
        return 0.0
    typical = (df["high"] + df["low"] + df["close"]) / 3.0
    total_volume = float(df["volume"].sum())
    if total_volume == 0:
        return 0.0
    return float((typical * df["volume"]).sum()) / total_volume


def support_resistance(df: pd.DataFrame) -> Tuple[float, float]:
    """(lowest low, highest high); zeros with fewer than 20 bars."""
    if len(df) < 20:
        return 0.0, 0.0
    return float(df["low"].min()), float(df["high"].max())
