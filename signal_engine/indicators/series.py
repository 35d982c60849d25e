"""
Indicators over plain price/volume sequences (most recent last).
Short input never raises: each function returns a neutral value instead.
"""

from __future__ import annotations
from typing import List, Sequence, Tuple

import numpy as np

from signal_engine.core.errors import InvariantViolation

NEAR_ZERO_VOLUME = 1e-6
MAX_VOLUME_RATIO = 10.0
SPIKE_RATIO = 2.0
MIN_VALID_VOLUMES = 5

MACD_FAST = 12
MACD_SLOW = 26
MACD_SIGNAL = 9


def _as_array(values: Sequence[float]) -> np.ndarray:
    return np.asarray(values, dtype=float)


def _check_period(period: int) -> None:
    if period <= 0:
        raise InvariantViolation(f"indicator period must be positive, got {period}")


def sma(values: Sequence[float], period: int) -> float:
    """Mean of the last `period` samples, 0 if there are fewer."""
    _check_period(period)
    arr = _as_array(values)
    if len(arr) < period:
        return 0.0
    return float(arr[-period:].mean())


def ema_series(values: Sequence[float], period: int) -> List[float]:
    """
    Running EMA, seeded with the SMA of the first `period` samples.
    Element j is the EMA at sample index period - 1 + j.
    """
    _check_period(period)
    arr = _as_array(values)
    if len(arr) < period:
        return []
    multiplier = 2.0 / (period + 1)
    value = sma(arr[:period], period)
    out = [value]
    for price in arr[period:]:
        value = (float(price) - value) * multiplier + value
        out.append(value)
    return out


def ema(values: Sequence[float], period: int) -> float:
    """EMA of the whole sequence, 0 if fewer than `period` samples."""
    series = ema_series(values, period)
    return series[-1] if series else 0.0


def rsi(values: Sequence[float], period: int = 14) -> float:
    """Wilder RSI in [0, 100]; 50 when there are fewer than period + 1 samples."""
    _check_period(period)
    arr = _as_array(values)
    if len(arr) < period + 1:
        return 50.0
    changes = np.diff(arr)
    gains = np.where(changes > 0, changes, 0.0)
    losses = np.where(changes > 0, 0.0, np.abs(changes))

    avg_gain = float(gains[:period].sum()) / period
    avg_loss = float(losses[:period].sum()) / period
    for gain, loss in zip(gains[period:], losses[period:]):
        avg_gain = (avg_gain * (period - 1) + float(gain)) / period
        avg_loss = (avg_loss * (period - 1) + float(loss)) / period

    if avg_loss == 0:
        return 50.0 if avg_gain == 0 else 100.0
    value = 100.0 - 100.0 / (1.0 + avg_gain / avg_loss)
    return min(100.0, max(0.0, value))


def macd(values: Sequence[float]) -> Tuple[float, float, float]:
    """
    (macd, signal, histogram). The MACD series starts at sample 26 and its
    EMA(9) is accumulated in one pass; all zeros below 35 samples.
    """
    arr = _as_array(values)
    if len(arr) < MACD_SLOW + MACD_SIGNAL:
        return 0.0, 0.0, 0.0
    fast = ema_series(arr, MACD_FAST)
    slow = ema_series(arr, MACD_SLOW)
    # fast[i - 11] and slow[i - 25] are both the EMA at sample i
    line = [
        fast[i - (MACD_FAST - 1)] - slow[i - (MACD_SLOW - 1)]
        for i in range(MACD_SLOW, len(arr))
    ]
    macd_value = fast[-1] - slow[-1]
    signal = ema(line, MACD_SIGNAL)
    return macd_value, signal, macd_value - signal


def bollinger_bands(values: Sequence[float], period: int = 20, k: float = 2.0) -> Tuple[float, float, float]:
    """(upper, middle, lower) using population std; zeros when short."""
    _check_period(period)
    arr = _as_array(values)
    if len(arr) < period:
        return 0.0, 0.0, 0.0
    window = arr[-period:]
    middle = float(window.mean())
    band = k * float(window.std())
    return middle + band, middle, middle - band


def detect_volume_spike(volumes: Sequence[float], current_volume: float) -> Tuple[bool, float]:
    """Compare current volume to the mean of prior non-negligible volumes."""
    arr = _as_array(volumes)
    valid = arr[arr > NEAR_ZERO_VOLUME]
    if len(valid) < MIN_VALID_VOLUMES:
        return False, 1.0
    average = float(valid.mean())
    if average < NEAR_ZERO_VOLUME:
        return False, 1.0
    ratio = min(current_volume / average, MAX_VOLUME_RATIO)
    return ratio > SPIKE_RATIO, ratio


def momentum_score(prices: Sequence[float], volumes: Sequence[float]) -> float:
    """Composite 0-100 score: 70% price change over 20 samples, 30% volume change."""
    p = _as_array(prices)
    v = _as_array(volumes)
    if len(p) < 20 or len(v) < 20 or p[-20] == 0:
        return 50.0
    price_change = (p[-1] - p[-20]) / p[-20] * 100
    recent_vol = sma(v[-5:], 5)
    old_vol = sma(v[-20:-5], 15)
    volume_change = (recent_vol - old_vol) / old_vol * 100 if old_vol > 0 else 0.0
    score = 50.0 + price_change * 0.7 + volume_change * 0.3
    return float(min(100.0, max(0.0, score)))
