"""
Classifiers built on the indicator library: trend vote, market regime and
volume profile. Each returns a (label, strength/confidence) pair.
"""

from __future__ import annotations
from typing import Tuple

import pandas as pd

from signal_engine.core.types import Regime, Trend, VolumeProfile
from signal_engine.indicators.bars import atr
from signal_engine.indicators.series import (
    bollinger_bands,
    detect_volume_spike,
    macd,
    rsi,
    sma,
)

MIN_TREND_BARS = 20
MIN_REGIME_BARS = 50


def detect_trend(df: pd.DataFrame) -> Tuple[Trend, float]:
    """
    Weighted vote of price/SMA, SMA20/SMA50, RSI, MACD, Bollinger midpoint and
    spike-confirmed direction. Strength is the bullish share of the vote.
    """
    if len(df) < MIN_TREND_BARS:
        return Trend.NEUTRAL, 0.5

    closes = df["close"].to_numpy(dtype=float)
    volumes = df["volume"].to_numpy(dtype=float)
    price = float(closes[-1])

    sma20 = sma(closes, 20)
    rsi_value = rsi(closes, 14)
    macd_value, macd_signal, _ = macd(closes)
    upper, _, lower = bollinger_bands(closes, 20, 2.0)
    spike, ratio = detect_volume_spike(volumes[:-1], float(volumes[-1]))

    bullish = 0
    total = 0

    if price > sma20:
        bullish += 2
    total += 2

    if len(closes) >= 50:
        if sma20 > sma(closes, 50):
            bullish += 2
        total += 2

    if 50 < rsi_value < 70:
        bullish += 1
    total += 1

    if macd_value > macd_signal:
        bullish += 2
    total += 2

    if price > (upper + lower) / 2:
        bullish += 1
    total += 1

    if spike and ratio > 2.0:
        if price > closes[-2]:
            bullish += 1
        total += 1

    strength = bullish / total
    if strength > 0.65:
        return Trend.BULLISH, min(1.0, strength)
    if strength < 0.35:
        return Trend.BEARISH, min(1.0, 1 - strength)
    return Trend.NEUTRAL, 0.5


def detect_market_regime(df: pd.DataFrame) -> Tuple[Regime, float]:
    """Classify as VOLATILE, TRENDING, RANGING or TRANSITIONING (rules in that order)."""
    if len(df) < MIN_REGIME_BARS:
        return Regime.UNKNOWN, 0.5

    closes = df["close"].to_numpy(dtype=float)
    price = float(closes[-1])
    sma20 = sma(closes, 20)
    if price <= 0 or sma20 <= 0:
        return Regime.UNKNOWN, 0.5

    volatility = atr(df, 14) / price * 100
    deviation = abs(price - sma20) / sma20 * 100
    consistency = float((closes[-20:] > sma20).sum()) / 20.0

    if volatility > 5.0:
        return Regime.VOLATILE, 0.8
    if consistency > 0.7 or consistency < 0.3:
        return Regime.TRENDING, abs(consistency - 0.5) * 2
    if deviation < 2.0:
        return Regime.RANGING, 0.7
    return Regime.TRANSITIONING, 0.5


def analyze_volume_profile(df: pd.DataFrame, periods: int = 20) -> Tuple[VolumeProfile, float]:
    """Buy pressure from up-bar vs down-bar volume over the last `periods` bars."""
    if len(df) < periods:
        return VolumeProfile.NEUTRAL, 0.5

    recent = df.iloc[-periods:]
    up = recent["close"] > recent["open"]
    up_volume = float(recent.loc[up, "volume"].sum())
    down_volume = float(recent.loc[~up, "volume"].sum())
    total = up_volume + down_volume
    if total == 0:
        return VolumeProfile.NEUTRAL, 0.5

    buy_pressure = up_volume / total
    if buy_pressure > 0.65:
        return VolumeProfile.ACCUMULATION, buy_pressure
    if buy_pressure < 0.35:
        return VolumeProfile.DISTRIBUTION, 1 - buy_pressure
    return VolumeProfile.NEUTRAL, 0.5
