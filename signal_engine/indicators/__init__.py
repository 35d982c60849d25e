"""Indicator library: moving averages, oscillators, volatility and volume measures."""

from signal_engine.indicators.series import (
    sma,
    ema,
    ema_series,
    rsi,
    macd,
    bollinger_bands,
    detect_volume_spike,
    momentum_score,
)
from signal_engine.indicators.bars import atr, true_range, stochastic, vwap, support_resistance
from signal_engine.indicators.regime import detect_trend, detect_market_regime, analyze_volume_profile

__all__ = [
    "sma",
    "ema",
    "ema_series",
    "rsi",
    "macd",
    "bollinger_bands",
    "detect_volume_spike",
    "momentum_score",
    "atr",
    "true_range",
    "stochastic",
    "vwap",
    "support_resistance",
    "detect_trend",
    "detect_market_regime",
    "analyze_volume_profile",
]
