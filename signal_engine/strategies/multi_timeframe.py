"""
Per-timeframe trend analysis and weighted multi-timeframe aggregation.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

from signal_engine.core.errors import DataUnavailable, require_symbol
from signal_engine.core.logger import get_logger
from signal_engine.core.types import TimeframeAnalysis, Trend, validate_candles
from signal_engine.indicators import (
    atr,
    bollinger_bands,
    detect_trend,
    macd,
    momentum_score,
    rsi,
)
from signal_engine.market.base import MarketDataSource
from signal_engine.utils.timeframes import sort_timeframes

logger = get_logger("strategies.mtf")

# Longer timeframes carry more weight
DEFAULT_WEIGHTS: Dict[str, float] = {"5m": 0.5, "15m": 1.0, "1h": 2.0, "4h": 3.0}
MIN_BARS = 20
CANDLE_LIMIT = 100


@dataclass
class MultiTimeframeResult:
    """Per-timeframe analyses and their normalised bullishness score in [0, 1]."""
    analyses: List[TimeframeAnalysis] = field(default_factory=list)
    score: float = 0.5

    def breakdown(self) -> str:
        if not self.analyses:
            return "No MTF"
        return ", ".join(f"{a.timeframe}:{a.trend.value}" for a in self.analyses)


class TimeframeAnalyzer:
    """Runs the indicator library over one symbol's candles for one timeframe."""

    def __init__(self, market: MarketDataSource, limit: int = CANDLE_LIMIT):
        self.market = market
        self.limit = limit

    def analyze(self, symbol: str, timeframe: str) -> Optional[TimeframeAnalysis]:
        """None when the fetch fails or returns fewer than 20 bars."""
        try:
            df = self.market.get_candles(symbol, timeframe, self.limit)
        except DataUnavailable as e:
            logger.warning("Failed to get %s klines for %s: %s", timeframe, symbol, e)
            return None
        if df is None or len(df) < MIN_BARS:
            return None
        validate_candles(df)

        closes = df["close"].to_numpy(dtype=float)
        volumes = df["volume"].to_numpy(dtype=float)
        trend, strength = detect_trend(df)
        rsi_value = rsi(closes, 14)
        macd_value, macd_signal, histogram = macd(closes)

        if logger.isEnabledFor(logging.DEBUG):
            upper, middle, lower = bollinger_bands(closes, 20, 2.0)
            price = float(closes[-1])
            band = "ABOVE" if price > upper else "BELOW" if price < lower else "MID"
            logger.debug(
                "%s %s: %s (%.2f) | RSI %.1f | MACD %.4f | hist %.4f",
                symbol, timeframe, trend.value, strength, rsi_value, macd_value, histogram,
            )
            logger.debug(
                "%s %s: BB %.4f/%.4f/%.4f (%s) | ATR %.4f | momentum %.0f",
                symbol, timeframe, upper, middle, lower, band, atr(df, 14),
                momentum_score(closes, volumes),
            )

        return TimeframeAnalysis(
            timeframe=timeframe,
            trend=trend,
            strength=min(1.0, max(0.0, strength)),
            rsi=rsi_value,
            macd=macd_value,
            macd_signal=macd_signal,
        )


class MultiTimeframeAggregator:
    """
    Weighted vote across timeframes. BULLISH adds strength x weight, BEARISH
    subtracts it, NEUTRAL adds half the weight; the signed sum is mapped to
    [0, 1] using the total weight of the timeframes that produced data.
    """

    def __init__(
        self,
        market: MarketDataSource,
        weights: Optional[Mapping[str, float]] = None,
        analyzer: Optional[TimeframeAnalyzer] = None,
    ):
        weights = dict(weights or DEFAULT_WEIGHTS)
        if not weights or any(w <= 0 for w in weights.values()):
            raise ValueError("timeframe weights must be positive")
        self.timeframes = sort_timeframes(weights)
        self.weights = weights
        self.analyzer = analyzer or TimeframeAnalyzer(market)

    def analyze(self, symbol: str) -> MultiTimeframeResult:
        require_symbol(symbol)
        analyses: List[TimeframeAnalysis] = []
        for tf in self.timeframes:
            analysis = self.analyzer.analyze(symbol, tf)
            if analysis is not None:
                analyses.append(analysis)
        return MultiTimeframeResult(analyses=analyses, score=self.score(analyses))

    def score(self, analyses: List[TimeframeAnalysis]) -> float:
        total = 0.0
        total_weight = 0.0
        for a in analyses:
            weight = self.weights[a.timeframe]
            total_weight += weight
            if a.trend == Trend.BULLISH:
                total += a.strength * weight
            elif a.trend == Trend.BEARISH:
                total -= a.strength * weight
            else:
                total += 0.5 * weight
        if total_weight == 0:
            return 0.5
        return min(1.0, max(0.0, (total + total_weight) / (2 * total_weight)))
