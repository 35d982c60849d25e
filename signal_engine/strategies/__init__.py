"""Strategies: history store, multi-timeframe aggregation, screener and momentum scorer."""

from signal_engine.strategies.base import BaseScorer
from signal_engine.strategies.history import PriceHistory
from signal_engine.strategies.multi_timeframe import (
    MultiTimeframeAggregator,
    MultiTimeframeResult,
    TimeframeAnalyzer,
)
from signal_engine.strategies.momentum import MomentumScorer, MarketContext, threshold_for
from signal_engine.strategies.screener import find_hot_coins

__all__ = [
    "BaseScorer",
    "PriceHistory",
    "MultiTimeframeAggregator",
    "MultiTimeframeResult",
    "TimeframeAnalyzer",
    "MomentumScorer",
    "MarketContext",
    "threshold_for",
    "find_hot_coins",
]
