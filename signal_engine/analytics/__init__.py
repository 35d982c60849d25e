"""Analytics: trade-ledger performance metrics (win rate, profit factor, Kelly)."""

from signal_engine.analytics.metrics import (
    PerformanceMetrics,
    compute_metrics,
    win_rate,
    profit_factor,
    expectancy,
    kelly_fraction,
)

__all__ = [
    "PerformanceMetrics",
    "compute_metrics",
    "win_rate",
    "profit_factor",
    "expectancy",
    "kelly_fraction",
]
