"""
Performance metrics over closed-trade PnLs: win rate, profit factor,
expectancy and fractional Kelly.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Sequence

from signal_engine.core.types import TradeResult

KELLY_FRACTION = 0.25
KELLY_FLOOR = 0.1
KELLY_CAP = 0.5
KELLY_MIN_TRADES = 10


@dataclass
class PerformanceMetrics:
    """Aggregate performance over the trade ledger."""
    total_trades: int
    winning_trades: int
    losing_trades: int
    total_pnl: float
    win_rate: float
    profit_factor: float
    expectancy: float
    avg_win: float
    avg_loss: float
    avg_hold_minutes: float
    kelly_fraction: float


def win_rate(pnls: Sequence[float]) -> float:
    """Fraction of trades with positive PnL."""
    if not pnls:
        return 0.0
    return sum(1 for p in pnls if p > 0) / len(pnls)


def profit_factor(pnls: Sequence[float]) -> float:
    """Gross profit / gross loss. inf with no losses, 0 with neither."""
    wins = sum(p for p in pnls if p > 0)
    losses = sum(-p for p in pnls if p < 0)
    if losses <= 0:
        return float("inf") if wins > 0 else 0.0
    return wins / losses


def expectancy(pnls: Sequence[float]) -> float:
    """Average PnL per trade."""
    if not pnls:
        return 0.0
    return sum(pnls) / len(pnls)


def kelly_fraction(
    pnls: Sequence[float],
    fraction: float = KELLY_FRACTION,
    floor: float = KELLY_FLOOR,
    cap: float = KELLY_CAP,
    min_trades: int = KELLY_MIN_TRADES,
) -> float:
    """
    Fractional Kelly: fraction * (W - (1 - W) / R), R = avg win / avg loss,
    clamped to [floor, cap]. Returns cap until min_trades trades exist or
    when there are no wins or no losses to measure.
    """
    n = len(pnls)
    if n < min_trades:
        return cap
    wins = [p for p in pnls if p > 0]
    total_win = sum(wins)
    total_loss = sum(abs(p) for p in pnls if p <= 0)
    if not wins or total_loss == 0:
        return cap
    w = len(wins) / n
    avg_win = total_win / len(wins)
    avg_loss = total_loss / (n - len(wins))
    if avg_loss == 0 or avg_win == 0:
        return cap
    kelly = fraction * (w - (1 - w) / (avg_win / avg_loss))
    return min(cap, max(floor, kelly))


def compute_metrics(trades: List[TradeResult]) -> PerformanceMetrics:
    """Full metrics from the trade ledger."""
    pnls = [t.pnl for t in trades]
    wins = [p for p in pnls if p > 0]
    losses = [p for p in pnls if p <= 0]
    return PerformanceMetrics(
        total_trades=len(pnls),
        winning_trades=len(wins),
        losing_trades=len(losses),
        total_pnl=sum(pnls),
        win_rate=win_rate(pnls),
        profit_factor=profit_factor(pnls),
        expectancy=expectancy(pnls),
        avg_win=sum(wins) / len(wins) if wins else 0.0,
        avg_loss=sum(losses) / len(losses) if losses else 0.0,
        avg_hold_minutes=sum(t.duration_minutes for t in trades) / len(trades) if trades else 0.0,
        kelly_fraction=kelly_fraction(pnls),
    )
