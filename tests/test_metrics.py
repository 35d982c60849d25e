"""Unit tests for analytics.metrics."""

import math

import pytest

from signal_engine.analytics.metrics import (
    compute_metrics,
    expectancy,
    kelly_fraction,
    profit_factor,
    win_rate,
)
from signal_engine.core.types import TradeResult


def test_win_rate():
    assert win_rate([]) == 0.0
    assert win_rate([1.0, -1.0, 2.0, 0.0]) == 0.5


def test_profit_factor():
    assert profit_factor([10.0, -5.0]) == 2.0
    assert math.isinf(profit_factor([1.0, 2.0]))
    assert profit_factor([]) == 0.0


def test_expectancy():
    assert expectancy([10.0, -4.0, 0.0]) == pytest.approx(2.0)
    assert expectancy([]) == 0.0


def test_kelly_defaults_below_ten_trades():
    assert kelly_fraction([5.0] * 9) == 0.5


def test_kelly_degenerate_ledgers():
    assert kelly_fraction([5.0] * 10) == 0.5
    assert kelly_fraction([-5.0] * 10) == 0.5


def test_kelly_clamped():
    # 0.25 * (0.2 - 0.8 / 1) is negative, floored at 0.1
    assert kelly_fraction([10.0] * 2 + [-10.0] * 8) == 0.1
    # 0.25 * (0.9 - 0.1 / 10) = 0.2225
    assert kelly_fraction([100.0] * 9 + [-10.0]) == pytest.approx(0.2225)


def test_compute_metrics():
    trades = [
        TradeResult("AUSDT", 30.0, 60),
        TradeResult("BUSDT", -10.0, 30),
        TradeResult("CUSDT", 20.0, 90),
    ]
    m = compute_metrics(trades)
    assert m.total_trades == 3
    assert m.winning_trades == 2
    assert m.losing_trades == 1
    assert m.total_pnl == pytest.approx(40.0)
    assert m.win_rate == pytest.approx(2 / 3)
    assert m.profit_factor == pytest.approx(5.0)
    assert m.avg_win == pytest.approx(25.0)
    assert m.avg_loss == pytest.approx(-10.0)
    assert m.avg_hold_minutes == pytest.approx(60.0)
    assert m.kelly_fraction == 0.5


def test_compute_metrics_empty():
    m = compute_metrics([])
    assert m.total_trades == 0
    assert m.avg_hold_minutes == 0.0
