"""Unit tests for core.types."""

from datetime import datetime, timedelta, timezone

import pytest

from signal_engine.core.errors import InvariantViolation
from signal_engine.core.types import (
    Action,
    Candle,
    Position,
    Regime,
    Side,
    Signal,
    TradeResult,
    candles_to_frame,
    validate_candles,
)

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


def candle(i, close=10.0, volume=5.0):
    return Candle(T0 + timedelta(minutes=i), close, close + 1, close - 1, close, volume, T0 + timedelta(minutes=i, seconds=59))


def test_candles_to_frame():
    df = candles_to_frame([candle(0), candle(1, close=11.0)])
    assert list(df["close"]) == [10.0, 11.0]
    assert validate_candles(df) is df
    assert candle(0).typical_price == pytest.approx(10.0)


def test_validate_rejects_bad_candles():
    with pytest.raises(InvariantViolation):
        validate_candles(candles_to_frame([candle(0, volume=-1.0)]))
    with pytest.raises(InvariantViolation):
        validate_candles(candles_to_frame([candle(1), candle(0)]))
    with pytest.raises(InvariantViolation):
        validate_candles(candles_to_frame([candle(0), candle(0)]))


def test_position_defaults_from_entry():
    position = Position("BTCUSDT", Side.BUY, 100.0, 1.0, 98.0, 105.0, T0)
    assert position.current_price == 100.0
    assert position.highest_price == 100.0
    assert position.last_update_time == T0
    assert position.trailing_stop_price == 0.0


def test_signal_volatility_pct():
    signal = Signal("BTCUSDT", Action.BUY, 50.0, 0.7, 0.6, 1.5, Regime.TRENDING, "", T0)
    assert signal.volatility_pct == pytest.approx(3.0)


def test_trade_result_success():
    assert TradeResult("BTCUSDT", 0.01, 5).success is True
    assert TradeResult("BTCUSDT", 0.0, 5).success is False
