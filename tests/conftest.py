"""Shared fixtures: in-memory market source and OHLCV frame builder."""

from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Sequence, Tuple

import pandas as pd
import pytest

from signal_engine.core.config import Config
from signal_engine.core.errors import DataUnavailable
from signal_engine.core.types import CANDLE_COLUMNS, Ticker
from signal_engine.market.base import MarketDataSource
from signal_engine.utils.telegram import TelegramNotifier

START = datetime(2024, 1, 1, tzinfo=timezone.utc)


def build_frame(
    closes: Sequence[float],
    opens: Optional[Sequence[float]] = None,
    highs: Optional[Sequence[float]] = None,
    lows: Optional[Sequence[float]] = None,
    volumes: Optional[Sequence[float]] = None,
    spread: float = 0.001,
    minutes: int = 1,
) -> pd.DataFrame:
    """OHLCV frame; opens default to the previous close, highs/lows to a small spread."""
    closes = [float(c) for c in closes]
    if opens is None:
        opens = [closes[0]] + closes[:-1]
    if highs is None:
        highs = [max(o, c) * (1 + spread) for o, c in zip(opens, closes)]
    if lows is None:
        lows = [min(o, c) * (1 - spread) for o, c in zip(opens, closes)]
    if volumes is None:
        volumes = [1000.0] * len(closes)
    rows = []
    for i, (o, h, l, c, v) in enumerate(zip(opens, highs, lows, closes, volumes)):
        open_time = START + timedelta(minutes=i * minutes)
        rows.append([open_time, float(o), float(h), float(l), c, float(v), open_time + timedelta(minutes=minutes, seconds=-1)])
    return pd.DataFrame(rows, columns=CANDLE_COLUMNS)


class FakeMarket(MarketDataSource):
    """Candles keyed by (symbol, interval); anything missing raises DataUnavailable."""

    def __init__(self):
        self.tickers: List[Ticker] = []
        self.candles: Dict[Tuple[str, str], pd.DataFrame] = {}
        self.prices: Dict[str, float] = {}
        self.balances: Dict[str, float] = {}
        self.candle_calls: List[Tuple[str, str]] = []
        self.fail_tickers = False

    def get_tickers(self) -> List[Ticker]:
        if self.fail_tickers:
            raise DataUnavailable("ticker endpoint down")
        return list(self.tickers)

    def get_candles(self, symbol: str, interval: str, limit: int = 100) -> pd.DataFrame:
        self.candle_calls.append((symbol, interval))
        df = self.candles.get((symbol, interval))
        if df is None:
            raise DataUnavailable(f"no {interval} candles for {symbol}")
        return df.tail(limit).reset_index(drop=True)

    def get_current_price(self, symbol: str) -> float:
        if symbol not in self.prices:
            raise DataUnavailable(f"no price for {symbol}")
        return self.prices[symbol]

    def get_balances(self) -> Dict[str, float]:
        return dict(self.balances)


class RecordingNotifier(TelegramNotifier):
    """Enabled notifier that keeps messages instead of posting them."""

    def __init__(self):
        super().__init__("token", "chat", enabled=True)
        self.messages: List[str] = []

    def send(self, text: str) -> bool:
        self.messages.append(text)
        return True


@pytest.fixture
def config():
    return Config()


@pytest.fixture
def market():
    return FakeMarket()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def frame():
    return build_frame
