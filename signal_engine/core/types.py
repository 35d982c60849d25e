"""
Core data types: enums, tickers, candles, analyses, signals, positions, trades.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, List, Optional

import pandas as pd

from signal_engine.core.errors import InvariantViolation

CANDLE_COLUMNS = ["open_time", "open", "high", "low", "close", "volume", "close_time"]


class Action(str, Enum):
    BUY = "BUY"
    HOLD = "HOLD"


class Side(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


class Trend(str, Enum):
    BULLISH = "BULLISH"
    BEARISH = "BEARISH"
    NEUTRAL = "NEUTRAL"


class Regime(str, Enum):
    TRENDING = "TRENDING"
    RANGING = "RANGING"
    VOLATILE = "VOLATILE"
    TRANSITIONING = "TRANSITIONING"
    UNKNOWN = "UNKNOWN"


class VolumeProfile(str, Enum):
    ACCUMULATION = "ACCUMULATION"
    DISTRIBUTION = "DISTRIBUTION"
    NEUTRAL = "NEUTRAL"


class CloseReason(str, Enum):
    TRAILING_STOP = "trailing_stop"
    STOP_LOSS = "stop_loss"
    TAKE_PROFIT = "take_profit"
    TIME_STALL = "time_stall"
    TIME_LIMIT = "time_limit"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Ticker:
    """24h ticker snapshot."""
    symbol: str
    last_price: float
    price_change_percent: float
    quote_volume: float
    volume: float = 0.0
    timestamp: datetime = field(default_factory=utc_now)


@dataclass(frozen=True)
class Candle:
    """OHLCV candle."""
    open_time: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float
    close_time: datetime

    @property
    def typical_price(self) -> float:
        return (self.high + self.low + self.close) / 3.0


def candles_to_frame(candles: Iterable[Candle]) -> pd.DataFrame:
    """Build the OHLCV DataFrame used by the indicator library."""
    rows = [
        [c.open_time, c.open, c.high, c.low, c.close, c.volume, c.close_time]
        for c in candles
    ]
    return pd.DataFrame(rows, columns=CANDLE_COLUMNS)


def validate_candles(df: pd.DataFrame) -> pd.DataFrame:
    """Reject frames that break the market-source contract."""
    if df is None or len(df) == 0:
        return df
    prices = df[["open", "high", "low", "close"]]
    if (prices < 0).to_numpy().any() or (df["volume"] < 0).any():
        raise InvariantViolation("candle with negative price or volume")
    if "open_time" in df.columns:
        open_time = df["open_time"]
        if not (open_time.is_monotonic_increasing and open_time.is_unique):
            raise InvariantViolation("candle open times are not strictly increasing")
    return df


@dataclass(frozen=True)
class TimeframeAnalysis:
    """Trend and oscillator readings for one timeframe."""
    timeframe: str
    trend: Trend
    strength: float
    rsi: float
    macd: float
    macd_signal: float


@dataclass(frozen=True)
class Signal:
    """Scored decision for one symbol. Built only by the scorer."""
    symbol: str
    action: Action
    price: float
    strength: float
    mtf_score: float
    atr: float
    regime: Regime
    reason: str
    timestamp: datetime
    analyses: List[TimeframeAnalysis] = field(default_factory=list)

    @property
    def volatility_pct(self) -> float:
        """ATR as a percentage of price."""
        if self.price <= 0:
            return 0.0
        return self.atr / self.price * 100


@dataclass
class Position:
    """Open position state, refreshed on every price update."""
    symbol: str
    side: Side
    entry_price: float
    quantity: float
    stop_loss: float
    take_profit: float
    entry_time: datetime
    current_price: float = 0.0
    highest_price: float = 0.0
    trailing_stop_price: float = 0.0
    trailing_stop_enabled: bool = True
    last_update_time: Optional[datetime] = None
    pnl: float = 0.0
    pnl_pct: float = 0.0
    realized_pnl: float = 0.0

    def __post_init__(self):
        if not self.current_price:
            self.current_price = self.entry_price
        if not self.highest_price:
            self.highest_price = self.entry_price
        if self.last_update_time is None:
            self.last_update_time = self.entry_time


@dataclass(frozen=True)
class TradeResult:
    """Closed trade outcome kept in the risk ledger."""
    symbol: str
    pnl: float
    duration_minutes: float

    @property
    def success(self) -> bool:
        return self.pnl > 0
