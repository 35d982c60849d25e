"""Abstract market-data interface consumed by the scoring engine."""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Dict, List

import pandas as pd

from signal_engine.core.types import Ticker


class MarketDataSource(ABC):
    """
    Tickers, candles, prices and balances. Every method may raise
    DataUnavailable; the engine treats that as missing data, never as fatal.
    """

    @abstractmethod
    def get_tickers(self) -> List[Ticker]:
        """24h tickers for all symbols."""
        pass

    @abstractmethod
    def get_candles(self, symbol: str, interval: str, limit: int = 100) -> pd.DataFrame:
        """OHLCV DataFrame with columns open_time, open, high, low, close, volume, close_time."""
        pass

    @abstractmethod
    def get_current_price(self, symbol: str) -> float:
        """Last traded price."""
        pass

    def get_balances(self) -> Dict[str, float]:
        """Non-zero balances by asset. Only used to size the initial capital base."""
        return {}
