"""
Binance spot market data with rate-limit retry. Read-only: no orders.
"""

from __future__ import annotations
import functools
import time
from typing import Dict, List

import pandas as pd
import requests

from binance.client import Client
from binance.exceptions import BinanceAPIException, BinanceRequestException

from signal_engine.core.errors import DataUnavailable
from signal_engine.core.logger import get_logger
from signal_engine.core.types import CANDLE_COLUMNS, Ticker, utc_now
from signal_engine.market.base import MarketDataSource

logger = get_logger("market.binance")

KLINE_COLUMNS = [
    "open_time", "open", "high", "low", "close", "volume",
    "close_time", "quote_av", "num_trades", "tb_base_av", "tb_quote_av", "ignore",
]


def retry_on_rate_limit(max_retries: int = 3, base_delay: float = 1.0):
    """Decorator: retry on 429 or 418, then surface any failure as DataUnavailable."""
    def decorator(f):
        @functools.wraps(f)
        def wrapped(*args, **kwargs):
            for attempt in range(max_retries):
                try:
                    return f(*args, **kwargs)
                except BinanceAPIException as e:
                    if e.status_code in (429, 418) and attempt < max_retries - 1:
                        delay = base_delay * (2 ** attempt)
                        logger.warning("Rate limited, retry in %.1fs (attempt %d)", delay, attempt + 1)
                        time.sleep(delay)
                        continue
                    raise DataUnavailable(f"{f.__name__}: {e}") from e
                except (BinanceRequestException, requests.RequestException, ValueError, KeyError) as e:
                    raise DataUnavailable(f"{f.__name__}: {e}") from e
            raise DataUnavailable(f"{f.__name__}: retries exhausted")
        return wrapped
    return decorator


class BinanceSpotClient(MarketDataSource):
    """Binance spot client (testnet and live)."""

    def __init__(self, api_key: str = "", api_secret: str = "", testnet: bool = True):
        self._client = Client(api_key or None, api_secret or None, testnet=testnet)
        logger.info("Binance spot: using %s", "TESTNET" if testnet else "LIVE")

    @retry_on_rate_limit(max_retries=3, base_delay=1.0)
    def get_tickers(self) -> List[Ticker]:
        now = utc_now()
        return [
            Ticker(
                symbol=raw["symbol"],
                last_price=float(raw["lastPrice"]),
                price_change_percent=float(raw["priceChangePercent"]),
                quote_volume=float(raw["quoteVolume"]),
                volume=float(raw["volume"]),
                timestamp=now,
            )
            for raw in self._client.get_ticker()
        ]

    @retry_on_rate_limit(max_retries=3, base_delay=1.0)
    def get_candles(self, symbol: str, interval: str, limit: int = 100) -> pd.DataFrame:
        raw = self._client.get_klines(symbol=symbol, interval=interval, limit=limit)
        df = pd.DataFrame(raw, columns=KLINE_COLUMNS)
        df[["open", "high", "low", "close", "volume"]] = df[["open", "high", "low", "close", "volume"]].astype(float)
        df["open_time"] = pd.to_datetime(df["open_time"], unit="ms", utc=True)
        df["close_time"] = pd.to_datetime(df["close_time"], unit="ms", utc=True)
        return df[CANDLE_COLUMNS]

    @retry_on_rate_limit(max_retries=2)
    def get_current_price(self, symbol: str) -> float:
        return float(self._client.get_symbol_ticker(symbol=symbol)["price"])

    @retry_on_rate_limit(max_retries=2)
    def get_balances(self) -> Dict[str, float]:
        account = self._client.get_account()
        balances: Dict[str, float] = {}
        for b in account.get("balances", []):
            total = float(b.get("free", 0)) + float(b.get("locked", 0))
            if total > 0:
                balances[b["asset"]] = total
        return balances
