"""Market data: source abstraction and Binance spot implementation."""

from signal_engine.market.base import MarketDataSource
from signal_engine.market.binance_spot import BinanceSpotClient

__all__ = ["MarketDataSource", "BinanceSpotClient"]
