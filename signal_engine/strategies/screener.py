"""Hot-coin screener: filter 24h tickers and rank the strongest movers."""

from __future__ import annotations
from typing import Iterable, List

from signal_engine.core.config import Config
from signal_engine.core.types import Ticker


def hot_coin_score(ticker: Ticker) -> float:
    """Ranking key: price change weighs double, plus quote volume in millions."""
    return ticker.price_change_percent * 2.0 + ticker.quote_volume / 1_000_000


def find_hot_coins(tickers: Iterable[Ticker], config: Config) -> List[Ticker]:
    """Quote-asset pairs passing the volume and price-change filters, best first."""
    quote = config.quote_asset
    hot = [
        t for t in tickers
        if len(t.symbol) > len(quote)
        and t.symbol.endswith(quote)
        and t.quote_volume >= config.min_volume_usdt
        and t.price_change_percent >= config.min_price_change_pct
    ]
    hot.sort(key=hot_coin_score, reverse=True)
    return hot[: config.max_hot_coins]
