"""Unit tests for strategies.screener."""

from signal_engine.core.config import Config
from signal_engine.core.types import Ticker
from signal_engine.strategies.screener import find_hot_coins, hot_coin_score


def t(symbol, change, quote_volume):
    return Ticker(symbol=symbol, last_price=1.0, price_change_percent=change, quote_volume=quote_volume)


def test_hot_coin_score():
    assert hot_coin_score(t("AUSDT", 5.0, 3_000_000)) == 13.0


def test_filters_quote_asset_volume_and_change(config):
    tickers = [
        t("AUSDT", 5.0, 2_000_000),
        t("BBTC", 9.0, 9_000_000),
        t("CUSDT", 2.0, 9_000_000),
        t("DUSDT", 8.0, 500_000),
        t("USDT", 9.0, 9_000_000),
    ]
    assert [c.symbol for c in find_hot_coins(tickers, config)] == ["AUSDT"]


def test_ranked_and_truncated():
    config = Config(max_hot_coins=2)
    tickers = [
        t("AUSDT", 4.0, 1_000_000),   # 9
        t("BUSDT", 3.0, 20_000_000),  # 26
        t("CUSDT", 10.0, 1_000_000),  # 21
    ]
    assert [c.symbol for c in find_hot_coins(tickers, config)] == ["BUSDT", "CUSDT"]
