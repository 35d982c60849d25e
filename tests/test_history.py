"""Unit tests for strategies.history."""

import threading

import pytest

from signal_engine.core.errors import InvariantViolation
from signal_engine.strategies.history import PriceHistory


def test_window_capped_at_capacity():
    history = PriceHistory()
    for i in range(150):
        history.append("BTCUSDT", 100.0 + i, 10.0)
    prices, volumes = history.snapshot("BTCUSDT")
    assert len(prices) == len(volumes) == 100
    assert prices[0] == 150.0
    assert prices[-1] == 249.0


def test_append_returns_length():
    history = PriceHistory(capacity=3)
    assert [history.append("ETHUSDT", 1.0, 0.0) for _ in range(5)] == [1, 2, 3, 3, 3]


def test_replace_keeps_most_recent():
    history = PriceHistory(capacity=10)
    loaded = history.replace("ETHUSDT", range(1, 21), [5.0] * 20)
    assert loaded == 10
    prices, volumes = history.snapshot("ETHUSDT")
    assert prices == [float(p) for p in range(11, 21)]
    assert volumes == [5.0] * 10


def test_replace_requires_equal_lengths():
    history = PriceHistory()
    with pytest.raises(ValueError):
        history.replace("ETHUSDT", [1.0, 2.0], [1.0])


def test_invalid_samples_rejected():
    history = PriceHistory()
    with pytest.raises(InvariantViolation):
        history.append("BTCUSDT", 0.0, 1.0)
    with pytest.raises(InvariantViolation):
        history.append("BTCUSDT", 1.0, -1.0)
    with pytest.raises(InvariantViolation):
        history.append("", 1.0, 1.0)
    assert history.length("BTCUSDT") == 0


def test_symbols_are_independent():
    history = PriceHistory()
    history.append("AUSDT", 1.0, 1.0)
    history.append("BUSDT", 2.0, 2.0)
    history.append("BUSDT", 3.0, 3.0)
    assert history.length("AUSDT") == 1
    assert history.length("BUSDT") == 2
    assert sorted(history.symbols()) == ["AUSDT", "BUSDT"]
    history.clear("BUSDT")
    assert history.snapshot("BUSDT") == ([], [])


def test_concurrent_appends_keep_series_aligned():
    history = PriceHistory()

    def worker(offset):
        for i in range(50):
            history.append("SOLUSDT", 1.0 + offset + i, float(i))

    threads = [threading.Thread(target=worker, args=(n * 100,)) for n in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    prices, volumes = history.snapshot("SOLUSDT")
    assert len(prices) == len(volumes) == 100
