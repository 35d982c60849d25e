"""
Per-symbol rolling price/volume history. Each symbol has its own lock so
scoring calls for different symbols can run in parallel.
"""

from __future__ import annotations
import threading
from collections import deque
from typing import Deque, Dict, Iterable, List, Tuple

from signal_engine.core.errors import require_non_negative, require_positive, require_symbol

DEFAULT_CAPACITY = 100


class PriceHistory:
    """Bounded, equal-length price and volume windows keyed by symbol."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        require_positive("capacity", capacity)
        self.capacity = capacity
        self._prices: Dict[str, Deque[float]] = {}
        self._volumes: Dict[str, Deque[float]] = {}
        self._locks: Dict[str, threading.RLock] = {}
        self._registry_lock = threading.Lock()

    def lock(self, symbol: str) -> threading.RLock:
        """Exclusive access for one symbol (re-entrant)."""
        require_symbol(symbol)
        with self._registry_lock:
            if symbol not in self._locks:
                self._locks[symbol] = threading.RLock()
                self._prices[symbol] = deque(maxlen=self.capacity)
                self._volumes[symbol] = deque(maxlen=self.capacity)
            return self._locks[symbol]

    def append(self, symbol: str, price: float, volume: float) -> int:
        """Add one sample, evicting the oldest beyond capacity. Returns the new length."""
        require_positive("price", price)
        require_non_negative("volume", volume)
        with self.lock(symbol):
            self._prices[symbol].append(float(price))
            self._volumes[symbol].append(float(volume))
            return len(self._prices[symbol])

    def replace(self, symbol: str, prices: Iterable[float], volumes: Iterable[float]) -> int:
        """Overwrite a symbol's window (used when backfilling from candles)."""
        prices = [float(p) for p in prices]
        volumes = [float(v) for v in volumes]
        if len(prices) != len(volumes):
            raise ValueError("prices and volumes must have equal length")
        for p in prices:
            require_positive("price", p)
        with self.lock(symbol):
            self._prices[symbol] = deque(prices, maxlen=self.capacity)
            self._volumes[symbol] = deque(volumes, maxlen=self.capacity)
            return len(self._prices[symbol])

    def snapshot(self, symbol: str) -> Tuple[List[float], List[float]]:
        """Copies of (prices, volumes), most recent last."""
        with self.lock(symbol):
            return list(self._prices[symbol]), list(self._volumes[symbol])

    def length(self, symbol: str) -> int:
        with self.lock(symbol):
            return len(self._prices[symbol])

    def symbols(self) -> List[str]:
        with self._registry_lock:
            return list(self._prices)

    def clear(self, symbol: str) -> None:
        with self.lock(symbol):
            self._prices[symbol].clear()
            self._volumes[symbol].clear()
