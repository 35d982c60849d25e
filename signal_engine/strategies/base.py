"""Abstract scorer: turns a ticker into a Signal."""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Iterable

from signal_engine.core.types import Signal, Ticker


class BaseScorer(ABC):
    """A scorer evaluates one ticker against its own history and returns a Signal."""

    @abstractmethod
    def generate_signal(self, ticker: Ticker, open_symbols: Iterable[str] = ()) -> Signal:
        """
        Return a BUY or HOLD Signal for the ticker. Symbols in open_symbols
        already have a position and are never re-entered.
        """
        pass
