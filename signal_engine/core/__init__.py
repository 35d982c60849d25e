"""Core: config, types, errors, logging."""

from signal_engine.core.config import load_config, Config
from signal_engine.core.errors import (
    SignalEngineError,
    ConfigError,
    DataUnavailable,
    InvariantViolation,
)
from signal_engine.core.types import (
    Action,
    Side,
    Trend,
    Regime,
    VolumeProfile,
    CloseReason,
    Ticker,
    Candle,
    TimeframeAnalysis,
    Signal,
    Position,
    TradeResult,
    candles_to_frame,
)
from signal_engine.core.logger import setup_logging

__all__ = [
    "load_config",
    "Config",
    "SignalEngineError",
    "ConfigError",
    "DataUnavailable",
    "InvariantViolation",
    "Action",
    "Side",
    "Trend",
    "Regime",
    "VolumeProfile",
    "CloseReason",
    "Ticker",
    "Candle",
    "TimeframeAnalysis",
    "Signal",
    "Position",
    "TradeResult",
    "candles_to_frame",
    "setup_logging",
]
