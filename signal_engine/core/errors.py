"""
Error taxonomy. Only InvariantViolation is meant to reach the caller;
DataUnavailable is raised by market sources and absorbed by the engine.
"""

from __future__ import annotations


class SignalEngineError(Exception):
    """Base class for engine errors."""


class ConfigError(SignalEngineError):
    """Configuration value out of range or inconsistent."""


class DataUnavailable(SignalEngineError):
    """A candle/price/balance fetch failed or returned too few points."""


class InvariantViolation(SignalEngineError, ValueError):
    """Malformed input from a collaborator (bad price, empty symbol, unordered candles)."""


def require_symbol(symbol: str) -> str:
    if not symbol or not symbol.strip():
        raise InvariantViolation("empty symbol")
    return symbol


def require_positive(name: str, value: float) -> float:
    if value is None or not value > 0:
        raise InvariantViolation(f"{name} must be positive, got {value!r}")
    return value


def require_non_negative(name: str, value: float) -> float:
    if value is None or value < 0:
        raise InvariantViolation(f"{name} must be non-negative, got {value!r}")
    return value
