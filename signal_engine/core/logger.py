"""
Logging setup for the engine and its runner. Console plus optional file.
"""

from __future__ import annotations
import logging
import sys
from pathlib import Path
from typing import Optional

LOGGER_NAME = "signal_engine"


def setup_logging(
    level: str = "INFO",
    log_dir: Optional[Path] = None,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    Configure the signal_engine logger: console and optional file.
    Never log API keys or Telegram tokens.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    root = logging.getLogger(LOGGER_NAME)
    root.setLevel(log_level)
    root.handlers.clear()

    fmt = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    date_fmt = "%Y-%m-%d %H:%M:%S"
    formatter = logging.Formatter(fmt, datefmt=date_fmt)

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(formatter)
    root.addHandler(console)

    if log_dir and log_file:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_dir / log_file, encoding="utf-8")
        fh.setFormatter(formatter)
        root.addHandler(fh)

    return root


def get_logger(area: str) -> logging.Logger:
    """Child of the signal_engine logger, e.g. get_logger("risk") -> signal_engine.risk."""
    return logging.getLogger(f"{LOGGER_NAME}.{area}")
