#!/usr/bin/env python3
"""
Signal Engine CLI: scan | run
Usage:
  python main.py scan [--config config.yaml]
  python main.py run [--config config.yaml]
"""

from __future__ import annotations
import argparse
import logging
import sys
import time
from pathlib import Path

# Project root
ROOT = Path(__file__).resolve().parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from signal_engine.bot import SignalBot
from signal_engine.core.config import Config, load_config
from signal_engine.core.errors import ConfigError, DataUnavailable
from signal_engine.core.logger import setup_logging
from signal_engine.market.binance_spot import BinanceSpotClient
from signal_engine.risk.manager import RiskManager

logger = logging.getLogger("signal_engine")


def build_bot(config: Config) -> SignalBot:
    """Wire market data, risk manager and bot from config."""
    market = BinanceSpotClient(
        config.binance_api_key,
        config.binance_api_secret,
        testnet=config.use_testnet,
    )
    initial_balance = 0.0
    if config.binance_api_key and config.binance_api_secret:
        try:
            initial_balance = market.get_balances().get(config.quote_asset, 0.0)
            logger.info("Initial %s balance: %.2f", config.quote_asset, initial_balance)
        except DataUnavailable as e:
            logger.warning("Could not fetch balances, drawdown guard disabled: %s", e)
    return SignalBot(config, market, risk_manager=RiskManager(config, initial_balance))


def run_scan(config: Config) -> int:
    """Single screening and scoring pass."""
    bot = build_bot(config)
    signal = bot.scan_once()
    if signal is None:
        print("No signal this cycle.")
        return 0
    print(f"\n--- Signal: {signal.symbol} ---")
    print(f"Price: {signal.price:.4f}")
    print(f"Strength: {signal.strength * 100:.0f}% | MTF: {signal.mtf_score * 100:.0f}% | Regime: {signal.regime.value}")
    print(signal.reason)
    return 0


def run_loop(config: Config) -> int:
    """Scan on a fixed interval until interrupted."""
    bot = build_bot(config)
    logger.info(
        "Signal engine starting | quote=%s | min volume $%.0f | min change %.1f%% | MTF=%s | interval %ds",
        config.quote_asset, config.min_volume_usdt, config.min_price_change_pct,
        config.use_multi_timeframe, config.scan_interval_seconds,
    )
    bot.notifier.notify_start()
    while True:
        try:
            bot.run_cycle()
            time.sleep(config.scan_interval_seconds)
        except KeyboardInterrupt:
            logger.info("Shutdown by user")
            bot.notifier.send("🛑 Signal engine stopped (user request).")
            break
        except Exception as e:
            logger.exception("Scan loop error: %s", e)
            bot.notifier.notify_error(str(e))
            time.sleep(5)
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Hot-coin signal engine CLI")
    parser.add_argument("mode", choices=["scan", "run"], help="Single scan or continuous loop")
    parser.add_argument("--config", type=Path, default=None, help="Path to config.yaml")
    args = parser.parse_args()
    try:
        config = load_config(args.config, ROOT)
    except ConfigError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2
    setup_logging(config.log_level, config.log_dir, config.log_file)
    if args.mode == "scan":
        return run_scan(config)
    return run_loop(config)


if __name__ == "__main__":
    sys.exit(main())
