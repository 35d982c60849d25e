"""
Load configuration from config.yaml and .env. API keys and tokens only from env.
"""

from __future__ import annotations
import os
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv

from signal_engine.core.errors import ConfigError


def _env_path(project_root: Optional[Path] = None) -> Path:
    root = project_root or Path(__file__).resolve().parents[2]
    return root / ".env"


def load_dotenv_if_exists(project_root: Optional[Path] = None) -> None:
    """Load .env from project root if present."""
    path = _env_path(project_root)
    if path.exists():
        load_dotenv(path)


def load_config(config_path: Optional[Path] = None, project_root: Optional[Path] = None) -> "Config":
    """Load config.yaml and overlay with env. Returns a validated Config."""
    load_dotenv_if_exists(project_root)
    root = project_root or Path(__file__).resolve().parents[2]
    path = config_path or root / "config.yaml"
    data: dict[str, Any] = {}
    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

    def env(key: str, default: str = "") -> str:
        return os.getenv(key, default).strip()

    def env_bool(key: str, default: bool = False) -> bool:
        return os.getenv(key, str(default)).lower() in ("true", "1", "yes")

    def env_int(key: str, default: int = 0) -> int:
        try:
            return int(os.getenv(key, str(default)))
        except ValueError:
            return default

    def env_float(key: str, default: float = 0.0) -> float:
        try:
            return float(os.getenv(key, str(default)))
        except ValueError:
            return default

    api = data.get("api", {})
    strategy = data.get("strategy", {})
    risk = data.get("risk", {})
    telegram = data.get("telegram", {})
    bot = data.get("bot", {})
    logging_cfg = data.get("logging", {})

    return Config(
        binance_api_key=env("BINANCE_API_KEY"),
        binance_api_secret=env("BINANCE_SECRET_KEY") or env("BINANCE_API_SECRET"),
        use_testnet=env_bool("BINANCE_TESTNET", api.get("use_testnet", True)),
        # Strategy
        max_positions=env_int("MAX_POSITIONS", strategy.get("max_positions", 3)),
        position_size_usdt=env_float("POSITION_SIZE_USDT", strategy.get("position_size_usdt", 100.0)),
        stop_loss_pct=env_float("STOP_LOSS_PCT", strategy.get("stop_loss_percent", 2.0)),
        take_profit_pct=env_float("TAKE_PROFIT_PCT", strategy.get("take_profit_percent", 5.0)),
        trailing_stop_pct=env_float("TRAILING_STOP_PCT", strategy.get("trailing_stop_percent", 2.0)),
        trailing_stop_enabled=env_bool("TRAILING_STOP_ENABLED", strategy.get("trailing_stop_enabled", True)),
        min_volume_usdt=env_float("MIN_VOLUME_USDT", strategy.get("min_volume_usdt", 1_000_000.0)),
        min_price_change_pct=env_float("MIN_PRICE_CHANGE_PCT", strategy.get("min_price_change_percent", 3.0)),
        use_multi_timeframe=env_bool("USE_MULTI_TIMEFRAME", strategy.get("use_multi_timeframe", True)),
        min_signal_strength=env_float("MIN_SIGNAL_STRENGTH", strategy.get("min_signal_strength", 0.3)),
        quote_asset=env("QUOTE_ASSET", strategy.get("quote_asset", "USDT")).upper(),
        max_hot_coins=env_int("MAX_HOT_COINS", strategy.get("max_hot_coins", 10)),
        # Risk
        max_daily_loss_usdt=env_float("MAX_DAILY_LOSS_USDT", risk.get("max_daily_loss_usdt", 50.0)),
        max_drawdown_pct=env_float("MAX_DRAWDOWN_PCT", risk.get("max_drawdown_percent", 20.0)),
        # Bot cadence
        scan_interval_seconds=env_int("SCAN_INTERVAL_SECONDS", bot.get("scan_interval_seconds", 30)),
        alert_cooldown_minutes=env_int("ALERT_COOLDOWN_MINUTES", bot.get("alert_cooldown_minutes", 10)),
        report_interval_hours=env_int("REPORT_INTERVAL_HOURS", bot.get("report_interval_hours", 24)),
        track_signals=env_bool("TRACK_SIGNALS", bot.get("track_signals", False)),
        # Telegram (env only for token/chat id)
        telegram_bot_token=env("TELEGRAM_BOT_TOKEN"),
        telegram_chat_id=env("TELEGRAM_CHAT_ID"),
        telegram_enabled=env_bool("TELEGRAM_ENABLED", telegram.get("enabled", False)),
        # Logging
        log_level=env("LOG_LEVEL", logging_cfg.get("level", "INFO")),
        log_dir=Path(env("LOG_DIR", logging_cfg.get("dir", "logs"))),
        log_file=env("LOG_FILE", logging_cfg.get("file", "signal_engine.log")),
    )


class Config:
    """Validated, read-only settings shared by the scorer, risk manager and bot."""

    def __init__(
        self,
        binance_api_key: str = "",
        binance_api_secret: str = "",
        use_testnet: bool = True,
        max_positions: int = 3,
        position_size_usdt: float = 100.0,
        stop_loss_pct: float = 2.0,
        take_profit_pct: float = 5.0,
        trailing_stop_pct: float = 2.0,
        trailing_stop_enabled: bool = True,
        min_volume_usdt: float = 1_000_000.0,
        min_price_change_pct: float = 3.0,
        use_multi_timeframe: bool = True,
        min_signal_strength: float = 0.3,
        quote_asset: str = "USDT",
        max_hot_coins: int = 10,
        max_daily_loss_usdt: float = 50.0,
        max_drawdown_pct: float = 20.0,
        scan_interval_seconds: int = 30,
        alert_cooldown_minutes: int = 10,
        report_interval_hours: int = 24,
        track_signals: bool = False,
        telegram_bot_token: str = "",
        telegram_chat_id: str = "",
        telegram_enabled: bool = False,
        log_level: str = "INFO",
        log_dir: Optional[Path] = None,
        log_file: str = "signal_engine.log",
    ):
        self.binance_api_key = binance_api_key
        self.binance_api_secret = binance_api_secret
        self.use_testnet = use_testnet
        self.max_positions = max_positions
        self.position_size_usdt = position_size_usdt
        self.stop_loss_pct = stop_loss_pct
        self.take_profit_pct = take_profit_pct
        self.trailing_stop_pct = trailing_stop_pct
        self.trailing_stop_enabled = trailing_stop_enabled
        self.min_volume_usdt = min_volume_usdt
        self.min_price_change_pct = min_price_change_pct
        self.use_multi_timeframe = use_multi_timeframe
        self.min_signal_strength = min_signal_strength
        self.quote_asset = quote_asset
        self.max_hot_coins = max_hot_coins
        self.max_daily_loss_usdt = max_daily_loss_usdt
        self.max_drawdown_pct = max_drawdown_pct
        self.scan_interval_seconds = scan_interval_seconds
        self.alert_cooldown_minutes = alert_cooldown_minutes
        self.report_interval_hours = report_interval_hours
        self.track_signals = track_signals
        self.telegram_bot_token = telegram_bot_token
        self.telegram_chat_id = telegram_chat_id
        self.telegram_enabled = telegram_enabled
        self.log_level = log_level
        self.log_dir = Path(log_dir) if log_dir else Path("logs")
        self.log_file = log_file
        self.validate()

    def validate(self) -> None:
        """Raise ConfigError on values the engine cannot work with."""
        if self.max_positions < 1:
            raise ConfigError(f"max_positions must be >= 1, got {self.max_positions}")
        if self.position_size_usdt <= 0:
            raise ConfigError(f"position_size_usdt must be > 0, got {self.position_size_usdt}")
        for name in ("stop_loss_pct", "take_profit_pct", "trailing_stop_pct"):
            value = getattr(self, name)
            if not 0 < value < 100:
                raise ConfigError(f"{name} must be in (0, 100), got {value}")
        if self.min_volume_usdt < 0 or self.min_price_change_pct < 0:
            raise ConfigError("volume and price-change filters must be >= 0")
        if not 0 <= self.min_signal_strength <= 1:
            raise ConfigError(f"min_signal_strength must be in [0, 1], got {self.min_signal_strength}")
        if self.max_daily_loss_usdt <= 0:
            raise ConfigError(f"max_daily_loss_usdt must be > 0, got {self.max_daily_loss_usdt}")
        if not 0 < self.max_drawdown_pct <= 100:
            raise ConfigError(f"max_drawdown_pct must be in (0, 100], got {self.max_drawdown_pct}")
        if self.max_hot_coins < 1 or self.scan_interval_seconds < 1:
            raise ConfigError("max_hot_coins and scan_interval_seconds must be >= 1")
        if not self.quote_asset:
            raise ConfigError("quote_asset must not be empty")
