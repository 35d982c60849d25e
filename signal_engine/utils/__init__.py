"""Utils: Telegram, timeframes."""

from signal_engine.utils.telegram import send_telegram, TelegramNotifier
from signal_engine.utils.timeframes import timeframe_minutes, sort_timeframes

__all__ = ["send_telegram", "TelegramNotifier", "timeframe_minutes", "sort_timeframes"]
