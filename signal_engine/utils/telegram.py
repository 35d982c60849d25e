"""Telegram notifications. Never log token or chat_id."""

from __future__ import annotations
from typing import List

import requests

from signal_engine.core.logger import get_logger
from signal_engine.core.types import Signal

logger = get_logger("utils.telegram")

RULE = "━" * 30


def send_telegram(text: str, bot_token: str = "", chat_id: str = "") -> bool:
    """Send an HTML message to Telegram. Returns True on success; failures are logged, not retried."""
    if not bot_token or not chat_id:
        logger.debug("Telegram not configured, skipping message (len=%d)", len(text))
        return False
    try:
        url = f"https://api.telegram.org/bot{bot_token}/sendMessage"
        payload = {
            "chat_id": chat_id,
            "text": text,
            "parse_mode": "HTML",
            "disable_web_page_preview": True,
        }
        r = requests.post(url, json=payload, timeout=10)
        if r.status_code != 200:
            logger.warning("Telegram send failed: %s %s", r.status_code, r.text[:200])
            return False
        return True
    except requests.RequestException as e:
        logger.exception("Telegram error: %s", e)
        return False


class TelegramNotifier:
    """Renders engine events as Telegram messages."""

    def __init__(self, bot_token: str = "", chat_id: str = "", enabled: bool = False):
        self._bot_token = bot_token
        self._chat_id = chat_id
        self.enabled = enabled

    def send(self, text: str) -> bool:
        if not self.enabled:
            logger.debug("Telegram disabled, message not sent")
            return False
        return send_telegram(text, self._bot_token, self._chat_id)

    def notify_start(self) -> bool:
        return self.send(
            "🤖 <b>Signal Engine Started</b>\n\n"
            "✅ Monitoring for hot coins\n"
            "📊 You'll receive alerts when opportunities are found\n"
            "⚠️ All trades require manual execution"
        )

    def notify_hot_coins(self, coins: List[str]) -> bool:
        if not coins:
            return False
        lines = "".join(f"• {c}\n" for c in coins[:5])
        return self.send(
            "🔥 <b>Hot Coins Update</b>\n\n"
            f"Currently tracking these gainers:\n\n{lines}"
            "\n⏳ Analyzing for entry opportunities..."
        )

    @staticmethod
    def format_trade_alert(signal: Signal, stop_loss: float, take_profit: float, quantity: float) -> str:
        price = signal.price
        risk = price - stop_loss
        rr = (take_profit - price) / risk if risk > 0 else 0.0
        analysis = "".join(f"<code>{line.strip()}</code>\n" for line in signal.reason.split("\n"))
        return (
            f"🚨 <b>TRADE OPPORTUNITY</b> 🚨\n{RULE}\n\n"
            f"💎 <b>{signal.symbol}</b>\n"
            f"📊 Signal Strength: <b>{signal.strength * 100:.0f}%</b>\n"
            f"📈 Multi-Timeframe: <b>{signal.mtf_score * 100:.0f}%</b>\n"
            f"🧭 Regime: {signal.regime.value}\n\n"
            "<b>📋 TRADE SETUP:</b>\n"
            f"💰 Entry: <code>${price:.4f}</code>\n"
            f"📦 Quantity: <code>{quantity:.4f}</code> (~${quantity * price:.2f})\n"
            f"🛑 Stop Loss: <code>${stop_loss:.4f}</code> (-{(price - stop_loss) / price * 100:.1f}%)\n"
            f"🎯 Take Profit: <code>${take_profit:.4f}</code> (+{(take_profit - price) / price * 100:.1f}%)\n\n"
            f"⚖️ Risk/Reward: <b>1:{rr:.2f}</b>\n\n"
            f"<b>💡 ANALYSIS:</b>\n{analysis}"
            f"\n{RULE}\n⚠️ <b>MANUAL EXECUTION REQUIRED</b>"
        )

    def notify_trade_alert(self, signal: Signal, stop_loss: float, take_profit: float, quantity: float) -> bool:
        return self.send(self.format_trade_alert(signal, stop_loss, take_profit, quantity))

    def notify_position_opened(self, symbol: str, price: float, stop_loss: float, take_profit: float, reason: str) -> bool:
        return self.send(
            "📈 <b>POSITION OPENED</b>\n\n"
            f"Symbol: <b>{symbol}</b>\nEntry: ${price:.4f}\n"
            f"Stop Loss: ${stop_loss:.4f}\nTake Profit: ${take_profit:.4f}\n"
            f"\n💡 Reason: {reason}"
        )

    def notify_position_closed(self, symbol: str, pnl: float, pnl_pct: float, reason: str) -> bool:
        emoji = "❌" if pnl < 0 else "✅"
        return self.send(
            f"{emoji} <b>POSITION CLOSED</b>\n\n"
            f"Symbol: <b>{symbol}</b>\n"
            f"PnL: <b>{pnl:.2f} USDT ({pnl_pct:.2f}%)</b>\n"
            f"\n💡 Reason: {reason}"
        )

    def notify_trailing_stop(self, symbol: str, new_stop: float) -> bool:
        return self.send(f"🎯 <b>Trailing Stop Updated</b>\n\nSymbol: <b>{symbol}</b>\nNew Stop: ${new_stop:.4f}")

    def notify_daily_report(self, open_positions: int, period_pnl: float, unrealized_pnl: float) -> bool:
        emoji = "💰" if period_pnl > 0 else "📉" if period_pnl < 0 else "📊"
        return self.send(
            f"{emoji} <b>Daily Report</b>\n\n"
            f"Open Positions: {open_positions}\n"
            f"Daily PnL: <b>{period_pnl:.2f} USDT</b>\n"
            f"Unrealized PnL: {unrealized_pnl:.2f} USDT"
        )

    def notify_error(self, message: str) -> bool:
        return self.send(f"⚠️ <b>Error Alert</b>\n\n{message}")
