"""
Thin caller around the engine: screens tickers, scores hot coins, attaches a
risk envelope to accepted signals and alerts. Tracked positions are paper
positions; no orders are sent.
"""

from __future__ import annotations
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from signal_engine.core.config import Config
from signal_engine.core.errors import DataUnavailable
from signal_engine.core.logger import get_logger
from signal_engine.core.types import Action, Position, Signal, Ticker, utc_now
from signal_engine.market.base import MarketDataSource
from signal_engine.risk.manager import CloseDecision, RiskManager, TradePlan
from signal_engine.strategies.base import BaseScorer
from signal_engine.strategies.momentum import MomentumScorer
from signal_engine.strategies.screener import find_hot_coins
from signal_engine.utils.telegram import TelegramNotifier

logger = get_logger("bot")

ALERT_RETENTION = timedelta(minutes=30)
HOT_COIN_NOTICE_INTERVAL = timedelta(minutes=5)


class SignalBot:
    """One scan cycle at a time; the caller owns the schedule."""

    def __init__(
        self,
        config: Config,
        market: MarketDataSource,
        scorer: Optional[BaseScorer] = None,
        risk_manager: Optional[RiskManager] = None,
        notifier: Optional[TelegramNotifier] = None,
        now: Optional[datetime] = None,
    ):
        self.config = config
        self.market = market
        self.scorer = scorer or MomentumScorer(config, market)
        self.risk = risk_manager or RiskManager(config)
        self.notifier = notifier or TelegramNotifier(
            config.telegram_bot_token, config.telegram_chat_id, config.telegram_enabled
        )
        self.positions: Dict[str, Position] = {}
        self.alerted: Dict[str, datetime] = {}
        self.start_time = now or utc_now()
        self.last_report = self.start_time
        self._last_hot_notice: Optional[datetime] = None

    def run_cycle(self, now: Optional[datetime] = None) -> Optional[Signal]:
        """Refresh positions, scan for a new signal, then housekeeping."""
        now = now or utc_now()
        self.update_positions(now)
        signal = self.scan_once(now)
        self.check_daily_report(now)
        self.cleanup_alerts(now)
        return signal

    def scan_once(self, now: Optional[datetime] = None) -> Optional[Signal]:
        """Screen all tickers and alert on the first acceptable signal."""
        now = now or utc_now()
        try:
            tickers = self.market.get_tickers()
        except DataUnavailable as e:
            logger.error("Error fetching tickers: %s", e)
            self.notifier.notify_error(f"Failed to fetch tickers: {e}")
            return None

        hot = find_hot_coins(tickers, self.config)
        logger.info("Scanned %d tickers, %d hot coins", len(tickers), len(hot))
        for i, coin in enumerate(hot, 1):
            logger.info(
                "  %d. %s: %+.2f%% | volume $%.0f | price $%.4f",
                i, coin.symbol, coin.price_change_percent, coin.quote_volume, coin.last_price,
            )
        if hot and (self._last_hot_notice is None or now - self._last_hot_notice > HOT_COIN_NOTICE_INTERVAL):
            self.notifier.notify_hot_coins([f"{c.symbol}: +{c.price_change_percent:.2f}%" for c in hot[:5]])
            self._last_hot_notice = now
        return self.analyze_and_alert(hot, now)

    def analyze_and_alert(self, hot_coins: List[Ticker], now: Optional[datetime] = None) -> Optional[Signal]:
        """Score hot coins in rank order; at most one alert per cycle."""
        now = now or utc_now()
        gate = self.risk.can_open(self.positions)
        if not gate.allowed:
            logger.warning("Cannot open new positions: %s", gate.reason)
            return None
        if not self.risk.check_drawdown():
            return None

        cooldown = timedelta(minutes=self.config.alert_cooldown_minutes)
        for coin in hot_coins:
            last_alert = self.alerted.get(coin.symbol)
            if last_alert is not None and now - last_alert < cooldown:
                logger.info("Skipping %s, alerted %.0fs ago", coin.symbol, (now - last_alert).total_seconds())
                continue

            signal = self.scorer.generate_signal(coin, self.positions.keys())
            logger.info(
                "%s: %s | strength %.2f | MTF %.2f | %s",
                coin.symbol, signal.action.value, signal.strength, signal.mtf_score, signal.reason,
            )
            if signal.action != Action.BUY:
                continue
            if signal.strength < self.config.min_signal_strength:
                logger.info("Signal strength too low (%.2f < %.2f)", signal.strength, self.config.min_signal_strength)
                continue

            plan = self.risk.plan_trade(signal)
            self.send_trade_alert(signal, plan)
            self.alerted[coin.symbol] = now
            if self.config.track_signals:
                self.track(plan, signal, now)
            return signal
        return None

    def send_trade_alert(self, signal: Signal, plan: TradePlan) -> None:
        logger.info(
            "TRADE ALERT %s entry $%.4f qty %.4f (~$%.2f) SL $%.4f TP $%.4f R:R 1:%.2f",
            signal.symbol, plan.entry_price, plan.quantity, plan.notional,
            plan.stop_loss, plan.take_profit, plan.risk_reward,
        )
        win_rate, total = self.risk.win_rate()
        if total >= 10:
            logger.info(
                "Win rate %.1f%% over %d trades | Kelly %.1f%%",
                win_rate * 100, total, plan.kelly_fraction * 100,
            )
        if not plan.acceptable:
            logger.warning("Risk/reward below 1.5:1 for %s - consider skipping", signal.symbol)
        self.notifier.notify_trade_alert(signal, plan.stop_loss, plan.take_profit, plan.quantity)

    def track(self, plan: TradePlan, signal: Signal, now: Optional[datetime] = None) -> Position:
        """Start following a paper position for an alerted signal."""
        position = self.risk.open_position(plan, now=now)
        self.positions[position.symbol] = position
        self.notifier.notify_position_opened(
            position.symbol, position.entry_price, position.stop_loss, position.take_profit,
            signal.reason.split("\n")[0],
        )
        return position

    def update_positions(self, now: Optional[datetime] = None) -> None:
        """Refresh every tracked position and close those whose exit fired."""
        now = now or utc_now()
        for position in list(self.positions.values()):
            try:
                price = self.market.get_current_price(position.symbol)
            except DataUnavailable as e:
                logger.warning("No price for %s: %s", position.symbol, e)
                continue
            if self.risk.refresh_position(position, price, now):
                logger.info("Trailing stop for %s moved to $%.4f", position.symbol, position.trailing_stop_price)
                self.notifier.notify_trailing_stop(position.symbol, position.trailing_stop_price)
            decision = self.risk.should_close(position, now)
            if decision.close:
                self.close(position, decision, now)

    def close(self, position: Position, decision: CloseDecision, now: Optional[datetime] = None) -> None:
        logger.info("Closing %s: %s", position.symbol, decision.message)
        self.risk.close_position(position, now)
        self.notifier.notify_position_closed(position.symbol, position.pnl, position.pnl_pct, decision.message)
        self.positions.pop(position.symbol, None)

    def check_daily_report(self, now: Optional[datetime] = None) -> bool:
        """Send the period report and reset the period PnL once the interval elapsed."""
        now = now or utc_now()
        if now - self.last_report < timedelta(hours=self.config.report_interval_hours):
            return False
        unrealized = sum(p.pnl for p in self.positions.values())
        win_rate, total = self.risk.win_rate()
        logger.info(
            "DAILY REPORT: %d open | realized %.2f | unrealized %.2f | win rate %.1f%% (%d trades)",
            len(self.positions), self.risk.period_pnl, unrealized, win_rate * 100, total,
        )
        self.notifier.notify_daily_report(len(self.positions), self.risk.period_pnl, unrealized)
        self.last_report = now
        self.risk.reset_period_pnl()
        return True

    def cleanup_alerts(self, now: Optional[datetime] = None) -> None:
        """Forget alerts older than both the retention window and the cooldown."""
        now = now or utc_now()
        retention = max(ALERT_RETENTION, timedelta(minutes=self.config.alert_cooldown_minutes))
        for symbol, when in list(self.alerted.items()):
            if now - when > retention:
                del self.alerted[symbol]
