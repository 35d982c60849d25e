"""
Risk manager: entry gate, dynamic sizing, ATR stops, profit-tightening
trailing stops, close priority and the trade ledger behind win rate / Kelly.
"""

from __future__ import annotations
import threading
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Deque, List, Optional, Sized, Tuple

from signal_engine.analytics.metrics import PerformanceMetrics, compute_metrics, kelly_fraction, win_rate
from signal_engine.core.config import Config
from signal_engine.core.errors import require_positive, require_symbol
from signal_engine.core.logger import get_logger
from signal_engine.core.types import CloseReason, Position, Side, Signal, TradeResult, utc_now

logger = get_logger("risk")

LEDGER_SIZE = 50
MIN_STOP_PCT = 0.015
MAX_STOP_PCT = 0.04
MIN_TAKE_PROFIT_PCT = 0.03
MAX_TAKE_PROFIT_PCT = 0.10
MIN_RISK_REWARD = 1.5
STALL_AFTER = timedelta(hours=4)
STALL_MIN_PNL_PCT = 1.0
MAX_HOLD = timedelta(hours=24)


@dataclass
class RiskResult:
    """Result of risk check: allowed or rejected + reason."""
    allowed: bool
    quantity: float = 0.0
    reason: str = ""


@dataclass
class TradePlan:
    """Risk envelope attached to an accepted signal."""
    symbol: str
    entry_price: float
    quantity: float
    stop_loss: float
    take_profit: float
    risk_reward: float
    acceptable: bool
    kelly_fraction: float

    @property
    def notional(self) -> float:
        return self.quantity * self.entry_price


@dataclass
class CloseDecision:
    """Whether an open position must close, and why."""
    close: bool
    reason: Optional[CloseReason] = None
    message: str = ""


class RiskManager:
    """
    Owns the trade ledger (last 50 results) and the period PnL. Both are
    guarded by one lock so positions can be refreshed from several threads.
    """

    def __init__(self, config: Config, initial_balance: float = 0.0, ledger_size: int = LEDGER_SIZE):
        self.config = config
        self._initial_balance = max(0.0, initial_balance)
        self._trades: Deque[TradeResult] = deque(maxlen=ledger_size)
        self._period_pnl = 0.0
        self._total_realized = 0.0
        self._peak_equity = self._initial_balance
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Entry gate

    def can_open(self, open_positions: Sized) -> RiskResult:
        """Reject on max positions, period loss cap, or 4+ losses in the last 5 trades."""
        if len(open_positions) >= self.config.max_positions:
            return RiskResult(allowed=False, reason="Maximum positions reached")
        with self._lock:
            period_pnl = self._period_pnl
            recent = list(self._trades)[-5:]
        if period_pnl <= -self.config.max_daily_loss_usdt:
            logger.warning("Daily loss cap reached: %.2f", period_pnl)
            return RiskResult(allowed=False, reason=f"Daily loss limit reached: {period_pnl:.2f} USDT")
        if len(recent) == 5 and sum(1 for t in recent if not t.success) >= 4:
            logger.warning("Loss streak: %d of last 5 trades lost", sum(1 for t in recent if not t.success))
            return RiskResult(allowed=False, reason="High loss rate detected - pausing to protect capital")
        return RiskResult(allowed=True)

    def equity(self) -> float:
        with self._lock:
            return self._initial_balance + self._total_realized

    def check_drawdown(self) -> bool:
        """Return False if equity has fallen max_drawdown_pct below its peak."""
        with self._lock:
            peak = self._peak_equity
            current = self._initial_balance + self._total_realized
        if peak <= 0:
            return True
        dd_pct = (peak - current) / peak * 100
        if dd_pct >= self.config.max_drawdown_pct:
            logger.warning("Max drawdown exceeded: %.2f%% >= %.2f%%", dd_pct, self.config.max_drawdown_pct)
            return False
        return True

    # ------------------------------------------------------------------
    # Sizing and stops

    def _recent_multiplier(self) -> float:
        with self._lock:
            recent = list(self._trades)[-3:]
        if len(recent) < 3:
            return 1.0
        wins = sum(1 for t in recent if t.success)
        if wins == 3:
            return 1.2
        if wins == 0:
            return 0.6
        return 1.0

    def calculate_position_size(self, price: float, signal_strength: float, volatility_pct: float) -> float:
        """
        Quantity for a new position: base size scaled by signal strength,
        volatility (ATR % of price) and the last three results, kept within
        30%-150% of base.
        """
        require_positive("price", price)
        base = self.config.position_size_usdt

        if signal_strength >= 0.9:
            strength_mult = 1.0
        elif signal_strength >= 0.7:
            strength_mult = 0.75
        else:
            strength_mult = 0.5

        if volatility_pct > 5.0:
            volatility_mult = 0.5
        elif volatility_pct > 3.0:
            volatility_mult = 0.75
        else:
            volatility_mult = 1.0

        size = base * strength_mult * volatility_mult * self._recent_multiplier()
        size = min(base * 1.5, max(base * 0.3, size))
        return size / price

    def calculate_stop_loss(self, entry_price: float, side: Side = Side.BUY, atr: float = 0.0) -> float:
        """2 x ATR distance clamped to 1.5%-4%, or the static percentage without ATR."""
        require_positive("entry_price", entry_price)
        if atr > 0:
            distance = min(MAX_STOP_PCT, max(MIN_STOP_PCT, 2.0 * atr / entry_price))
        else:
            distance = self.config.stop_loss_pct / 100.0
        if side == Side.BUY:
            return entry_price * (1 - distance)
        return entry_price * (1 + distance)

    def calculate_take_profit(self, entry_price: float, side: Side = Side.BUY, signal_strength: float = 0.7) -> float:
        """Configured target scaled by signal strength, clamped to 3%-10%."""
        require_positive("entry_price", entry_price)
        if signal_strength >= 0.9:
            multiplier = 1.5
        elif signal_strength < 0.7:
            multiplier = 0.75
        else:
            multiplier = 1.0
        target = self.config.take_profit_pct / 100.0 * multiplier
        target = min(MAX_TAKE_PROFIT_PCT, max(MIN_TAKE_PROFIT_PCT, target))
        if side == Side.BUY:
            return entry_price * (1 + target)
        return entry_price * (1 - target)

    @staticmethod
    def analyze_risk_reward(entry_price: float, stop_loss: float, take_profit: float) -> Tuple[float, bool]:
        """(reward / risk, acceptable at >= 1.5). Zero risk is never acceptable."""
        risk = abs(entry_price - stop_loss)
        if risk == 0:
            return 0.0, False
        ratio = abs(take_profit - entry_price) / risk
        return ratio, ratio >= MIN_RISK_REWARD

    def plan_trade(self, signal: Signal, side: Side = Side.BUY) -> TradePlan:
        """Size, stops and risk/reward for a signal, using its ATR and strength."""
        price = require_positive("price", signal.price)
        quantity = self.calculate_position_size(price, signal.strength, signal.volatility_pct)
        stop = self.calculate_stop_loss(price, side, signal.atr)
        target = self.calculate_take_profit(price, side, signal.strength)
        ratio, acceptable = self.analyze_risk_reward(price, stop, target)
        return TradePlan(
            symbol=signal.symbol,
            entry_price=price,
            quantity=quantity,
            stop_loss=stop,
            take_profit=target,
            risk_reward=ratio,
            acceptable=acceptable,
            kelly_fraction=self.kelly_fraction(),
        )

    # ------------------------------------------------------------------
    # Position lifecycle

    def open_position(self, plan: TradePlan, side: Side = Side.BUY, now: Optional[datetime] = None) -> Position:
        """Position for a plan, stamped with its true entry time."""
        require_symbol(plan.symbol)
        require_positive("quantity", plan.quantity)
        return Position(
            symbol=plan.symbol,
            side=side,
            entry_price=require_positive("entry_price", plan.entry_price),
            quantity=plan.quantity,
            stop_loss=plan.stop_loss,
            take_profit=plan.take_profit,
            entry_time=now or utc_now(),
            trailing_stop_enabled=self.config.trailing_stop_enabled,
        )

    def refresh_position(self, position: Position, price: float, now: Optional[datetime] = None) -> bool:
        """Apply a new price: PnL, highest price, trailing stop. True if the trailing stop moved."""
        require_positive("price", price)
        position.current_price = price
        position.last_update_time = now or utc_now()
        if position.side == Side.BUY:
            position.pnl = (price - position.entry_price) * position.quantity
            position.pnl_pct = (price - position.entry_price) / position.entry_price * 100
        else:
            position.pnl = (position.entry_price - price) * position.quantity
            position.pnl_pct = (position.entry_price - price) / position.entry_price * 100
        return self.update_trailing_stop(position)

    def update_trailing_stop(self, position: Position) -> bool:
        """
        Ratchet the trailing stop of a long position on a new high. The
        distance tightens to 1.25% above 5% profit and 1% above 8%; the stop
        never moves down.
        """
        if not (self.config.trailing_stop_enabled and position.trailing_stop_enabled):
            return False
        if position.side != Side.BUY or position.current_price <= position.highest_price:
            return False

        position.highest_price = position.current_price
        profit = (position.highest_price - position.entry_price) / position.entry_price
        if profit > 0.08:
            distance = 0.01
        elif profit > 0.05:
            distance = 0.0125
        else:
            distance = self.config.trailing_stop_pct / 100.0

        new_stop = position.highest_price * (1 - distance)
        if new_stop > position.trailing_stop_price:
            position.trailing_stop_price = new_stop
            return True
        return False

    def should_close(self, position: Position, now: Optional[datetime] = None) -> CloseDecision:
        """First match of: trailing stop, stop loss, take profit, 4h stall, 24h limit."""
        price = position.current_price
        trailing_active = self.config.trailing_stop_enabled and position.trailing_stop_enabled
        if trailing_active and position.trailing_stop_price > 0 and price <= position.trailing_stop_price:
            return CloseDecision(True, CloseReason.TRAILING_STOP,
                                 f"Trailing stop hit at ${position.trailing_stop_price:.4f}")

        if position.side == Side.BUY:
            stop_hit = price <= position.stop_loss
            target_hit = price >= position.take_profit
        else:
            stop_hit = price >= position.stop_loss
            target_hit = price <= position.take_profit
        if stop_hit:
            return CloseDecision(True, CloseReason.STOP_LOSS, "Stop loss hit")
        if target_hit:
            return CloseDecision(True, CloseReason.TAKE_PROFIT, "Take profit hit")

        age = (now or utc_now()) - position.entry_time
        hours = age.total_seconds() / 3600
        if age > STALL_AFTER and position.pnl_pct < STALL_MIN_PNL_PCT:
            return CloseDecision(True, CloseReason.TIME_STALL,
                                 f"Time-based exit: open {hours:.1f} hours with minimal profit")
        if age > MAX_HOLD:
            return CloseDecision(True, CloseReason.TIME_LIMIT, f"Time-based exit: open {hours:.1f} hours")
        return CloseDecision(False)

    def close_position(self, position: Position, now: Optional[datetime] = None) -> TradeResult:
        """Realise the position's PnL into the ledger and the period PnL."""
        closed_at = now or utc_now()
        position.realized_pnl = position.pnl
        duration = max(0.0, (closed_at - position.entry_time).total_seconds() / 60)
        result = self.record_trade(position.symbol, position.pnl, duration)
        self.update_period_pnl(position.pnl)
        logger.info(
            "Closed %s: PnL %.2f (%.2f%%) after %.0f min",
            position.symbol, position.pnl, position.pnl_pct, duration,
        )
        return result

    # ------------------------------------------------------------------
    # Ledger and statistics

    def record_trade(self, symbol: str, pnl: float, duration_minutes: float) -> TradeResult:
        """Append a result to the bounded ledger (oldest evicted)."""
        result = TradeResult(symbol=require_symbol(symbol), pnl=pnl, duration_minutes=duration_minutes)
        with self._lock:
            self._trades.append(result)
            self._total_realized += pnl
            self._peak_equity = max(self._peak_equity, self._initial_balance + self._total_realized)
        return result

    def update_period_pnl(self, pnl: float) -> None:
        with self._lock:
            self._period_pnl += pnl

    @property
    def period_pnl(self) -> float:
        with self._lock:
            return self._period_pnl

    def reset_period_pnl(self) -> None:
        """Start a new reporting period."""
        with self._lock:
            self._period_pnl = 0.0

    @property
    def initial_balance(self) -> float:
        return self._initial_balance

    def trades(self) -> List[TradeResult]:
        with self._lock:
            return list(self._trades)

    def win_rate(self) -> Tuple[float, int]:
        """(win rate, number of recorded trades)."""
        trades = self.trades()
        return win_rate([t.pnl for t in trades]), len(trades)

    def kelly_fraction(self) -> float:
        return kelly_fraction([t.pnl for t in self.trades()])

    def performance(self) -> PerformanceMetrics:
        return compute_metrics(self.trades())
