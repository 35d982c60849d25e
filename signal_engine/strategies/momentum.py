"""
Momentum scorer: weighted checklist over oscillators, volume, trend,
multi-timeframe and regime readings, with a regime-adaptive threshold.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from signal_engine.core.config import Config
from signal_engine.core.errors import (
    DataUnavailable,
    require_non_negative,
    require_positive,
    require_symbol,
)
from signal_engine.core.logger import get_logger
from signal_engine.core.types import (
    Action,
    Regime,
    Signal,
    Ticker,
    VolumeProfile,
    utc_now,
    validate_candles,
)
from signal_engine.indicators import (
    analyze_volume_profile,
    atr,
    bollinger_bands,
    detect_market_regime,
    detect_volume_spike,
    ema,
    macd,
    rsi,
    sma,
)
from signal_engine.market.base import MarketDataSource
from signal_engine.strategies.base import BaseScorer
from signal_engine.strategies.history import PriceHistory
from signal_engine.strategies.multi_timeframe import MultiTimeframeAggregator, MultiTimeframeResult

logger = get_logger("strategies.momentum")

REGIME_THRESHOLDS = {
    Regime.VOLATILE: 0.75,
    Regime.TRENDING: 0.55,
    Regime.RANGING: 0.70,
}
DEFAULT_THRESHOLD = 0.60
MTF_DISABLED_SCORE = 0.6


@dataclass
class MarketContext:
    """Regime, volume profile and ATR from medium-interval candles."""
    regime: Regime = Regime.UNKNOWN
    regime_confidence: float = 0.5
    volume_profile: VolumeProfile = VolumeProfile.NEUTRAL
    volume_strength: float = 0.5
    atr: float = 0.0


@dataclass
class ScoreCard:
    """Points earned against the checklist, with the reasons either way."""
    score: float = 0.0
    max_score: float = 0.0
    reasons: List[str] = field(default_factory=list)
    missing: List[str] = field(default_factory=list)

    def earn(self, points: float, available: float = 0.0, reason: str = "") -> None:
        self.score += points
        self.max_score += available
        if reason:
            self.reasons.append(reason)

    @property
    def strength(self) -> float:
        if self.max_score <= 0:
            return 0.0
        return min(1.0, max(0.0, self.score / self.max_score))


def threshold_for(regime: Regime) -> float:
    """Acceptance threshold for a regime."""
    return REGIME_THRESHOLDS.get(regime, DEFAULT_THRESHOLD)


class MomentumScorer(BaseScorer):
    """
    Scores a ticker using its rolling 1-minute-equivalent history plus
    candle-derived context. Only the per-symbol history is kept between calls.
    """

    MIN_HISTORY = 20
    BACKFILL_INTERVAL = "1m"
    BACKFILL_LIMIT = 50
    CONTEXT_INTERVAL = "5m"
    CONTEXT_LIMIT = 50

    def __init__(
        self,
        config: Config,
        market: MarketDataSource,
        history: Optional[PriceHistory] = None,
        aggregator: Optional[MultiTimeframeAggregator] = None,
    ):
        self.config = config
        self.market = market
        self.history = history or PriceHistory()
        self.aggregator = aggregator or MultiTimeframeAggregator(market)

    def generate_signal(self, ticker: Ticker, open_symbols: Iterable[str] = ()) -> Signal:
        symbol = require_symbol(ticker.symbol)
        require_positive("last_price", ticker.last_price)
        require_non_negative("volume", ticker.volume)

        with self.history.lock(symbol):
            length = self.history.append(symbol, ticker.last_price, ticker.volume)
            if symbol in set(open_symbols):
                logger.info("Skipping %s: already positioned", symbol)
                return self._hold(ticker, "Already positioned")
            if length < self.MIN_HISTORY and not self._backfill(ticker):
                return self._hold(ticker, "Insufficient history: could not fetch recent candles")
            prices, volumes = self.history.snapshot(symbol)

        context = self.market_context(symbol)
        if self.config.use_multi_timeframe:
            mtf = self.aggregator.analyze(symbol)
        else:
            mtf = MultiTimeframeResult(score=MTF_DISABLED_SCORE)
        return self.score(ticker, prices, volumes, context, mtf)

    def market_context(self, symbol: str) -> MarketContext:
        """Regime/volume-profile/ATR; neutral defaults when candles are unavailable."""
        try:
            df = self.market.get_candles(symbol, self.CONTEXT_INTERVAL, self.CONTEXT_LIMIT)
        except DataUnavailable as e:
            logger.warning("No %s candles for %s, using neutral context: %s", self.CONTEXT_INTERVAL, symbol, e)
            return MarketContext()
        if df is None or len(df) == 0:
            return MarketContext()
        validate_candles(df)
        regime, confidence = detect_market_regime(df)
        profile, profile_strength = analyze_volume_profile(df, 20)
        logger.info(
            "%s regime %s (%.0f%% confidence) | volume profile %s (%.0f%%)",
            symbol, regime.value, confidence * 100, profile.value, profile_strength * 100,
        )
        return MarketContext(
            regime=regime,
            regime_confidence=confidence,
            volume_profile=profile,
            volume_strength=profile_strength,
            atr=atr(df, 14),
        )

    def score(
        self,
        ticker: Ticker,
        prices: List[float],
        volumes: List[float],
        context: MarketContext,
        mtf: MultiTimeframeResult,
    ) -> Signal:
        """Evaluate the checklist and decide BUY/HOLD."""
        cfg = self.config
        price = ticker.last_price

        rsi_value = rsi(prices, 14) if len(prices) >= 15 else 50.0
        sma20 = sma(prices, 20)
        ema12 = ema(prices, 12)
        ema26 = ema(prices, 26)
        macd_value, macd_signal, histogram = macd(prices)
        upper, middle, lower = bollinger_bands(prices, 20, 2.0)
        if len(volumes) > 1:
            spike, volume_ratio = detect_volume_spike(volumes[:-1], volumes[-1])
        else:
            spike, volume_ratio = False, 1.0

        momentum_strong = ticker.price_change_percent >= cfg.min_price_change_pct
        volume_good = ticker.quote_volume >= cfg.min_volume_usdt
        volume_confirmed = spike and volume_ratio > 1.5
        accumulation = context.volume_profile == VolumeProfile.ACCUMULATION
        rsi_healthy = 40 <= rsi_value <= 75
        rsi_optimal = 45 <= rsi_value <= 65
        rsi_not_extreme = 5 < rsi_value < 95
        above_sma = price > sma20 * 0.98
        bullish_ema = ema12 > ema26
        macd_bullish = macd_value > macd_signal
        macd_positive = histogram > 0
        inside_bands = lower < price < upper
        above_mid = price > middle
        mtf_bullish = mtf.score > 0.50
        mtf_strong = mtf.score > 0.65
        regime_favorable = context.regime in (Regime.TRENDING, Regime.TRANSITIONING)
        regime_confident = context.regime_confidence > 0.6

        logger.debug(
            "%s criteria: momentum=%s volume=%s spike=%s(%.1fx) rsi=%.1f sma=%s ema=%s macd=%s/%s bb=%s/%s mtf=%.2f regime=%s",
            ticker.symbol, momentum_strong, volume_good, spike, volume_ratio, rsi_value, above_sma,
            bullish_ema, macd_bullish, macd_positive, inside_bands, above_mid, mtf.score, context.regime.value,
        )

        card = ScoreCard()
        card.earn(15 if momentum_strong else 0, 15,
                  f"+{ticker.price_change_percent:.1f}% momentum" if momentum_strong else "")
        card.earn(15 if volume_good else 0, 20,
                  f"${ticker.quote_volume:,.0f} volume" if volume_good else "")
        if volume_good and volume_confirmed:
            card.earn(5, 0, f"{volume_ratio:.1f}x volume spike")
        card.earn(5 if accumulation else 0, 5, "accumulation phase" if accumulation else "")
        card.max_score += 15
        if rsi_healthy and rsi_not_extreme:
            label = "optimal" if rsi_optimal else "healthy"
            card.earn(15 if rsi_optimal else 10, 0, f"{label} RSI ({rsi_value:.1f})")
        card.max_score += 20
        if mtf_bullish:
            label = "strong" if mtf_strong else "bullish"
            card.earn(20 if mtf_strong else 10, 0, f"{label} MTF ({mtf.score:.2f})")
        card.earn(5 if above_sma else 0, 5, "above SMA20" if above_sma else "")
        card.earn(5 if bullish_ema else 0, 5, "bullish EMA crossover" if bullish_ema else "")
        macd_ok = macd_bullish and macd_positive
        card.earn(10 if macd_ok else 0, 10, "MACD bullish" if macd_ok else "")
        bands_ok = inside_bands and above_mid
        card.earn(5 if bands_ok else 0, 5, "upper half of Bollinger range" if bands_ok else "")
        card.max_score += 10
        if regime_favorable and regime_confident:
            card.earn(10, 0, f"{context.regime.value} regime")
        elif context.regime == Regime.VOLATILE:
            card.earn(-5, 0, "volatile market (-5pts)")
        elif context.regime == Regime.RANGING:
            card.earn(-3, 0)

        strength = card.strength
        threshold = threshold_for(context.regime)
        logger.info(
            "%s score %.0f/%.0f (%.1f%%), threshold %.0f%% (%s)",
            ticker.symbol, card.score, card.max_score, strength * 100, threshold * 100, context.regime.value,
        )

        if not rsi_not_extreme:
            reason = f"Extreme RSI detected ({rsi_value:.1f}) - rejecting signal for safety"
            logger.warning("%s rejected: %s", ticker.symbol, reason)
            return self._build(ticker, Action.HOLD, strength, mtf, context, reason)

        if strength >= threshold:
            reason = (
                f"Score: {strength * 100:.0f}% | " + ", ".join(card.reasons)
                + f"\nRSI: {rsi_value:.1f} | BB: ${lower:.4f}-${upper:.4f}"
                + f"\nMTF: {mtf.score * 100:.0f}% ({mtf.breakdown()})"
            )
            logger.info("%s BUY signal, strength %.0f%%", ticker.symbol, strength * 100)
            return self._build(ticker, Action.BUY, strength, mtf, context, reason)

        if not momentum_strong:
            card.missing.append(f"weak momentum ({ticker.price_change_percent:.2f}%)")
        if not volume_good:
            card.missing.append(f"low volume (${ticker.quote_volume:,.0f})")
        if not rsi_healthy:
            card.missing.append(f"poor RSI ({rsi_value:.1f})")
        if not mtf_bullish:
            card.missing.append(f"MTF bearish ({mtf.score:.2f})")
        if not above_sma:
            card.missing.append("below SMA20")
        if not bullish_ema:
            card.missing.append("no EMA crossover")
        if not macd_ok:
            card.missing.append("MACD not bullish")
        if not regime_favorable:
            card.missing.append(f"unfavorable regime ({context.regime.value})")
        reason = f"Score too low ({strength * 100:.0f}% < {threshold * 100:.0f}%): " + ", ".join(card.missing)
        logger.info("%s no signal: %s", ticker.symbol, reason)
        return self._build(ticker, Action.HOLD, strength, mtf, context, reason)

    def _backfill(self, ticker: Ticker) -> bool:
        """Replace the symbol's history with recent short-interval candles plus the live sample."""
        symbol = ticker.symbol
        try:
            df = self.market.get_candles(symbol, self.BACKFILL_INTERVAL, self.BACKFILL_LIMIT)
        except DataUnavailable as e:
            logger.warning("Could not backfill %s: %s", symbol, e)
            return False
        if df is None or len(df) == 0:
            logger.warning("Could not backfill %s: no candles", symbol)
            return False
        validate_candles(df)
        prices = df["close"].astype(float).tolist() + [ticker.last_price]
        volumes = df["volume"].astype(float).tolist() + [ticker.volume]
        loaded = self.history.replace(symbol, prices, volumes)
        logger.info("Loaded %d historical prices for %s", loaded, symbol)
        return True

    def _hold(self, ticker: Ticker, reason: str) -> Signal:
        return self._build(ticker, Action.HOLD, 0.0, MultiTimeframeResult(), MarketContext(), reason)

    @staticmethod
    def _build(
        ticker: Ticker,
        action: Action,
        strength: float,
        mtf: MultiTimeframeResult,
        context: MarketContext,
        reason: str,
    ) -> Signal:
        return Signal(
            symbol=ticker.symbol,
            action=action,
            price=ticker.last_price,
            strength=strength,
            mtf_score=mtf.score,
            atr=context.atr,
            regime=context.regime,
            reason=reason,
            timestamp=ticker.timestamp or utc_now(),
            analyses=list(mtf.analyses),
        )
