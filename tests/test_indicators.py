"""Unit and property tests for the indicator library."""

import numpy as np
import pytest
from hypothesis import given, settings, strategies as st

from signal_engine.core.errors import InvariantViolation
from signal_engine.core.types import Regime, Trend, VolumeProfile
from signal_engine.indicators import (
    analyze_volume_profile,
    atr,
    bollinger_bands,
    detect_market_regime,
    detect_trend,
    detect_volume_spike,
    ema,
    ema_series,
    macd,
    momentum_score,
    rsi,
    sma,
    stochastic,
    support_resistance,
    true_range,
    vwap,
)

price_strategy = st.floats(min_value=0.01, max_value=100000.0, allow_nan=False, allow_infinity=False)


def test_sma():
    assert sma([1, 2, 3, 4], 2) == 3.5
    assert sma([1, 2], 3) == 0.0


def test_non_positive_period_rejected():
    with pytest.raises(InvariantViolation):
        sma([1, 2, 3], 0)
    with pytest.raises(ValueError):
        ema([1, 2, 3], -1)


def test_ema_seeded_with_sma():
    assert ema([1, 2, 3, 4, 5], 5) == pytest.approx(3.0)
    assert ema([1, 2, 3], 5) == 0.0
    assert len(ema_series(list(range(1, 31)), 12)) == 30 - 12 + 1


def test_rsi_neutral_and_extremes():
    assert rsi([10, 11, 12], 14) == 50.0
    assert rsi([5.0] * 30, 14) == 50.0
    assert rsi([float(i) for i in range(1, 31)], 14) == 100.0
    assert rsi([float(i) for i in range(30, 0, -1)], 14) == 0.0


@given(data=st.lists(price_strategy, min_size=0, max_size=120))
@settings(max_examples=100)
def test_rsi_bounded(data):
    value = rsi(data, 14)
    assert 0.0 <= value <= 100.0


def test_macd_requires_35_samples():
    assert macd([float(i) for i in range(34)]) == (0.0, 0.0, 0.0)
    m, s, h = macd([float(i) for i in range(1, 60)])
    assert h == pytest.approx(m - s)


@given(data=st.lists(price_strategy, min_size=35, max_size=90))
@settings(max_examples=50)
def test_macd_single_pass_matches_window_replay(data):
    m, s, h = macd(data)
    replay_line = [ema(data[: i + 1], 12) - ema(data[: i + 1], 26) for i in range(26, len(data))]
    assert m == pytest.approx(ema(data, 12) - ema(data, 26), rel=1e-9, abs=1e-9)
    assert s == pytest.approx(ema(replay_line, 9), rel=1e-9, abs=1e-9)
    assert h == pytest.approx(m - s, rel=1e-9, abs=1e-9)


def test_bollinger_population_std():
    values = [float(i) for i in range(1, 21)]
    upper, middle, lower = bollinger_bands(values, 20, 2.0)
    assert middle == pytest.approx(10.5)
    assert upper - middle == pytest.approx(2 * np.std(values))
    assert middle - lower == pytest.approx(2 * np.std(values))
    assert bollinger_bands([1.0] * 5, 20) == (0.0, 0.0, 0.0)


def test_volume_spike_needs_five_valid_volumes():
    assert detect_volume_spike([0, 0, 100, 100, 100, 100], 500) == (False, 1.0)
    spike, ratio = detect_volume_spike([100.0] * 5, 300)
    assert spike is True
    assert ratio == pytest.approx(3.0)


def test_volume_spike_ratio_capped():
    spike, ratio = detect_volume_spike([100.0] * 10, 5000)
    assert spike is True
    assert ratio == 10.0
    spike, ratio = detect_volume_spike([100.0] * 10, 150)
    assert spike is False
    assert ratio == pytest.approx(1.5)


@given(
    volumes=st.lists(st.floats(min_value=0.0, max_value=1e9, allow_nan=False), min_size=0, max_size=50),
    current=st.floats(min_value=0.0, max_value=1e12, allow_nan=False),
)
@settings(max_examples=100)
def test_volume_ratio_never_exceeds_cap(volumes, current):
    _, ratio = detect_volume_spike(volumes, current)
    assert ratio <= 10.0


def test_momentum_score():
    assert momentum_score([100.0] * 10, [1.0] * 10) == 50.0
    prices = [100.0] * 19 + [110.0]
    assert momentum_score(prices, [1000.0] * 20) == pytest.approx(57.0)


def test_atr_and_true_range(frame):
    df = frame([100.0] * 15, highs=[101.0] * 15, lows=[99.0] * 15)
    assert atr(df, 14) == pytest.approx(2.0)
    assert atr(df.iloc[:14], 14) == 0.0
    gap = frame([100.0, 110.0], highs=[101.0, 111.0], lows=[99.0, 109.0])
    assert true_range(gap).tolist() == [11.0]


def test_stochastic(frame):
    assert stochastic(frame([100.0] * 20, spread=0.0), 14) == (50.0, 50.0)
    k, d = stochastic(frame([float(i) for i in range(1, 15)], spread=0.0), 14)
    assert k == pytest.approx(100.0)
    assert d == k


def test_vwap(frame):
    df = frame([10.0, 20.0], highs=[10.0, 20.0], lows=[10.0, 20.0], volumes=[1.0, 3.0])
    assert vwap(df) == pytest.approx(17.5)


def test_support_resistance(frame):
    df = frame([float(i) for i in range(10, 30)], spread=0.0)
    assert support_resistance(df) == (10.0, 29.0)
    assert support_resistance(df.iloc[:19]) == (0.0, 0.0)


def test_trend_short_input_neutral(frame):
    assert detect_trend(frame([100.0] * 10)) == (Trend.NEUTRAL, 0.5)


def test_trend_bullish_on_rising_prices(frame):
    closes = [100 * 1.01 ** i for i in range(60)]
    volumes = [100.0] * 59 + [500.0]
    trend, strength = detect_trend(frame(closes, volumes=volumes))
    assert trend == Trend.BULLISH
    assert 0.65 < strength <= 1.0


def test_trend_bearish_on_falling_prices(frame):
    closes = [100 * 0.99 ** i for i in range(60)]
    volumes = [100.0] * 59 + [500.0]
    trend, strength = detect_trend(frame(closes, volumes=volumes))
    assert trend == Trend.BEARISH
    assert strength > 0.65


def test_regime_unknown_below_50_bars(frame):
    assert detect_market_regime(frame([100.0] * 49)) == (Regime.UNKNOWN, 0.5)


def test_regime_volatile(frame):
    df = frame([100.0] * 60, highs=[110.0] * 60, lows=[90.0] * 60)
    assert detect_market_regime(df) == (Regime.VOLATILE, 0.8)


def test_regime_trending(frame):
    df = frame([9.0] * 33 + [10.0] * 17)
    regime, confidence = detect_market_regime(df)
    assert regime == Regime.TRENDING
    assert confidence == pytest.approx(0.7)


def test_regime_ranging(frame):
    df = frame([100.0 if i % 2 == 0 else 101.0 for i in range(60)])
    assert detect_market_regime(df) == (Regime.RANGING, 0.7)


def test_regime_transitioning(frame):
    df = frame([100.0] * 40 + [105.0] * 10)
    assert detect_market_regime(df) == (Regime.TRANSITIONING, 0.5)


def test_volume_profile(frame):
    rising = frame([float(i) for i in range(10, 31)])
    assert analyze_volume_profile(rising, 20) == (VolumeProfile.ACCUMULATION, 1.0)
    falling = frame([float(i) for i in range(31, 10, -1)])
    assert analyze_volume_profile(falling, 20) == (VolumeProfile.DISTRIBUTION, 1.0)
    mixed = frame([10.0 + (i % 2) for i in range(21)])
    assert analyze_volume_profile(mixed, 20) == (VolumeProfile.NEUTRAL, 0.5)
    assert analyze_volume_profile(rising.iloc[:10], 20) == (VolumeProfile.NEUTRAL, 0.5)
