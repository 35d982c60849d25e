"""Unit tests for core.config."""

import os

import pytest

from signal_engine.core.config import Config, load_config
from signal_engine.core.errors import ConfigError

ENV_KEYS = (
    "MAX_POSITIONS",
    "POSITION_SIZE_USDT",
    "MIN_VOLUME_USDT",
    "USE_MULTI_TIMEFRAME",
    "QUOTE_ASSET",
    "TELEGRAM_ENABLED",
    "MAX_DRAWDOWN_PCT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults_without_files(tmp_path):
    config = load_config(tmp_path / "missing.yaml", tmp_path)
    assert config.max_positions == 3
    assert config.position_size_usdt == 100.0
    assert config.use_multi_timeframe is True
    assert config.quote_asset == "USDT"
    assert config.min_signal_strength == 0.3


def test_yaml_values(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "strategy:\n"
        "  max_positions: 5\n"
        "  min_volume_usdt: 2500000\n"
        "  use_multi_timeframe: false\n"
        "risk:\n"
        "  max_drawdown_percent: 15\n"
        "telegram:\n"
        "  enabled: true\n",
        encoding="utf-8",
    )
    config = load_config(path, tmp_path)
    assert config.max_positions == 5
    assert config.min_volume_usdt == 2_500_000
    assert config.use_multi_timeframe is False
    assert config.max_drawdown_pct == 15
    assert config.telegram_enabled is True


def test_env_overrides_yaml(tmp_path, monkeypatch):
    path = tmp_path / "config.yaml"
    path.write_text("strategy:\n  max_positions: 5\n", encoding="utf-8")
    monkeypatch.setenv("MAX_POSITIONS", "7")
    monkeypatch.setenv("QUOTE_ASSET", "busd")
    config = load_config(path, tmp_path)
    assert config.max_positions == 7
    assert config.quote_asset == "BUSD"


def test_dotenv_loaded_from_project_root(tmp_path):
    (tmp_path / ".env").write_text("POSITION_SIZE_USDT=250\n", encoding="utf-8")
    try:
        config = load_config(tmp_path / "missing.yaml", tmp_path)
    finally:
        os.environ.pop("POSITION_SIZE_USDT", None)
    assert config.position_size_usdt == 250.0


@pytest.mark.parametrize(
    "kwargs",
    [
        {"max_positions": 0},
        {"position_size_usdt": 0},
        {"stop_loss_pct": 0},
        {"take_profit_pct": 150},
        {"min_signal_strength": 1.5},
        {"max_daily_loss_usdt": -1},
        {"max_daily_loss_usdt": 0},
        {"max_drawdown_pct": 0},
        {"quote_asset": ""},
    ],
)
def test_invalid_values_rejected(kwargs):
    with pytest.raises(ConfigError):
        Config(**kwargs)
