"""Hot-coin signal engine: indicators, multi-timeframe scoring, regime-aware signals and risk management."""
