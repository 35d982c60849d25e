"""Risk management: entry gate, sizing, stops, trailing stops, trade ledger."""

from signal_engine.risk.manager import RiskManager, RiskResult, TradePlan, CloseDecision

__all__ = ["RiskManager", "RiskResult", "TradePlan", "CloseDecision"]
