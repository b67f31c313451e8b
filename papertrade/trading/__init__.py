"""
Trading session module.

Wires price feed, signal evaluation, ledger and persistence for one account.
"""
from .session import TradingSession, Quote, SignalNotActionableError, TickerMismatchError

__all__ = ["TradingSession", "Quote", "SignalNotActionableError", "TickerMismatchError"]
