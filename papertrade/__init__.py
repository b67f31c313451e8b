"""
Virtual equities paper-trading account.

Provides unified interfaces for:
- Price snapshots (close, moving average, RSI) from a market data feed
- Signal evaluation (RSI thresholds and price vs. moving average)
- Ledger transitions (buy, whole-position exit) over an explicit state
- Portfolio analytics (P&L, win rate, Sharpe ratio, max drawdown)
- State persistence and CSV export
"""
