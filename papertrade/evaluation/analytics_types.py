"""
Analytics types: per-position P&L, holdings rows and the metrics bundle.

Extracted to keep analytics.py focused on the calculations; the export layer
imports these types without pulling in the calculations.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class PositionPnL:
    """Open position marked to a price (live quote, or average cost when unpriced)."""
    ticker: str
    qty: int
    avg_price: Decimal
    mark_price: Decimal
    pnl: Decimal


@dataclass(frozen=True)
class Holding:
    """One row of the holdings table."""
    ticker: str
    qty: int
    avg_price: Decimal
    current_price: Decimal  # Live price, or average cost when no quote is known
    pnl: Decimal
    return_pct: float
    days_held: int  # Days since the most recent buy of this ticker
    priced: bool  # False when current_price fell back to average cost


@dataclass(frozen=True)
class PortfolioMetrics:
    """Aggregate performance of the account at one point in time."""
    cash: Decimal
    total_portfolio_value: Decimal  # cash + unrealized P&L
    realized_pnl: Decimal
    unrealized_pnl: Decimal
    win_rate: Optional[float]  # Percent; None without exits
    sharpe_ratio: Optional[float]  # None with fewer than 2 exits or zero stdev
    max_drawdown_pct: float
    best_position: Optional[PositionPnL]
    worst_position: Optional[PositionPnL]
    open_positions: int
    total_trades: int
    closed_trades: int
