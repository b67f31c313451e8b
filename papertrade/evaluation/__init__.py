"""
Portfolio analytics module.

Pure metrics computed from the ledger state and the latest live prices:
realized/unrealized P&L, best/worst holding, win rate, Sharpe ratio and
maximum drawdown.
"""
from .analytics import (
    unrealized_pnl,
    realized_pnl,
    position_pnls,
    best_position,
    worst_position,
    sharpe_ratio,
    capital_trajectory,
    max_drawdown_pct,
    win_rate,
    total_portfolio_value,
    holdings,
    compute_metrics,
)
from .analytics_types import PositionPnL, Holding, PortfolioMetrics

__all__ = [
    'unrealized_pnl',
    'realized_pnl',
    'position_pnls',
    'best_position',
    'worst_position',
    'sharpe_ratio',
    'capital_trajectory',
    'max_drawdown_pct',
    'win_rate',
    'total_portfolio_value',
    'holdings',
    'compute_metrics',
    'PositionPnL',
    'Holding',
    'PortfolioMetrics',
]
