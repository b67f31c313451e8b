"""
Portfolio analytics over a ledger state and a live-price map.

Every function is pure: it reads the LedgerState and the ``ticker -> price``
map and never mutates either. The live-price map may be stale or partially
populated; how a missing quote is treated is documented per metric.
"""
import math
from datetime import datetime
from decimal import Decimal
from typing import List, Mapping, Optional, Union

import numpy as np

from ..ledger.types import LedgerState, Position
from ..shared.types import TradeAction, to_decimal
from .analytics_types import Holding, PortfolioMetrics, PositionPnL

__all__ = [
    "unrealized_pnl",
    "realized_pnl",
    "position_pnls",
    "best_position",
    "worst_position",
    "sharpe_ratio",
    "capital_trajectory",
    "max_drawdown_pct",
    "win_rate",
    "total_portfolio_value",
    "holdings",
    "compute_metrics",
]

Price = Union[Decimal, float, int, str]
LivePrices = Mapping[str, Price]


def _live_price(live_prices: Optional[LivePrices], ticker: str) -> Optional[Decimal]:
    """Live price for ticker, or None when unknown (absent, None or NaN)."""
    if not live_prices:
        return None
    value = live_prices.get(ticker)
    if value is None:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    price = to_decimal(value)
    if price.is_nan():
        return None
    return price


def unrealized_pnl(state: LedgerState, live_prices: Optional[LivePrices] = None) -> Decimal:
    """
    Sum of (live - avg_price) * qty over open positions.

    A position without a live quote contributes 0.
    """
    total = Decimal(0)
    for pos in state.positions.values():
        price = _live_price(live_prices, pos.ticker)
        if price is None:
            continue
        total += (price - pos.avg_price) * pos.qty
    return total


def realized_pnl(state: LedgerState) -> Decimal:
    """Sum of pnl over all Exit records."""
    return sum((t.pnl for t in state.exits if t.pnl is not None), Decimal(0))


def _mark(pos: Position, live_prices: Optional[LivePrices]) -> PositionPnL:
    price = _live_price(live_prices, pos.ticker)
    mark = price if price is not None else pos.avg_price
    return PositionPnL(
        ticker=pos.ticker,
        qty=pos.qty,
        avg_price=pos.avg_price,
        mark_price=mark,
        pnl=(mark - pos.avg_price) * pos.qty,
    )


def position_pnls(state: LedgerState, live_prices: Optional[LivePrices] = None) -> List[PositionPnL]:
    """Every open position marked to its live price, falling back to average cost."""
    return [_mark(pos, live_prices) for pos in state.positions.values()]


def best_position(state: LedgerState, live_prices: Optional[LivePrices] = None) -> Optional[PositionPnL]:
    """Open position with the highest P&L; None when nothing is held. Ties keep the first."""
    best = None
    for marked in position_pnls(state, live_prices):
        if best is None or marked.pnl > best.pnl:
            best = marked
    return best


def worst_position(state: LedgerState, live_prices: Optional[LivePrices] = None) -> Optional[PositionPnL]:
    """Open position with the lowest P&L; None when nothing is held. Ties keep the first."""
    worst = None
    for marked in position_pnls(state, live_prices):
        if worst is None or marked.pnl < worst.pnl:
            worst = marked
    return worst


def sharpe_ratio(state: LedgerState) -> Optional[float]:
    """
    Mean exit P&L divided by its sample standard deviation (n - 1).

    Per-trade ratio, not annualized. None with fewer than 2 exits or a
    standard deviation of zero.
    """
    returns = np.array([float(t.pnl) for t in state.exits if t.pnl is not None])
    if len(returns) < 2:
        return None
    std = float(np.std(returns, ddof=1))
    if std == 0:
        return None
    return float(np.mean(returns)) / std


def capital_trajectory(state: LedgerState) -> List[Decimal]:
    """
    Replay the trade history from the initial capital.

    Buys debit qty * price + commission, exits credit qty * price - commission.
    Independent of the actual cash balance; the first point is the initial
    capital itself.
    """
    current = state.initial_capital
    points = [current]
    for trade in state.history:
        if trade.action == TradeAction.BUY:
            current -= trade.qty * trade.price + trade.commission
        else:
            current += trade.qty * trade.price - trade.commission
        points.append(current)
    return points


def max_drawdown_pct(state: LedgerState) -> float:
    """Maximum (peak - value) / peak over the replayed capital trajectory, in percent."""
    points = capital_trajectory(state)
    peak = points[0]
    max_drawdown = Decimal(0)

    for value in points:
        if value > peak:
            peak = value
        if peak <= 0:
            continue

        drawdown = (peak - value) / peak
        if drawdown > max_drawdown:
            max_drawdown = drawdown

    return float(max_drawdown * 100)


def win_rate(state: LedgerState) -> Optional[float]:
    """Percentage of exits with pnl > 0; None when there are no exits."""
    exits = state.exits
    if not exits:
        return None
    wins = [t for t in exits if t.pnl is not None and t.pnl > 0]
    return len(wins) / len(exits) * 100


def total_portfolio_value(state: LedgerState, live_prices: Optional[LivePrices] = None) -> Decimal:
    """Cash plus unrealized P&L."""
    return state.cash + unrealized_pnl(state, live_prices)


def holdings(
    state: LedgerState,
    live_prices: Optional[LivePrices] = None,
    now: Optional[datetime] = None,
) -> List[Holding]:
    """
    Holdings table: one row per open position, marked to live price or average cost.

    Args:
        state: Ledger state
        live_prices: ticker -> latest price
        now: Reference time for days held (default: datetime.now())
    """
    if now is None:
        now = datetime.now()

    rows = []
    for pos in state.positions.values():
        marked = _mark(pos, live_prices)
        return_pct = float(marked.pnl / pos.cost_basis * 100)
        rows.append(Holding(
            ticker=pos.ticker,
            qty=pos.qty,
            avg_price=pos.avg_price,
            current_price=marked.mark_price,
            pnl=marked.pnl,
            return_pct=return_pct,
            days_held=max(0, (now - pos.opened_at).days),
            priced=_live_price(live_prices, pos.ticker) is not None,
        ))
    return rows


def compute_metrics(state: LedgerState, live_prices: Optional[LivePrices] = None) -> PortfolioMetrics:
    """Compute every metric for the current state in one pass over the public functions."""
    exits = state.exits
    return PortfolioMetrics(
        cash=state.cash,
        total_portfolio_value=total_portfolio_value(state, live_prices),
        realized_pnl=realized_pnl(state),
        unrealized_pnl=unrealized_pnl(state, live_prices),
        win_rate=win_rate(state),
        sharpe_ratio=sharpe_ratio(state),
        max_drawdown_pct=max_drawdown_pct(state),
        best_position=best_position(state, live_prices),
        worst_position=worst_position(state, live_prices),
        open_positions=len(state.positions),
        total_trades=len(state.history),
        closed_trades=len(exits),
    )
