"""
CSV export of holdings, trade history and portfolio metrics.

The core exposes plain records; this module only shapes them into rows and
writes them with pandas.
"""
import logging
from decimal import Decimal, ROUND_HALF_UP
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import pandas as pd

from ..evaluation.analytics_types import Holding, PortfolioMetrics, PositionPnL
from ..ledger.types import TradeRecord


logger = logging.getLogger(__name__)

_CENT = Decimal("0.01")


def _money(value: Decimal) -> str:
    return str(value.quantize(_CENT, rounding=ROUND_HALF_UP))


def _pct(value: Optional[float]) -> str:
    return "-" if value is None else f"{value:.2f}%"


def _ratio(value: Optional[float]) -> str:
    return "-" if value is None else f"{value:.2f}"


def _position_label(position: Optional[PositionPnL]) -> str:
    if position is None:
        return "-"
    return f"{position.ticker} ({_money(position.pnl)})"


def holdings_records(rows: Sequence[Holding]) -> List[Dict[str, Any]]:
    """Holdings table rows."""
    return [
        {
            "Ticker": h.ticker,
            "Quantity": h.qty,
            "Average Price": _money(h.avg_price),
            "Current Price": _money(h.current_price),
            "P&L": _money(h.pnl),
            "Return %": f"{h.return_pct:.2f}",
            "Days Held": h.days_held,
        }
        for h in rows
    ]


def trade_records(history: Sequence[TradeRecord]) -> List[Dict[str, Any]]:
    """Trade history rows in order of occurrence."""
    return [
        {
            "Date": t.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
            "Ticker": t.ticker,
            "Action": t.action.value,
            "Quantity": t.qty,
            "Price": _money(t.price),
            "Commission": _money(t.commission),
            "Signal": t.signal.value,
            "P&L": "-" if t.pnl is None else _money(t.pnl),
            "Notes": t.notes,
        }
        for t in history
    ]


def metrics_record(metrics: PortfolioMetrics) -> Dict[str, Any]:
    """One row with every portfolio metric."""
    return {
        "Total Portfolio Value": _money(metrics.total_portfolio_value),
        "Cash": _money(metrics.cash),
        "Realized P&L": _money(metrics.realized_pnl),
        "Unrealized P&L": _money(metrics.unrealized_pnl),
        "Win Rate": _pct(metrics.win_rate),
        "Sharpe Ratio": _ratio(metrics.sharpe_ratio),
        "Max Drawdown": _pct(metrics.max_drawdown_pct),
        "Best Stock": _position_label(metrics.best_position),
        "Worst Stock": _position_label(metrics.worst_position),
    }


def export_csv(records: Sequence[Dict[str, Any]], path: Union[str, Path], what: str = "") -> Path:
    """
    Write records to CSV with a header row.

    Args:
        records: Rows with identical keys
        path: Output file
        what: Name used in the error message (e.g. "portfolio")

    Returns:
        Path written

    Raises:
        ValueError: If there are no records
    """
    if not records:
        label = f"{what} " if what else ""
        raise ValueError(f"No {label}data to export")

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    pd.DataFrame(list(records)).to_csv(path, index=False)
    logger.info(f"Exported {len(records)} rows to {path}")
    return path
