"""
Ledger types: positions, trade records and the account state.

All records are immutable; ledger operations return new LedgerState objects
instead of mutating the one they were given.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..shared.types import SignalType, TradeAction, to_decimal


@dataclass(frozen=True)
class Position:
    """An open holding. One per ticker."""
    ticker: str
    qty: int  # Always > 0 while held
    avg_price: Decimal  # Weighted-average cost per share (commission excluded)
    opened_at: datetime  # Time of the most recent buy for this ticker

    @property
    def cost_basis(self) -> Decimal:
        """Amount paid for the shares still held, excluding commissions."""
        return self.avg_price * self.qty

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-safe dictionary."""
        return {
            "ticker": self.ticker,
            "qty": self.qty,
            "avg_price": str(self.avg_price),
            "opened_at": self.opened_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Position:
        """Create from dictionary."""
        return cls(
            ticker=data["ticker"],
            qty=int(data["qty"]),
            avg_price=to_decimal(data["avg_price"]),
            opened_at=datetime.fromisoformat(data["opened_at"]),
        )


@dataclass(frozen=True)
class TradeRecord:
    """One entry of the append-only trade history."""
    timestamp: datetime
    ticker: str
    action: TradeAction
    qty: int
    price: Decimal
    commission: Decimal
    signal: SignalType  # BUY for buys, SELL for exits
    pnl: Optional[Decimal] = None  # None for buys, realized P&L for exits
    notes: str = ""

    @property
    def is_exit(self) -> bool:
        return self.action == TradeAction.EXIT

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-safe dictionary."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "ticker": self.ticker,
            "action": self.action.value,
            "qty": self.qty,
            "price": str(self.price),
            "commission": str(self.commission),
            "signal": self.signal.value,
            "pnl": None if self.pnl is None else str(self.pnl),
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TradeRecord:
        """Create from dictionary."""
        pnl = data.get("pnl")
        return cls(
            timestamp=datetime.fromisoformat(data["timestamp"]),
            ticker=data["ticker"],
            action=TradeAction(data["action"]),
            qty=int(data["qty"]),
            price=to_decimal(data["price"]),
            commission=to_decimal(data["commission"]),
            signal=SignalType(data["signal"]),
            pnl=None if pnl is None else to_decimal(pnl),
            notes=data.get("notes", ""),
        )


@dataclass(frozen=True)
class LedgerState:
    """
    Snapshot of the account: cash, open positions and trade history.

    Invariants held by every state returned from the ledger:
    - cash >= 0
    - every position has qty > 0, at most one position per ticker
    - history only ever grows at the end
    """
    cash: Decimal
    positions: Mapping[str, Position] = field(default_factory=dict)
    history: Tuple[TradeRecord, ...] = ()
    initial_capital: Decimal = Decimal(0)  # Replay origin for drawdown

    def __post_init__(self) -> None:
        # Read-only views so a state can only change through buy/exit
        object.__setattr__(self, "positions", MappingProxyType(dict(self.positions)))
        object.__setattr__(self, "history", tuple(self.history))

    @property
    def exits(self) -> List[TradeRecord]:
        return [t for t in self.history if t.is_exit]

    def get_position(self, ticker: str) -> Optional[Position]:
        return self.positions.get(ticker)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-safe dictionary."""
        return {
            "cash": str(self.cash),
            "initial_capital": str(self.initial_capital),
            "positions": [p.to_dict() for p in self.positions.values()],
            "history": [t.to_dict() for t in self.history],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> LedgerState:
        """Create from dictionary."""
        positions = [Position.from_dict(p) for p in data.get("positions", [])]
        cash = to_decimal(data["cash"])
        return cls(
            cash=cash,
            positions={p.ticker: p for p in positions},
            history=tuple(TradeRecord.from_dict(t) for t in data.get("history", [])),
            initial_capital=to_decimal(data.get("initial_capital", cash)),
        )
