"""
Ledger transitions for the virtual account.

Simulates buys and whole-position exits against a virtual cash balance:
- Buys invest a fixed fraction of current cash (not total equity)
- Cash can never go negative; oversized or undersized buys are rejected
- A second buy of the same ticker merges into one position at weighted-average cost
- Exits always close the whole position at an explicitly supplied price

Every operation is a pure state transition: it returns a new LedgerState and
raises a LedgerError subclass on rejection, leaving the input state untouched.
"""
import logging
from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from typing import Optional, Union

from ..shared.config import LedgerConfig
from ..shared.defaults import BUY_NOTES, EXIT_NOTES
from ..shared.types import PriceSnapshot, SignalType, TradeAction, to_decimal
from .errors import InsufficientSizeError, InsufficientCapitalError, NoSuchPositionError
from .types import LedgerState, Position, TradeRecord


logger = logging.getLogger(__name__)

_DEFAULT_CONFIG = LedgerConfig()


def new_ledger(config: Optional[LedgerConfig] = None) -> LedgerState:
    """
    Create the account at session start.

    Args:
        config: Ledger configuration (default: LedgerConfig())

    Returns:
        LedgerState with cash = starting capital, no positions, empty history
    """
    config = config or _DEFAULT_CONFIG
    return LedgerState(
        cash=config.starting_capital,
        positions={},
        history=(),
        initial_capital=config.starting_capital,
    )


def buy(
    state: LedgerState,
    snapshot: PriceSnapshot,
    config: Optional[LedgerConfig] = None,
    now: Optional[datetime] = None,
    notes: str = BUY_NOTES,
) -> LedgerState:
    """
    Buy the snapshot's ticker at its close.

    Quantity is floor(position_size_pct * cash / close). Whether the snapshot's
    verdict is BUY is the caller's concern; the ledger only checks money.

    Args:
        state: Current account state
        snapshot: Quote to buy at (ticker and close are used)
        config: Ledger configuration (default: LedgerConfig())
        now: Trade time (default: datetime.now())
        notes: Free text stored on the trade record

    Returns:
        New LedgerState with the position opened or topped up

    Raises:
        InsufficientSizeError: If quantity * close is below min_trade_value
        InsufficientCapitalError: If quantity * close + commission exceeds cash
    """
    config = config or _DEFAULT_CONFIG
    if now is None:
        now = datetime.now()

    ticker = snapshot.ticker
    close = snapshot.close
    if close <= 0:
        raise ValueError(f"close must be > 0, got {close}")

    investable = state.cash * config.position_size_pct
    quantity = int(investable // close)
    notional = close * quantity

    if notional < config.min_trade_value:
        logger.info(
            f"Rejected buy {ticker}: notional {notional} below minimum {config.min_trade_value}"
        )
        raise InsufficientSizeError(
            f"Min {config.min_trade_value} per trade: {quantity} x {close} = {notional}"
        )

    commission = config.commission
    cost = notional + commission
    if cost > state.cash:
        logger.info(f"Rejected buy {ticker}: cost {cost} exceeds cash {state.cash}")
        raise InsufficientCapitalError(
            f"Insufficient capital: cost {cost} exceeds cash {state.cash}"
        )

    positions = dict(state.positions)
    existing = state.get_position(ticker)
    if existing is not None:
        total_qty = existing.qty + quantity
        total_cost = existing.avg_price * existing.qty + close * quantity
        # Holding period restarts on every top-up
        positions[ticker] = replace(
            existing,
            qty=total_qty,
            avg_price=total_cost / total_qty,
            opened_at=now,
        )
    else:
        positions[ticker] = Position(
            ticker=ticker,
            qty=quantity,
            avg_price=close,
            opened_at=now,
        )

    record = TradeRecord(
        timestamp=now,
        ticker=ticker,
        action=TradeAction.BUY,
        qty=quantity,
        price=close,
        commission=commission,
        signal=SignalType.BUY,
        pnl=None,
        notes=notes,
    )

    logger.info(f"Bought {quantity} {ticker} @ {close} (cost {cost}, cash left {state.cash - cost})")
    return replace(
        state,
        cash=state.cash - cost,
        positions=positions,
        history=state.history + (record,),
    )


def exit_position(
    state: LedgerState,
    ticker: str,
    exit_price: Union[Decimal, float, int, str],
    config: Optional[LedgerConfig] = None,
    now: Optional[datetime] = None,
    notes: str = EXIT_NOTES,
) -> LedgerState:
    """
    Close the whole position in ``ticker`` at ``exit_price``.

    The price must belong to ``ticker``; callers pass it explicitly.

    Args:
        state: Current account state
        ticker: Ticker to exit
        exit_price: Price per share for this ticker
        config: Ledger configuration (default: LedgerConfig())
        now: Trade time (default: datetime.now())
        notes: Free text stored on the trade record

    Returns:
        New LedgerState without the position and with the exit recorded

    Raises:
        NoSuchPositionError: If no position is open for ticker
        ValueError: If ticker is empty or exit_price is not positive
        InsufficientCapitalError: If the commission would drive cash below zero
    """
    config = config or _DEFAULT_CONFIG
    if now is None:
        now = datetime.now()

    if not ticker:
        raise ValueError("ticker must be non-empty")

    position = state.get_position(ticker)
    if position is None:
        logger.info(f"Rejected exit {ticker}: no open position")
        raise NoSuchPositionError(f"No open position for {ticker}")

    price = to_decimal(exit_price)
    if not price.is_finite() or price <= 0:
        raise ValueError(f"exit_price must be a positive number, got {price}")

    commission = config.commission
    pnl = (price - position.avg_price) * position.qty - commission
    proceeds = price * position.qty - commission
    if state.cash + proceeds < 0:
        raise InsufficientCapitalError(
            f"Insufficient capital: exit commission {commission} exceeds cash {state.cash} plus proceeds"
        )

    positions = {t: p for t, p in state.positions.items() if t != ticker}

    record = TradeRecord(
        timestamp=now,
        ticker=ticker,
        action=TradeAction.EXIT,
        qty=position.qty,
        price=price,
        commission=commission,
        signal=SignalType.SELL,
        pnl=pnl,
        notes=notes,
    )

    logger.info(f"Exited {position.qty} {ticker} @ {price} (pnl {pnl}, cash {state.cash + proceeds})")
    return replace(
        state,
        cash=state.cash + proceeds,
        positions=positions,
        history=state.history + (record,),
    )
