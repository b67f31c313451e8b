"""
Ledger module.

Owns the cash balance, open positions and trade history, and applies buy and
exit operations with validation.
"""
from .types import Position, TradeRecord, LedgerState
from .errors import (
    LedgerError,
    InsufficientSizeError,
    InsufficientCapitalError,
    NoSuchPositionError,
)
from .ledger import new_ledger, buy, exit_position

__all__ = [
    'Position',
    'TradeRecord',
    'LedgerState',
    'LedgerError',
    'InsufficientSizeError',
    'InsufficientCapitalError',
    'NoSuchPositionError',
    'new_ledger',
    'buy',
    'exit_position',
]
