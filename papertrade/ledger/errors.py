"""
Ledger rejections.

Every error here is recoverable: the operation that raised it left the
LedgerState it was given untouched.
"""


class LedgerError(Exception):
    """Base class for rejected ledger operations."""
    pass


class InsufficientSizeError(LedgerError):
    """Raised when a buy's notional (qty * close) is below the minimum trade value."""
    pass


class InsufficientCapitalError(LedgerError):
    """Raised when a buy's total cost (notional + commission) exceeds available cash."""
    pass


class NoSuchPositionError(LedgerError):
    """Raised when exiting a ticker that has no open position."""
    pass
