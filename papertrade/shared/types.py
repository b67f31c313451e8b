"""
Shared types for the paper-trading modules.

This module consolidates the SignalType and TradeAction enums and the
PriceSnapshot dataclass that are used across the signal, ledger and data
modules.
"""
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping


def to_decimal(value: Any) -> Decimal:
    """Convert a number (or numeric string) to Decimal without float noise."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


class SignalType(Enum):
    """Verdict of the indicator evaluator."""
    BUY = "BUY"
    SELL = "SELL"
    NONE = "NONE"


class TradeAction(Enum):
    """Kind of entry in the trade history."""
    BUY = "Buy"
    EXIT = "Exit"


@dataclass(frozen=True)
class PriceSnapshot:
    """
    One quote for one instrument: last close plus the two indicator values.

    Produced by the price feed, one per query, never mutated.
    """
    ticker: str
    close: Decimal
    ma: Decimal
    rsi: Decimal

    def __post_init__(self) -> None:
        # NaN cannot be ordered against thresholds or prices
        for name in ("close", "ma", "rsi"):
            value = getattr(self, name)
            if not value.is_finite():
                raise ValueError(f"{self.ticker}: {name} must be finite, got {value}")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PriceSnapshot":
        """Create from a provider mapping ``{ticker, close, ma, rsi}``."""
        return cls(
            ticker=str(data["ticker"]),
            close=to_decimal(data["close"]),
            ma=to_decimal(data["ma"]),
            rsi=to_decimal(data["rsi"]),
        )
