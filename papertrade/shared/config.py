"""
Configuration dataclasses for the paper-trading account.

Defaults come from shared.defaults; every dataclass validates itself on
construction so a bad YAML file fails fast with a clear message.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import List, Optional

from .defaults import (
    STARTING_CAPITAL, POSITION_SIZE_PCT, MIN_TRADE_VALUE, COMMISSION,
    RSI_OVERSOLD, RSI_OVERBOUGHT,
    RSI_PERIOD, MA_PERIOD, LOOKBACK_PERIOD, QUOTE_PERIOD,
    STATE_FILE, DEFAULT_WATCHLIST,
)
from .types import to_decimal


def _validate_config(
    *,
    starting_capital: Decimal,
    position_size_pct: Decimal,
    min_trade_value: Decimal,
    commission: Decimal,
) -> None:
    """Validate account parameters. Raises ValueError with clear message on failure."""
    if starting_capital <= 0:
        raise ValueError(f"starting_capital must be > 0, got {starting_capital}")
    if not (0 < position_size_pct <= 1):
        raise ValueError(
            f"position_size_pct must be in (0, 1], got {position_size_pct}"
        )
    if min_trade_value < 0:
        raise ValueError(f"min_trade_value must be >= 0, got {min_trade_value}")
    if commission < 0:
        raise ValueError(f"commission must be >= 0, got {commission}")


@dataclass(frozen=True)
class LedgerConfig:
    """Sizing and cost rules applied by the ledger."""
    starting_capital: Decimal = Decimal(STARTING_CAPITAL)
    position_size_pct: Decimal = Decimal(str(POSITION_SIZE_PCT))
    min_trade_value: Decimal = Decimal(MIN_TRADE_VALUE)
    commission: Decimal = Decimal(COMMISSION)

    def __post_init__(self) -> None:
        # Accept ints/floats/strings from YAML and normalize to Decimal
        for name in ("starting_capital", "position_size_pct", "min_trade_value", "commission"):
            object.__setattr__(self, name, to_decimal(getattr(self, name)))
        _validate_config(
            starting_capital=self.starting_capital,
            position_size_pct=self.position_size_pct,
            min_trade_value=self.min_trade_value,
            commission=self.commission,
        )


@dataclass(frozen=True)
class SignalConfig:
    """RSI thresholds for the indicator evaluator."""
    rsi_oversold: float = RSI_OVERSOLD
    rsi_overbought: float = RSI_OVERBOUGHT

    def __post_init__(self) -> None:
        if self.rsi_oversold >= self.rsi_overbought:
            raise ValueError(
                f"RSI oversold ({self.rsi_oversold}) must be less than overbought ({self.rsi_overbought})"
            )


@dataclass(frozen=True)
class FeedConfig:
    """Indicator periods and download windows for the price feed."""
    rsi_period: int = RSI_PERIOD
    ma_period: int = MA_PERIOD
    lookback_period: str = LOOKBACK_PERIOD
    quote_period: str = QUOTE_PERIOD

    def __post_init__(self) -> None:
        if self.rsi_period < 2:
            raise ValueError(f"rsi_period must be >= 2, got {self.rsi_period}")
        if self.ma_period < 1:
            raise ValueError(f"ma_period must be >= 1, got {self.ma_period}")


@dataclass
class AppConfig:
    """Top-level configuration: account rules, signal thresholds, feed, watchlist."""
    name: str = "paper_trade"
    ledger: LedgerConfig = field(default_factory=LedgerConfig)
    signals: SignalConfig = field(default_factory=SignalConfig)
    feed: FeedConfig = field(default_factory=FeedConfig)
    watchlist: List[str] = field(default_factory=lambda: list(DEFAULT_WATCHLIST))
    state_file: Optional[Path] = Path(STATE_FILE)
