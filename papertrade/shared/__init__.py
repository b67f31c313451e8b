"""
Shared types, defaults and configuration for the paper-trading account.

This module provides:
- SignalType / TradeAction enums and the PriceSnapshot dataclass
- Centralized default values for account, signal and feed parameters
- Configuration dataclasses and the YAML loader
"""
from .types import SignalType, TradeAction, PriceSnapshot, to_decimal
from .defaults import (
    STARTING_CAPITAL, POSITION_SIZE_PCT, MIN_TRADE_VALUE, COMMISSION,
    RSI_OVERSOLD, RSI_OVERBOUGHT, RSI_PERIOD, MA_PERIOD,
    DEFAULT_WATCHLIST,
)
from .config import AppConfig, LedgerConfig, SignalConfig, FeedConfig
from .config_loader import load_config_from_yaml

__all__ = [
    'SignalType',
    'TradeAction',
    'PriceSnapshot',
    'to_decimal',
    'STARTING_CAPITAL', 'POSITION_SIZE_PCT', 'MIN_TRADE_VALUE', 'COMMISSION',
    'RSI_OVERSOLD', 'RSI_OVERBOUGHT', 'RSI_PERIOD', 'MA_PERIOD',
    'DEFAULT_WATCHLIST',
    'AppConfig',
    'LedgerConfig',
    'SignalConfig',
    'FeedConfig',
    'load_config_from_yaml',
]
