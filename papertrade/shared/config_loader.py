"""
YAML configuration loader for the paper-trading account.

Loads account, signal and feed settings from a YAML file so thresholds and
costs can be changed without code changes.
"""
from pathlib import Path
from typing import Union

import yaml

from .config import AppConfig, LedgerConfig, SignalConfig, FeedConfig
from .defaults import *


def load_config_from_yaml(yaml_path: Union[str, Path]) -> AppConfig:
    """
    Load application configuration from YAML file.

    Args:
        yaml_path: Path to YAML configuration file

    Returns:
        AppConfig object

    Raises:
        FileNotFoundError: If YAML file doesn't exist
        ValueError: If YAML is empty or contains invalid values
    """
    yaml_path = Path(yaml_path)

    if not yaml_path.exists():
        raise FileNotFoundError(f"Config file not found: {yaml_path}")

    with open(yaml_path, 'r') as f:
        config_dict = yaml.safe_load(f)

    if not config_dict:
        raise ValueError(f"Empty config file: {yaml_path}")

    # Extract values from nested structure
    account = config_dict.get('account', {}) or {}
    signals = config_dict.get('signals', {}) or {}
    feed = config_dict.get('feed', {}) or {}

    watchlist = config_dict.get('watchlist')
    if watchlist is None or (isinstance(watchlist, list) and len(watchlist) == 0):
        watchlist = list(DEFAULT_WATCHLIST)
    elif not isinstance(watchlist, list):
        watchlist = [watchlist]

    state_file = config_dict.get('state_file', STATE_FILE)

    return AppConfig(
        name=config_dict.get('name', yaml_path.stem),
        ledger=LedgerConfig(
            starting_capital=account.get('starting_capital', STARTING_CAPITAL),
            position_size_pct=account.get('position_size_pct', POSITION_SIZE_PCT),
            min_trade_value=account.get('min_trade_value', MIN_TRADE_VALUE),
            commission=account.get('commission', COMMISSION),
        ),
        signals=SignalConfig(
            rsi_oversold=signals.get('rsi_oversold', RSI_OVERSOLD),
            rsi_overbought=signals.get('rsi_overbought', RSI_OVERBOUGHT),
        ),
        feed=FeedConfig(
            rsi_period=feed.get('rsi_period', RSI_PERIOD),
            ma_period=feed.get('ma_period', MA_PERIOD),
            lookback_period=feed.get('lookback_period', LOOKBACK_PERIOD),
            quote_period=feed.get('quote_period', QUOTE_PERIOD),
        ),
        watchlist=[str(t) for t in watchlist],
        state_file=Path(state_file) if state_file else None,
    )
