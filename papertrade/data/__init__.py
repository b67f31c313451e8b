"""
Market data module.

Provides the price feed contract (snapshots and batch live quotes) and its
Yahoo Finance implementation.
"""
from .feed import PriceFeedGateway, YahooPriceFeed, UnavailableError

__all__ = [
    'PriceFeedGateway',
    'YahooPriceFeed',
    'UnavailableError',
]
