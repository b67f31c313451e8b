"""
Indicator calculations (SMA, RSI) from close-price series.
"""
from .technical import TechnicalIndicators

__all__ = ['TechnicalIndicators']
