"""
Technical indicators for the price snapshot.

Provides the simple moving average and RSI that the price feed attaches to
the latest close of an instrument.
"""
import pandas as pd
import numpy as np
from typing import Tuple

from ..shared.defaults import RSI_PERIOD, MA_PERIOD


class TechnicalIndicators:
    """Calculates technical indicators from a close-price series."""

    def __init__(
        self,
        rsi_period: int = RSI_PERIOD,  # From shared.defaults
        ma_period: int = MA_PERIOD,  # From shared.defaults
    ):
        """
        Initialize indicator calculator.

        Args:
            rsi_period: Period for RSI calculation (default: from shared.defaults.RSI_PERIOD)
            ma_period: Window for the simple moving average (default: from shared.defaults.MA_PERIOD)
        """
        self.rsi_period = rsi_period
        self.ma_period = ma_period

    def calculate_rsi(self, prices: pd.Series) -> pd.Series:
        """
        Calculate Relative Strength Index (RSI).

        RSI = 100 - (100 / (1 + RS))
        RS = Average Gain / Average Loss
        """
        delta = prices.diff()
        gain = delta.where(delta > 0, 0.0)
        loss = (-delta).where(delta < 0, 0.0)

        # Use exponential moving average for smoothing
        avg_gain = gain.ewm(span=self.rsi_period, min_periods=self.rsi_period).mean()
        avg_loss = loss.ewm(span=self.rsi_period, min_periods=self.rsi_period).mean()

        rs = avg_gain / avg_loss
        rsi = 100 - (100 / (1 + rs))

        # Flat window: neither gains nor losses, RSI is neutral
        rsi = rsi.where(~((avg_gain == 0) & (avg_loss == 0)), 50.0)

        return rsi

    def calculate_sma(self, prices: pd.Series) -> pd.Series:
        """Calculate Simple Moving Average."""
        return prices.rolling(window=self.ma_period, min_periods=self.ma_period).mean()

    def latest(self, prices: pd.Series) -> Tuple[float, float, float]:
        """
        Indicator values at the last bar.

        Args:
            prices: Close-price series in chronological order

        Returns:
            Tuple of (close, ma, rsi); ma/rsi are NaN when history is too short
        """
        prices = prices.dropna()
        if prices.empty:
            return np.nan, np.nan, np.nan
        close = float(prices.iloc[-1])
        ma = float(self.calculate_sma(prices).iloc[-1])
        rsi = float(self.calculate_rsi(prices).iloc[-1])
        return close, ma, rsi
