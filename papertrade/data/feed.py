"""
Price feed gateway: price snapshots and batch live quotes.

The ledger and analytics never talk to the network; they receive snapshots
and quote maps from a PriceFeedGateway. YahooPriceFeed is the Yahoo Finance
implementation.
"""
import logging
import warnings
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Protocol

import numpy as np
import pandas as pd
import yfinance as yf

from ..indicators.technical import TechnicalIndicators
from ..shared.config import FeedConfig
from ..shared.types import PriceSnapshot, to_decimal

# Suppress yfinance's pandas deprecation warnings (will be fixed in future yfinance version)
warnings.filterwarnings('ignore', message='.*Timestamp.utcnow.*')


logger = logging.getLogger(__name__)


class UnavailableError(Exception):
    """Raised when the feed cannot produce data (network failure, unknown ticker, short history)."""
    pass


class PriceFeedGateway(Protocol):
    """Source of price snapshots and live quotes."""

    def get_snapshot(self, ticker: str) -> PriceSnapshot:
        """
        Latest close with its moving average and RSI.

        Raises:
            UnavailableError: On network or data failure
        """
        ...

    def get_batch_quotes(self, tickers: Iterable[str]) -> Dict[str, Decimal]:
        """
        Latest price per ticker.

        Partial results are allowed: tickers without a quote are absent from
        the result (unknown), never zero.

        Raises:
            UnavailableError: When the request as a whole fails
        """
        ...


def _flatten_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Flatten multi-level columns if present (yfinance sometimes returns these)."""
    if isinstance(df.columns, pd.MultiIndex):
        df = df.copy()
        df.columns = df.columns.get_level_values(0)
    return df


def _close_columns(df: pd.DataFrame, tickers: List[str]) -> pd.DataFrame:
    """Close prices as one column per ticker, whatever shape yfinance returned."""
    # MultiIndex (Price, Ticker) yields a frame; flat single-ticker columns yield a Series
    close = df["Close"]
    if isinstance(close, pd.Series):
        close = close.to_frame(name=tickers[0])
    return close


class YahooPriceFeed:
    """
    Price feed backed by Yahoo Finance (yfinance).

    Snapshots use the last close of a lookback download with a simple moving
    average and RSI computed over it.
    """

    def __init__(self, config: Optional[FeedConfig] = None):
        """
        Initialize the feed.

        Args:
            config: Indicator periods and download windows (default: FeedConfig())
        """
        self.config = config or FeedConfig()
        self.indicators = TechnicalIndicators(
            rsi_period=self.config.rsi_period,
            ma_period=self.config.ma_period,
        )

    def _download(self, tickers, period: str) -> pd.DataFrame:
        try:
            df = yf.download(tickers, period=period, progress=False, auto_adjust=True)
        except Exception as e:
            logger.error(f"Download failed for {tickers}: {e}")
            raise UnavailableError(f"Price download failed for {tickers}: {e}") from e
        if df is None or df.empty:
            raise UnavailableError(f"No data returned for {tickers}")
        return df

    def get_snapshot(self, ticker: str) -> PriceSnapshot:
        if not ticker:
            raise ValueError("ticker must not be empty")

        df = _flatten_columns(self._download(ticker, self.config.lookback_period))
        if "Close" not in df.columns:
            raise UnavailableError(f"No close prices for {ticker}")

        prices = df["Close"].dropna()
        if len(prices) < max(self.config.ma_period, self.config.rsi_period + 1):
            raise UnavailableError(
                f"Insufficient history for {ticker}: {len(prices)} bars"
            )

        close, ma, rsi = self.indicators.latest(prices)
        if any(np.isnan(v) for v in (close, ma, rsi)):
            raise UnavailableError(f"Indicators unavailable for {ticker}")

        snapshot = PriceSnapshot(
            ticker=ticker,
            close=to_decimal(round(close, 4)),
            ma=to_decimal(round(ma, 4)),
            rsi=to_decimal(round(rsi, 2)),
        )
        logger.debug(f"Snapshot {ticker}: close={snapshot.close} ma={snapshot.ma} rsi={snapshot.rsi}")
        return snapshot

    def get_batch_quotes(self, tickers: Iterable[str]) -> Dict[str, Decimal]:
        tickers = sorted(set(tickers))
        if not tickers:
            return {}

        df = self._download(tickers, self.config.quote_period)
        close = _close_columns(df, tickers)

        quotes: Dict[str, Decimal] = {}
        for ticker in tickers:
            if ticker not in close.columns:
                continue
            series = close[ticker].dropna()
            if series.empty:
                continue
            quotes[ticker] = to_decimal(round(float(series.iloc[-1]), 4))

        missing = [t for t in tickers if t not in quotes]
        if missing:
            logger.warning(f"No live quote for {missing}")
        return quotes
