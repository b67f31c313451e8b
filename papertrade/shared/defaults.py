"""
Centralized default values for the paper-trading account.

This is the SINGLE SOURCE OF TRUTH for account, signal and feed defaults.
All modules should import from here to ensure consistency.
"""

# Account defaults
STARTING_CAPITAL = 100000  # Virtual cash at session start
POSITION_SIZE_PCT = 0.2  # 20% of current cash per buy (not total equity)
MIN_TRADE_VALUE = 1000  # Minimum notional (qty * close) per buy
COMMISSION = 20  # Flat fee per trade, charged on buy and on exit

# Signal thresholds
RSI_OVERSOLD = 30  # Buy when RSI is strictly below
RSI_OVERBOUGHT = 70  # Sell when RSI is strictly above

# Indicator periods used by the price feed
RSI_PERIOD = 14
MA_PERIOD = 20  # Simple moving average window
LOOKBACK_PERIOD = "6mo"  # yfinance period string for snapshot history
QUOTE_PERIOD = "5d"  # yfinance period string for batch live quotes

# Trade notes written to the history
BUY_NOTES = "Bought based on signal"
EXIT_NOTES = "Exited manually"

# Persistence
STATE_FILE = "data/paper_account.json"

# Tickers offered by default (NSE large caps)
DEFAULT_WATCHLIST = [
    "RELIANCE.NS", "TCS.NS", "INFY.NS", "HDFCBANK.NS", "ICICIBANK.NS",
    "SBIN.NS", "ITC.NS", "LT.NS", "KOTAKBANK.NS", "HINDUNILVR.NS",
]
