"""
Command-line entry points for the paper-trading account.

Provides command-line interfaces for:
- Signal queries
- Buys and exits
- Holdings, trade history and metrics
- CSV export
"""
