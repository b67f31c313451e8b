#!/usr/bin/env python3
"""
Paper-trading account CLI.

Query a ticker's signal, buy on a BUY verdict, exit whole positions, and
inspect holdings, trade history and performance metrics. State is kept in a
JSON file between invocations.

Usage:
    python -m cli.paper_trade quote RELIANCE.NS
    python -m cli.paper_trade buy RELIANCE.NS
    python -m cli.paper_trade exit RELIANCE.NS [--price 2510.5]
    python -m cli.paper_trade portfolio | history | metrics | watchlist
    python -m cli.paper_trade export --out exports/
    python -m cli.paper_trade reset
"""
import sys
import logging
import argparse
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import List, Optional

import pandas as pd

from papertrade.data.feed import YahooPriceFeed, UnavailableError
from papertrade.export.csv_export import (
    holdings_records, trade_records, metrics_record, export_csv,
)
from papertrade.ledger.errors import LedgerError
from papertrade.shared.config import AppConfig
from papertrade.shared.config_loader import load_config_from_yaml
from papertrade.trading.session import (
    TradingSession, SignalNotActionableError, TickerMismatchError,
)


DEFAULT_CONFIG_PATH = Path("configs/paper_trade.yaml")
NOISY_LOGGERS = ("yfinance", "urllib3", "peewee")


def setup_logging(log_path: Optional[Path] = None, verbose: bool = False):
    """
    Send log records to stderr (command output stays on stdout) and optionally to a file.

    Args:
        log_path: Also append log records here (None = stderr only)
        verbose: DEBUG level and third-party chatter; otherwise INFO with
            yfinance / HTTP loggers held at WARNING
    """
    level = logging.DEBUG if verbose else logging.INFO
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_path:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path))

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if verbose else logging.WARNING)


def load_app_config(config_arg: Optional[str]) -> AppConfig:
    """Load YAML config; fall back to defaults when no file was given and the default path is absent."""
    if config_arg is not None:
        return load_config_from_yaml(config_arg)
    if DEFAULT_CONFIG_PATH.exists():
        return load_config_from_yaml(DEFAULT_CONFIG_PATH)
    return AppConfig()


def _price(value: str) -> Decimal:
    """argparse type for a positive price."""
    try:
        price = Decimal(value)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"invalid price: {value!r}")
    if not price.is_finite() or price <= 0:
        raise argparse.ArgumentTypeError(f"price must be > 0, got {value}")
    return price


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Virtual equities paper-trading account")
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help=f"Path to YAML config (default: {DEFAULT_CONFIG_PATH} if present)"
    )
    parser.add_argument(
        "--state-file",
        type=str,
        default=None,
        help="Path to JSON state file (overrides config)"
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Also write logs to this file"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging (DEBUG level)"
    )

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("quote", help="Show snapshot and signal for a ticker")
    p.add_argument("ticker")

    p = sub.add_parser("buy", help="Buy a ticker if its signal is BUY")
    p.add_argument("ticker")

    p = sub.add_parser("exit", help="Exit the whole position in a ticker")
    p.add_argument("ticker")
    p.add_argument("--price", type=_price, default=None, help="Exit price (default: fetch latest close)")

    sub.add_parser("portfolio", help="Show open positions marked to live prices")
    sub.add_parser("history", help="Show trade history")
    sub.add_parser("metrics", help="Show performance metrics")
    sub.add_parser("watchlist", help="List configured tickers")

    p = sub.add_parser("export", help="Export portfolio, history and metrics to CSV")
    p.add_argument("--out", type=str, default="exports", help="Output directory (default: exports)")

    sub.add_parser("reset", help="Reset the account to starting capital")
    return parser


def _print_table(records: List[dict], empty_message: str) -> None:
    if not records:
        print(empty_message)
        return
    print(pd.DataFrame(records).to_string(index=False))


def run_command(args: argparse.Namespace, session: TradingSession, config: AppConfig) -> int:
    """Execute one subcommand against the session. Returns process exit code."""
    command = args.command

    if command == "quote":
        quote = session.query(args.ticker)
        snap = quote.snapshot
        print(f"{snap.ticker}: close={snap.close} ma={snap.ma} rsi={snap.rsi}")
        print(f"Signal: {quote.signal.value}")
        for reason in quote.reasons:
            print(f"  - {reason}")
        return 0

    if command == "buy":
        quote = session.query(args.ticker)
        trade = session.buy(quote.snapshot)
        print(f"Bought {trade.qty} {trade.ticker} @ {trade.price} (commission {trade.commission})")
        print(f"Cash: {session.state.cash}")
        return 0

    if command == "exit":
        trade = session.exit(args.ticker, price=args.price)
        print(f"Exited {trade.qty} {trade.ticker} @ {trade.price}, P&L {trade.pnl}")
        print(f"Cash: {session.state.cash}")
        return 0

    if command == "portfolio":
        session.refresh_live_prices()
        _print_table(holdings_records(session.holdings()), "No open positions")
        return 0

    if command == "history":
        _print_table(trade_records(session.state.history), "No trades yet")
        return 0

    if command == "metrics":
        session.refresh_live_prices()
        for key, value in metrics_record(session.metrics()).items():
            print(f"{key:<24} {value}")
        return 0

    if command == "watchlist":
        for ticker in config.watchlist:
            print(ticker)
        return 0

    if command == "export":
        session.refresh_live_prices()
        out_dir = Path(args.out)
        exports = [
            (holdings_records(session.holdings()), out_dir / "portfolio.csv", "portfolio"),
            (trade_records(session.state.history), out_dir / "trade_history.csv", "trade history"),
            ([metrics_record(session.metrics())], out_dir / "portfolio_metrics.csv", "metrics"),
        ]
        for records, path, what in exports:
            try:
                export_csv(records, path, what=what)
                print(f"Wrote {path}")
            except ValueError as e:
                print(str(e))
        return 0

    if command == "reset":
        state = session.reset()
        print(f"Account reset. Cash: {state.cash}")
        return 0

    raise ValueError(f"Unknown command: {command}")


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(Path(args.log_file) if args.log_file else None, args.verbose)
    logger = logging.getLogger(__name__)

    try:
        config = load_app_config(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    session = TradingSession.from_config(
        config,
        gateway=YahooPriceFeed(config.feed),
        state_file=args.state_file,
    )

    try:
        return run_command(args, session, config)
    except (LedgerError, SignalNotActionableError, TickerMismatchError) as e:
        print(f"Rejected: {e}", file=sys.stderr)
        return 1
    except UnavailableError as e:
        logger.error(f"Price feed unavailable: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
