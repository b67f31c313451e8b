"""
Trading session that wires the price feed, signal evaluator, ledger and persistence.

The session holds the one explicit LedgerState of an account and the latest
live-price map. Ledger operations stay pure; the session swaps in the new
state after each accepted transition and checkpoints it.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Dict, List, Optional, Union

from ..data.feed import PriceFeedGateway, UnavailableError
from ..evaluation.analytics import compute_metrics, holdings
from ..evaluation.analytics_types import Holding, PortfolioMetrics
from ..ledger.ledger import new_ledger, buy, exit_position
from ..ledger.types import LedgerState, TradeRecord
from ..persistence.state import StateManager
from ..shared.config import AppConfig, LedgerConfig, SignalConfig
from ..shared.types import PriceSnapshot, SignalType, to_decimal
from ..signals.evaluator import explain


logger = logging.getLogger(__name__)


class SignalNotActionableError(Exception):
    """Raised when a buy is requested for a snapshot whose verdict is not BUY."""
    pass


class TickerMismatchError(Exception):
    """Raised when a price snapshot belongs to a different ticker than the one traded."""
    pass


@dataclass(frozen=True)
class Quote:
    """A snapshot together with its verdict and the reasons behind it."""
    snapshot: PriceSnapshot
    signal: SignalType
    reasons: List[str] = field(default_factory=list)


class TradingSession:
    """
    Single-user paper-trading session.

    Responsibilities:
    - Fetch snapshots and evaluate signals for a chosen ticker
    - Apply buys (only on a BUY verdict) and whole-position exits
    - Keep the live-price map for held tickers; a failed refresh keeps the previous map
    - Checkpoint the ledger after every accepted transition
    """

    def __init__(
        self,
        gateway: PriceFeedGateway,
        state_manager: Optional[StateManager] = None,
        ledger_config: Optional[LedgerConfig] = None,
        signal_config: Optional[SignalConfig] = None,
    ):
        """
        Initialize the session, resuming saved state when available.

        Args:
            gateway: Price feed for snapshots and live quotes
            state_manager: Persistence collaborator (None = in-memory only)
            ledger_config: Sizing and cost rules (default: LedgerConfig())
            signal_config: RSI thresholds (default: SignalConfig())
        """
        self.gateway = gateway
        self.state_manager = state_manager
        self.ledger_config = ledger_config or LedgerConfig()
        self.signal_config = signal_config or SignalConfig()
        self.live_prices: Dict[str, Decimal] = {}

        loaded = state_manager.load() if state_manager is not None else None
        self.state: LedgerState = loaded if loaded is not None else new_ledger(self.ledger_config)

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        gateway: PriceFeedGateway,
        state_file: Optional[Union[str, Path]] = None,
    ) -> "TradingSession":
        """Build a session from AppConfig; ``state_file`` overrides config.state_file."""
        path = state_file if state_file is not None else config.state_file
        state_manager = StateManager(path) if path else None
        return cls(
            gateway=gateway,
            state_manager=state_manager,
            ledger_config=config.ledger,
            signal_config=config.signals,
        )

    def _commit(self, new_state: LedgerState) -> None:
        """Swap in a new state and checkpoint it (best-effort)."""
        self.state = new_state
        if self.state_manager is None:
            return
        try:
            self.state_manager.save(new_state)
        except Exception as e:
            logger.error(f"State checkpoint failed: {e}")

    def evaluate(self, snapshot: PriceSnapshot) -> Quote:
        """Evaluate a snapshot without fetching anything."""
        signal, reasons = explain(snapshot, self.signal_config)
        return Quote(snapshot=snapshot, signal=signal, reasons=reasons)

    def query(self, ticker: str) -> Quote:
        """
        Fetch a fresh snapshot for ticker and evaluate it.

        Raises:
            UnavailableError: If the feed fails (ledger untouched)
        """
        snapshot = self.gateway.get_snapshot(ticker)
        if snapshot.ticker != ticker:
            raise TickerMismatchError(f"Requested {ticker}, feed returned {snapshot.ticker}")
        if ticker in self.state.positions:
            self.live_prices[ticker] = snapshot.close
        quote = self.evaluate(snapshot)
        logger.info(f"{ticker}: {quote.signal.value} ({'; '.join(quote.reasons) or 'no trigger'})")
        return quote

    def buy(self, snapshot: PriceSnapshot, now: Optional[datetime] = None) -> TradeRecord:
        """
        Buy the snapshot's ticker if its verdict is BUY.

        Returns:
            The Buy trade record appended to the history

        Raises:
            SignalNotActionableError: If the verdict is SELL or NONE
            LedgerError: If the ledger rejects the buy
        """
        quote = self.evaluate(snapshot)
        if quote.signal != SignalType.BUY:
            raise SignalNotActionableError(
                f"Signal for {snapshot.ticker} is {quote.signal.value}, not BUY"
            )
        new_state = buy(self.state, snapshot, self.ledger_config, now=now)
        self._commit(new_state)
        self.live_prices[snapshot.ticker] = snapshot.close
        return new_state.history[-1]

    def exit(
        self,
        ticker: str,
        price: Optional[Union[Decimal, float, int, str]] = None,
        snapshot: Optional[PriceSnapshot] = None,
        now: Optional[datetime] = None,
    ) -> TradeRecord:
        """
        Exit the whole position in ticker.

        The exit price is, in order: ``price`` if given, else ``snapshot.close``
        (the snapshot must be for ``ticker``), else a fresh snapshot fetched for
        ``ticker``.

        Raises:
            TickerMismatchError: If snapshot belongs to another ticker
            UnavailableError: If a fresh snapshot is needed and the feed fails
            LedgerError: If the ledger rejects the exit
        """
        if price is None:
            if snapshot is None:
                snapshot = self.query(ticker).snapshot
            elif snapshot.ticker != ticker:
                raise TickerMismatchError(
                    f"Cannot exit {ticker} at the price of {snapshot.ticker}"
                )
            price = snapshot.close

        new_state = exit_position(self.state, ticker, to_decimal(price), self.ledger_config, now=now)
        self._commit(new_state)
        self.live_prices.pop(ticker, None)
        return new_state.history[-1]

    def refresh_live_prices(self) -> Dict[str, Decimal]:
        """
        Refresh live quotes for held tickers.

        Fresh quotes are merged over the previous map; on feed failure the
        previous map is kept unchanged.
        """
        tickers = set(self.state.positions)
        if not tickers:
            return dict(self.live_prices)
        try:
            quotes = self.gateway.get_batch_quotes(tickers)
        except UnavailableError as e:
            logger.warning(f"Live price refresh failed, keeping previous prices: {e}")
            return dict(self.live_prices)

        merged = dict(self.live_prices)
        merged.update({t: to_decimal(p) for t, p in quotes.items()})
        self.live_prices = merged
        logger.debug(f"Live prices refreshed for {sorted(quotes)}")
        return dict(self.live_prices)

    def metrics(self) -> PortfolioMetrics:
        return compute_metrics(self.state, self.live_prices)

    def holdings(self, now: Optional[datetime] = None) -> List[Holding]:
        return holdings(self.state, self.live_prices, now=now)

    def reset(self) -> LedgerState:
        """Start over with a fresh account at starting capital."""
        self.live_prices = {}
        self._commit(new_ledger(self.ledger_config))
        logger.info(f"Account reset to {self.state.cash}")
        return self.state
