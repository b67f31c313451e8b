"""
Tests for portfolio analytics.
"""
from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from papertrade.evaluation import (
    unrealized_pnl,
    realized_pnl,
    best_position,
    worst_position,
    sharpe_ratio,
    capital_trajectory,
    max_drawdown_pct,
    win_rate,
    total_portfolio_value,
    holdings,
    compute_metrics,
)
from papertrade.ledger import new_ledger, buy, exit_position, LedgerState, TradeRecord
from papertrade.shared.types import PriceSnapshot, SignalType, TradeAction


T0 = datetime(2024, 3, 1, 10, 0, 0)


def _snap(ticker, close):
    return PriceSnapshot.from_dict({"ticker": ticker, "close": close, "ma": 1, "rsi": 25})


def _exit_record(pnl, ticker="X"):
    return TradeRecord(
        timestamp=T0,
        ticker=ticker,
        action=TradeAction.EXIT,
        qty=1,
        price=Decimal(100),
        commission=Decimal(20),
        signal=SignalType.SELL,
        pnl=Decimal(pnl),
    )


def _state_with_exits(pnls):
    return LedgerState(
        cash=Decimal(100000),
        positions={},
        history=tuple(_exit_record(p) for p in pnls),
        initial_capital=Decimal(100000),
    )


@pytest.fixture
def two_positions():
    """AAA: 40 @ 500, BBB: 159 @ 100 (second buy sized from 79980 cash)."""
    state = buy(new_ledger(), _snap("AAA", 500), now=T0)
    return buy(state, _snap("BBB", 100), now=T0)


class TestUnrealizedPnl:
    def test_marks_to_live_prices(self, two_positions):
        live = {"AAA": Decimal(550), "BBB": Decimal(90)}
        expected = Decimal(50) * 40 + Decimal(-10) * 159
        assert unrealized_pnl(two_positions, live) == expected

    def test_missing_price_contributes_zero(self, two_positions):
        assert unrealized_pnl(two_positions, {"AAA": 510}) == Decimal(400)

    def test_no_prices(self, two_positions):
        assert unrealized_pnl(two_positions, {}) == 0
        assert unrealized_pnl(two_positions) == 0

    def test_nan_price_treated_as_missing(self, two_positions):
        assert unrealized_pnl(two_positions, {"AAA": float("nan"), "BBB": 101}) == Decimal(159)

    def test_float_prices_accepted(self, two_positions):
        assert unrealized_pnl(two_positions, {"AAA": 500.25}) == Decimal("0.25") * 40


class TestRealizedPnl:
    def test_sum_of_exit_pnls(self):
        state = _state_with_exits([1000, -500, 250])
        assert realized_pnl(state) == Decimal(750)

    def test_ignores_buys(self, two_positions):
        assert realized_pnl(two_positions) == 0

    def test_idempotent(self):
        state = _state_with_exits([1000, -500])
        assert realized_pnl(state) == realized_pnl(state)

    def test_matches_ledger_exit(self, two_positions):
        state = exit_position(two_positions, "AAA", 600, now=T0)
        assert realized_pnl(state) == Decimal(3980)


class TestBestWorst:
    def test_empty_portfolio(self):
        assert best_position(new_ledger(), {}) is None
        assert worst_position(new_ledger(), {}) is None

    def test_picks_extremes(self, two_positions):
        live = {"AAA": Decimal(550), "BBB": Decimal(90)}
        assert best_position(two_positions, live).ticker == "AAA"
        assert best_position(two_positions, live).pnl == Decimal(2000)
        assert worst_position(two_positions, live).ticker == "BBB"
        assert worst_position(two_positions, live).pnl == Decimal(-1590)

    def test_unpriced_position_marked_at_cost(self, two_positions):
        live = {"AAA": Decimal(490)}
        best = best_position(two_positions, live)
        assert best.ticker == "BBB"
        assert best.pnl == 0
        assert best.mark_price == Decimal(100)
        assert worst_position(two_positions, live).ticker == "AAA"


class TestSharpeRatio:
    def test_reference_scenario(self):
        """[1000, -500] -> 250 / 1060.66 (n - 1 divisor)."""
        ratio = sharpe_ratio(_state_with_exits([1000, -500]))
        assert ratio == pytest.approx(250 / 1060.6601717798212)
        assert round(ratio, 2) == 0.24

    def test_fewer_than_two_exits(self):
        assert sharpe_ratio(_state_with_exits([])) is None
        assert sharpe_ratio(_state_with_exits([1000])) is None

    def test_zero_stdev(self):
        assert sharpe_ratio(_state_with_exits([300, 300, 300])) is None


class TestWinRate:
    def test_half_wins(self):
        assert win_rate(_state_with_exits([1000, -500])) == pytest.approx(50.0)

    def test_zero_pnl_is_not_a_win(self):
        assert win_rate(_state_with_exits([0, 10, -10, 20])) == pytest.approx(50.0)

    def test_no_exits(self, two_positions):
        assert win_rate(two_positions) is None


class TestMaxDrawdown:
    def test_empty_history(self):
        assert max_drawdown_pct(new_ledger()) == 0.0

    def test_single_buy(self):
        """Drawdown equals (commission + qty * close) / initial capital."""
        state = buy(new_ledger(), _snap("AAA", 500), now=T0)
        assert max_drawdown_pct(state) == pytest.approx(20020 / 100000 * 100)

    def test_recovery_keeps_max(self):
        state = buy(new_ledger(), _snap("AAA", 500), now=T0)
        state = exit_position(state, "AAA", 600, now=T0)
        assert capital_trajectory(state) == [Decimal(100000), Decimal(79980), Decimal(103960)]
        assert max_drawdown_pct(state) == pytest.approx(20.02)

    def test_drawdown_from_new_peak(self):
        def record(action, qty, price):
            return TradeRecord(
                timestamp=T0, ticker="AAA", action=action, qty=qty, price=Decimal(price),
                commission=Decimal(20),
                signal=SignalType.BUY if action == TradeAction.BUY else SignalType.SELL,
                pnl=None if action == TradeAction.BUY else Decimal(0),
            )

        state = LedgerState(
            cash=Decimal(0),
            history=(
                record(TradeAction.BUY, 10, 1000),   # 89980
                record(TradeAction.EXIT, 10, 2000),  # 109960, new peak
                record(TradeAction.BUY, 50, 1000),   # 59940
            ),
            initial_capital=Decimal(100000),
        )
        expected = Decimal(50020) / Decimal(109960) * 100
        assert max_drawdown_pct(state) == pytest.approx(float(expected))

    def test_replay_starts_from_initial_capital_not_cash(self, two_positions):
        state = LedgerState(
            cash=Decimal(1),
            positions=two_positions.positions,
            history=two_positions.history,
            initial_capital=two_positions.initial_capital,
        )
        assert max_drawdown_pct(state) == max_drawdown_pct(two_positions)


class TestPortfolioValue:
    def test_cash_plus_unrealized(self, two_positions):
        live = {"AAA": Decimal(550)}
        assert total_portfolio_value(two_positions, live) == two_positions.cash + Decimal(2000)


class TestHoldings:
    def test_rows(self, two_positions):
        rows = holdings(two_positions, {"AAA": Decimal(550)}, now=T0 + timedelta(days=3, hours=2))
        by_ticker = {r.ticker: r for r in rows}

        aaa = by_ticker["AAA"]
        assert aaa.current_price == Decimal(550)
        assert aaa.pnl == Decimal(2000)
        assert aaa.return_pct == pytest.approx(10.0)
        assert aaa.days_held == 3
        assert aaa.priced

        bbb = by_ticker["BBB"]
        assert bbb.current_price == Decimal(100)
        assert bbb.pnl == 0
        assert not bbb.priced


class TestComputeMetrics:
    def test_bundle(self, two_positions):
        state = exit_position(two_positions, "AAA", 600, now=T0)
        metrics = compute_metrics(state, {"BBB": Decimal(110)})

        assert metrics.realized_pnl == Decimal(3980)
        assert metrics.unrealized_pnl == Decimal(1590)
        assert metrics.total_portfolio_value == state.cash + Decimal(1590)
        assert metrics.win_rate == pytest.approx(100.0)
        assert metrics.sharpe_ratio is None
        assert metrics.best_position.ticker == "BBB"
        assert metrics.open_positions == 1
        assert metrics.total_trades == 3
        assert metrics.closed_trades == 1

    def test_empty_account(self):
        metrics = compute_metrics(new_ledger(), {})
        assert metrics.total_portfolio_value == Decimal(100000)
        assert metrics.max_drawdown_pct == 0.0
        assert metrics.win_rate is None
        assert metrics.best_position is None
