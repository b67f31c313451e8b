"""
Tests for ledger buy / exit transitions.
"""
from datetime import datetime
from decimal import Decimal

import pytest

from papertrade.ledger import (
    new_ledger,
    buy,
    exit_position,
    LedgerState,
    InsufficientSizeError,
    InsufficientCapitalError,
    NoSuchPositionError,
)
from papertrade.shared.config import LedgerConfig
from papertrade.shared.types import PriceSnapshot, SignalType, TradeAction


T0 = datetime(2024, 1, 2, 10, 0, 0)
T1 = datetime(2024, 1, 5, 11, 30, 0)
T2 = datetime(2024, 1, 9, 15, 0, 0)


def _snap(ticker="TICKER", close=500, ma=480, rsi=25):
    return PriceSnapshot.from_dict({"ticker": ticker, "close": close, "ma": ma, "rsi": rsi})


@pytest.fixture
def fresh():
    return new_ledger()


@pytest.fixture
def after_buy(fresh):
    return buy(fresh, _snap(), now=T0)


class TestNewLedger:
    def test_starts_with_capital_and_nothing_else(self, fresh):
        assert fresh.cash == Decimal(100000)
        assert fresh.initial_capital == Decimal(100000)
        assert fresh.positions == {}
        assert fresh.history == ()

    def test_custom_capital(self):
        state = new_ledger(LedgerConfig(starting_capital=50000))
        assert state.cash == Decimal(50000)
        assert state.initial_capital == Decimal(50000)


class TestBuy:
    def test_reference_scenario(self, fresh):
        """capital 100000, close 500 -> qty 40, cost 20020, cash 79980."""
        state = buy(fresh, _snap(), now=T0)

        assert state.cash == Decimal(79980)
        assert list(state.positions) == ["TICKER"]
        pos = state.positions["TICKER"]
        assert pos.qty == 40
        assert pos.avg_price == Decimal(500)
        assert pos.opened_at == T0

        assert len(state.history) == 1
        record = state.history[0]
        assert record.action == TradeAction.BUY
        assert record.signal == SignalType.BUY
        assert record.qty == 40
        assert record.price == Decimal(500)
        assert record.commission == Decimal(20)
        assert record.pnl is None
        assert record.notes == "Bought based on signal"

    def test_input_state_not_mutated(self, fresh):
        buy(fresh, _snap(), now=T0)
        assert fresh.cash == Decimal(100000)
        assert fresh.positions == {}
        assert fresh.history == ()

    def test_sizes_from_current_cash(self, after_buy):
        """Second buy invests 20% of 79980, not of total equity."""
        state = buy(after_buy, _snap(ticker="OTHER", close=100), now=T1)
        # floor(15996 / 100) = 159
        assert state.positions["OTHER"].qty == 159
        assert state.cash == Decimal(79980) - Decimal(159 * 100 + 20)

    def test_cash_decreases_by_exact_cost(self, after_buy):
        before = after_buy.cash
        state = buy(after_buy, _snap(ticker="OTHER", close=333), now=T1)
        qty = state.positions["OTHER"].qty
        assert before - state.cash == Decimal(333) * qty + Decimal(20)
        assert len(state.history) == len(after_buy.history) + 1

    def test_top_up_merges_at_weighted_average(self, after_buy):
        state = buy(after_buy, _snap(close=400), now=T1)

        assert list(state.positions) == ["TICKER"]
        pos = state.positions["TICKER"]
        # floor(0.2 * 79980 / 400) = 39
        assert pos.qty == 40 + 39
        assert pos.avg_price == (Decimal(500) * 40 + Decimal(400) * 39) / Decimal(79)
        assert state.cash == Decimal(79980) - Decimal(39 * 400 + 20)
        assert len(state.history) == 2

    def test_top_up_resets_opened_at(self, after_buy):
        state = buy(after_buy, _snap(close=400), now=T1)
        assert state.positions["TICKER"].opened_at == T1

    def test_rejects_below_min_trade_value(self):
        state = new_ledger(LedgerConfig(starting_capital=4000))
        # 20% of 4000 = 800 -> 8 shares -> 800 < 1000
        with pytest.raises(InsufficientSizeError):
            buy(state, _snap(close=100))

    def test_rejects_zero_quantity(self, fresh):
        with pytest.raises(InsufficientSizeError):
            buy(fresh, _snap(close=25000))

    def test_rejects_cost_above_cash(self):
        config = LedgerConfig(starting_capital=1000, position_size_pct=1)
        state = new_ledger(config)
        # 10 x 100 = 1000 notional, + 20 commission > 1000 cash
        with pytest.raises(InsufficientCapitalError):
            buy(state, _snap(close=100), config=config)
        assert state.cash == Decimal(1000)
        assert state.history == ()

    def test_rejection_leaves_state_unchanged(self, after_buy):
        snapshot = after_buy.to_dict()
        with pytest.raises(InsufficientSizeError):
            buy(after_buy, _snap(ticker="BIG", close=50000))
        assert after_buy.to_dict() == snapshot

    def test_custom_commission(self):
        config = LedgerConfig(commission=5)
        state = buy(new_ledger(config), _snap(), config=config, now=T0)
        assert state.cash == Decimal(100000 - 20000 - 5)
        assert state.history[-1].commission == Decimal(5)

    def test_cash_never_negative_over_many_buys(self, fresh):
        state = fresh
        for i in range(30):
            try:
                state = buy(state, _snap(ticker=f"T{i}", close=97), now=T0)
            except InsufficientSizeError:
                break
            assert state.cash >= 0


class TestExit:
    def test_reference_scenario(self, after_buy):
        """Exit at 600 -> pnl 3980, cash 103960."""
        state = exit_position(after_buy, "TICKER", 600, now=T1)

        assert state.cash == Decimal(103960)
        assert state.positions == {}
        assert len(state.history) == 2
        record = state.history[-1]
        assert record.action == TradeAction.EXIT
        assert record.signal == SignalType.SELL
        assert record.qty == 40
        assert record.price == Decimal(600)
        assert record.pnl == Decimal(3980)
        assert record.notes == "Exited manually"

    def test_losing_exit(self, after_buy):
        state = exit_position(after_buy, "TICKER", Decimal("450.5"), now=T1)
        assert state.history[-1].pnl == (Decimal("450.5") - 500) * 40 - 20
        assert state.cash == Decimal(79980) + Decimal("450.5") * 40 - 20

    def test_exit_only_removes_that_ticker(self, after_buy):
        both = buy(after_buy, _snap(ticker="OTHER", close=100), now=T1)
        state = exit_position(both, "TICKER", 510, now=T2)
        assert list(state.positions) == ["OTHER"]

    def test_unknown_ticker_rejected(self, after_buy):
        snapshot = after_buy.to_dict()
        with pytest.raises(NoSuchPositionError):
            exit_position(after_buy, "NOPE", 600)
        assert after_buy.to_dict() == snapshot

    def test_exit_twice_rejected(self, after_buy):
        state = exit_position(after_buy, "TICKER", 600, now=T1)
        with pytest.raises(NoSuchPositionError):
            exit_position(state, "TICKER", 600, now=T2)

    @pytest.mark.parametrize("price", [0, -1, float("nan"), "Infinity"])
    def test_invalid_price_rejected(self, after_buy, price):
        with pytest.raises(ValueError):
            exit_position(after_buy, "TICKER", price)

    def test_empty_ticker_rejected(self, after_buy):
        with pytest.raises(ValueError):
            exit_position(after_buy, "", 600)

    def test_input_state_not_mutated(self, after_buy):
        exit_position(after_buy, "TICKER", 600, now=T1)
        assert "TICKER" in after_buy.positions
        assert len(after_buy.history) == 1


class TestLedgerStateSerialization:
    def test_dict_round_trip(self, after_buy):
        state = exit_position(buy(after_buy, _snap(ticker="B", close=120), now=T1), "TICKER", 600, now=T2)
        restored = LedgerState.from_dict(state.to_dict())
        assert restored == state

    def test_missing_initial_capital_defaults_to_cash(self):
        restored = LedgerState.from_dict({"cash": "1234.5", "positions": [], "history": []})
        assert restored.initial_capital == Decimal("1234.5")


class TestLedgerStateImmutability:
    def test_positions_cannot_be_written_in_place(self, after_buy):
        with pytest.raises(TypeError):
            after_buy.positions["GHOST"] = after_buy.positions["TICKER"]
        with pytest.raises(TypeError):
            del after_buy.positions["TICKER"]
        assert list(after_buy.positions) == ["TICKER"]

    def test_new_and_restored_states_are_read_only(self, fresh, after_buy):
        restored = LedgerState.from_dict(after_buy.to_dict())
        for state in (fresh, restored):
            with pytest.raises(TypeError):
                state.positions["GHOST"] = None

    def test_caller_dict_is_copied(self, after_buy):
        positions = dict(after_buy.positions)
        state = LedgerState(cash=Decimal(1), positions=positions)
        positions.clear()
        assert list(state.positions) == ["TICKER"]


class TestPositionLookup:
    def test_get_position(self, after_buy):
        assert after_buy.get_position("TICKER").qty == 40
        assert after_buy.get_position("NOPE") is None

    def test_cost_basis_excludes_commission(self, after_buy):
        assert after_buy.get_position("TICKER").cost_basis == Decimal(20000)
