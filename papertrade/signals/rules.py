"""
Pluggable signal rules for the indicator evaluator.

Rules produce buy/sell "reasons" from a price snapshot; the evaluator merges
reasons into a single verdict. New rules can be added without changing the
evaluator.
"""
from typing import List, Tuple, Protocol

from ..shared.config import SignalConfig
from ..shared.types import PriceSnapshot


class SignalRule(Protocol):
    """Protocol for a rule that evaluates one snapshot and returns buy/sell reason strings."""

    def evaluate(
        self,
        snapshot: PriceSnapshot,
        config: SignalConfig,
    ) -> Tuple[List[str], List[str]]:
        """
        Evaluate rule for this snapshot.

        Args:
            snapshot: Latest close with its MA and RSI
            config: SignalConfig with RSI thresholds

        Returns:
            (buy_reasons, sell_reasons); either list may be empty
        """
        ...


class RsiThresholdRule:
    """RSI oversold buy and overbought sell reasons (strict inequalities)."""

    def evaluate(
        self,
        snapshot: PriceSnapshot,
        config: SignalConfig,
    ) -> Tuple[List[str], List[str]]:
        buy_reasons: List[str] = []
        sell_reasons: List[str] = []
        if snapshot.rsi < config.rsi_oversold:
            buy_reasons.append(f"RSI oversold ({snapshot.rsi:.0f} < {config.rsi_oversold})")
        if snapshot.rsi > config.rsi_overbought:
            sell_reasons.append(f"RSI overbought ({snapshot.rsi:.0f} > {config.rsi_overbought})")
        return buy_reasons, sell_reasons


class MovingAverageRule:
    """Close above MA is a buy reason, close below MA a sell reason."""

    def evaluate(
        self,
        snapshot: PriceSnapshot,
        config: SignalConfig,
    ) -> Tuple[List[str], List[str]]:
        buy_reasons: List[str] = []
        sell_reasons: List[str] = []
        if snapshot.close > snapshot.ma:
            buy_reasons.append(f"Close above MA ({snapshot.close:.2f} > {snapshot.ma:.2f})")
        if snapshot.close < snapshot.ma:
            sell_reasons.append(f"Close below MA ({snapshot.close:.2f} < {snapshot.ma:.2f})")
        return buy_reasons, sell_reasons


def get_default_rules() -> List[SignalRule]:
    """
    Return the rules the evaluator applies.

    Order: RSI, MA (only affects the order of reasons, not the verdict).
    """
    return [RsiThresholdRule(), MovingAverageRule()]
