"""
Indicator evaluator: turns a price snapshot into a BUY / SELL / NONE verdict.

Both conditions of each side are checked independently and BUY is checked
before SELL:

- BUY  if rsi < oversold  OR close > ma
- SELL if rsi > overbought OR close < ma
- NONE otherwise

RSI exactly on a threshold, or close exactly equal to the MA, does not fire
that clause. The BUY side mixes a momentum condition (oversold) with a trend
condition (close above MA), so an oversold stock trading below its MA still
reads as BUY.
"""
from typing import List, Optional, Sequence, Tuple

from ..shared.config import SignalConfig
from ..shared.types import PriceSnapshot, SignalType
from .rules import SignalRule, get_default_rules

_DEFAULT_CONFIG = SignalConfig()


def explain(
    snapshot: PriceSnapshot,
    config: Optional[SignalConfig] = None,
    rules: Optional[Sequence[SignalRule]] = None,
) -> Tuple[SignalType, List[str]]:
    """
    Evaluate all rules and return the verdict with the reasons that produced it.

    Args:
        snapshot: Price snapshot to evaluate
        config: RSI thresholds (default: SignalConfig())
        rules: Rules to apply (default: RSI threshold + moving average)

    Returns:
        (verdict, reasons); reasons is empty for NONE
    """
    config = config or _DEFAULT_CONFIG
    rules = rules if rules is not None else get_default_rules()

    buy_reasons: List[str] = []
    sell_reasons: List[str] = []
    for rule in rules:
        b, s = rule.evaluate(snapshot, config)
        buy_reasons.extend(b)
        sell_reasons.extend(s)

    if buy_reasons:
        return SignalType.BUY, buy_reasons
    if sell_reasons:
        return SignalType.SELL, sell_reasons
    return SignalType.NONE, []


def evaluate(snapshot: PriceSnapshot, config: Optional[SignalConfig] = None) -> SignalType:
    """Verdict for one snapshot. Pure function of the snapshot and thresholds."""
    verdict, _ = explain(snapshot, config)
    return verdict
