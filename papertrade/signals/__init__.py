"""
Signal evaluation module.

Maps a price snapshot to a BUY / SELL / NONE verdict using the RSI threshold
and close-vs-moving-average rules.
"""
from .evaluator import evaluate, explain
from .rules import (
    SignalRule,
    RsiThresholdRule,
    MovingAverageRule,
    get_default_rules,
)

__all__ = [
    'evaluate',
    'explain',
    'SignalRule',
    'RsiThresholdRule',
    'MovingAverageRule',
    'get_default_rules',
]
