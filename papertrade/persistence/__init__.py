"""
Persistence module.

JSON checkpointing of the ledger state for crash recovery.
"""
from .state import StateManager

__all__ = ["StateManager"]
