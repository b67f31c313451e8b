"""
State manager for checkpointing the ledger.

Persists the LedgerState to a JSON file so a session can resume after a
restart. Saving is best-effort: failures are logged and never interrupt the
in-memory transition that triggered them.
"""
import json
import logging
from pathlib import Path
from typing import Optional, Union

from ..ledger.types import LedgerState


logger = logging.getLogger(__name__)


class StateManager:
    """
    Loads and saves the ledger snapshot.

    Responsibilities:
    - Restore the last saved LedgerState (or report that there is none)
    - Persist every new LedgerState to a JSON file
    """

    def __init__(self, state_file: Union[str, Path]):
        """
        Initialize state manager.

        Args:
            state_file: Path to JSON file for state persistence
        """
        self.state_file = Path(state_file)

    def load(self) -> Optional[LedgerState]:
        """
        Load state from JSON file.

        Returns:
            The saved LedgerState, or None if there is no usable saved state
        """
        if not self.state_file.exists():
            logger.info(f"State file {self.state_file} does not exist, starting fresh")
            return None

        try:
            with open(self.state_file, 'r') as f:
                data = json.load(f)
            state = LedgerState.from_dict(data)
        except Exception as e:
            logger.error(f"Failed to load state from {self.state_file}: {e}")
            return None

        logger.info(
            f"Loaded state from {self.state_file}: cash={state.cash}, "
            f"{len(state.positions)} positions, {len(state.history)} trades"
        )
        return state

    def save(self, state: LedgerState) -> bool:
        """
        Save state to JSON file.

        Returns:
            True if written, False if the write failed (error is logged)
        """
        try:
            # Ensure parent directory exists
            self.state_file.parent.mkdir(parents=True, exist_ok=True)

            # Write a sibling file, then swap it in
            tmp_file = self.state_file.with_suffix(self.state_file.suffix + ".tmp")
            with open(tmp_file, 'w') as f:
                json.dump(state.to_dict(), f, indent=2)
            tmp_file.replace(self.state_file)

            logger.debug(f"Saved state to {self.state_file}")
            return True
        except Exception as e:
            logger.error(f"Failed to save state to {self.state_file}: {e}")
            return False
