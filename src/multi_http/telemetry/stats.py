"""
Transfer statistics for a coordinator.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class TransferStats:
    """Counters kept by a MultiClient.

    Attributes:
        handles_created: Transfer handles created
        handles_released: Transfer handles released
        batches_created: Batch handles created
        batches_destroyed: Batch handles destroyed
        transfers_succeeded: Completions delivered with a response
        transfers_failed: Completions delivered with an error
        pushed: Finished notifications that matched no queue entry
    """

    handles_created: int = 0
    handles_released: int = 0
    batches_created: int = 0
    batches_destroyed: int = 0
    transfers_succeeded: int = 0
    transfers_failed: int = 0
    pushed: int = 0

    @property
    def handles_live(self) -> int:
        """Handles created but not yet released."""
        return self.handles_created - self.handles_released

    @property
    def transfers_completed(self) -> int:
        return self.transfers_succeeded + self.transfers_failed

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "handles_created": self.handles_created,
            "handles_released": self.handles_released,
            "handles_live": self.handles_live,
            "batches_created": self.batches_created,
            "batches_destroyed": self.batches_destroyed,
            "transfers_succeeded": self.transfers_succeeded,
            "transfers_failed": self.transfers_failed,
            "transfers_completed": self.transfers_completed,
            "pushed": self.pushed,
        }
