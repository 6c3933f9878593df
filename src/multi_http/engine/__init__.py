"""
Transfer engine - drives HTTP transfers for the coordinator.

Provides httpx-based transfers with:
- One private event loop per batch handle
- Connection pooling per set of connection settings
- Completion notifications in completion order
"""

from multi_http.engine.batch import (
    BatchHandle,
    FinishedTransfer,
    StepCode,
    StepResult,
)
from multi_http.engine.config import EngineConfig
from multi_http.engine.engine import TransferEngine, ensure_sync_body
from multi_http.engine.handle import HandleState, TransferHandle

__all__ = [
    "BatchHandle",
    "EngineConfig",
    "FinishedTransfer",
    "HandleState",
    "StepCode",
    "StepResult",
    "TransferEngine",
    "TransferHandle",
    "ensure_sync_body",
]
