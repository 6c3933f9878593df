"""
Transfer handle: the engine's representation of one transfer.
"""

from __future__ import annotations

import itertools
from enum import Enum
from typing import TYPE_CHECKING

from multi_http.errors import EngineError

if TYPE_CHECKING:
    import httpx

    from multi_http.message import ResponseBuilder
    from multi_http.options import TransferOptions

_handle_ids = itertools.count(1)


class HandleState(str, Enum):
    """Lifecycle of a transfer handle."""

    IDLE = "idle"
    CONFIGURED = "configured"
    ATTACHED = "attached"
    FINISHED = "finished"
    RELEASED = "released"


class TransferHandle:
    """One transfer as seen by the engine.

    Handles compare by identity; completion notifications are matched
    back to their queue entries that way.

    Attributes:
        id: Process-unique handle number (for logging)
        state: Current lifecycle state
        request: Request to send, once configured
        options: Options for the transfer, once configured
        sink: Builder receiving the transfer output, once configured
    """

    def __init__(self) -> None:
        self.id = next(_handle_ids)
        self.state = HandleState.IDLE
        self.request: httpx.Request | None = None
        self.options: TransferOptions | None = None
        self.sink: ResponseBuilder | None = None

    def configure(
        self,
        request: httpx.Request,
        options: TransferOptions,
        sink: ResponseBuilder,
    ) -> None:
        if self.state not in (HandleState.IDLE, HandleState.CONFIGURED):
            raise EngineError(f"Cannot configure transfer handle #{self.id} in state {self.state.value}")
        self.request = request
        self.options = options
        self.sink = sink
        self.state = HandleState.CONFIGURED

    def release(self) -> None:
        self.request = None
        self.options = None
        self.sink = None
        self.state = HandleState.RELEASED

    def __repr__(self) -> str:
        target = f" {self.request.method} {self.request.url}" if self.request is not None else ""
        return f"<TransferHandle #{self.id} {self.state.value}{target}>"
