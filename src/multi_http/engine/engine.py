"""
Transfer engine facade.

The coordinator talks to the transport only through this interface:
handles are created, configured, attached to a batch, driven, polled
for completion, detached and released here.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from typing import TYPE_CHECKING

from multi_http.engine.batch import BatchHandle, FinishedTransfer, StepResult
from multi_http.engine.config import EngineConfig
from multi_http.engine.handle import HandleState, TransferHandle
from multi_http.errors import EngineError, ValidationError

if TYPE_CHECKING:
    from collections.abc import Iterator

    import httpx

    from multi_http.message import ResponseBuilder
    from multi_http.options import TransferOptions


def ensure_sync_body(request: httpx.Request) -> None:
    """Reject request bodies that can only be read inside an event loop.

    Raises:
        ValidationError: If the body is an async-only stream
    """
    if not isinstance(request.stream, Iterable):
        raise ValidationError(
            "Request body must be readable without an event loop",
            field="request.stream",
        )


class TransferEngine:
    """httpx-backed transfer engine.

    Example:
        >>> engine = TransferEngine()
        >>> batch = engine.create_batch()
        >>> handle = engine.create_handle()
        >>> engine.configure(handle, request, options, ResponseBuilder(request))
        >>> engine.attach(batch, handle)
        >>> while engine.step(batch).still_active:
        ...     engine.wait_ready(batch)
        >>> finished = list(engine.poll_finished(batch))
    """

    def __init__(self, config: EngineConfig | None = None) -> None:
        self._config = config or EngineConfig.default()
        self._live_handles = 0

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def live_handles(self) -> int:
        """Handles created and not yet released."""
        return self._live_handles

    def create_handle(self) -> TransferHandle:
        """Create a transfer handle.

        Raises:
            EngineError: When the configured handle limit is reached
        """
        limit = self._config.max_handles
        if limit is not None and self._live_handles >= limit:
            raise EngineError(
                f"Unable to create transfer handle: {limit} handles already in use"
            )
        self._live_handles += 1
        return TransferHandle()

    def configure(
        self,
        handle: TransferHandle,
        request: httpx.Request,
        options: TransferOptions,
        sink: ResponseBuilder,
    ) -> None:
        """Bind a request, its options and an output sink to a handle."""
        ensure_sync_body(request)
        # Loads the body once; the transfer re-sends it from memory.
        request.read()
        handle.configure(request, options, sink)

    def create_batch(self) -> BatchHandle:
        """Create a batch handle.

        Raises:
            EngineError: If the batch cannot be created
        """
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            pass
        else:
            raise EngineError(
                "Unable to create batch handle: an event loop is already running in this thread"
            ).with_hint("drive the client from synchronous code or a worker thread")

        try:
            return BatchHandle(self._config)
        except OSError as e:
            raise EngineError("Unable to create batch handle", cause=e) from e

    def attach(self, batch: BatchHandle, handle: TransferHandle) -> None:
        batch.attach(handle)

    def detach(self, batch: BatchHandle, handle: TransferHandle) -> None:
        batch.detach(handle)

    def step(self, batch: BatchHandle) -> StepResult:
        return batch.step()

    def wait_ready(self, batch: BatchHandle, timeout: float | None = None) -> int:
        return batch.wait_ready(self._config.select_timeout if timeout is None else timeout)

    def poll_finished(self, batch: BatchHandle) -> Iterator[FinishedTransfer]:
        return batch.poll_finished()

    def destroy_batch(self, batch: BatchHandle) -> None:
        batch.close()

    def release(self, handle: TransferHandle) -> None:
        if handle.state is HandleState.RELEASED:
            return
        handle.release()
        self._live_handles -= 1
