"""
Multi-transfer client.

Queues requests and completes them in batches over one batch handle.
Nothing runs in the background: transfers only advance while the
caller is inside ``proceed``, ``flush`` or ``send_request``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from multi_http.client.base import AbstractTransferClient, BatchClient
from multi_http.client.push import PushedResponseHandler
from multi_http.errors import EngineError, TransferError
from multi_http.telemetry import LogContext, get_log_context, get_logger, set_log_context
from multi_http.transfer_queue import TransferQueue

if TYPE_CHECKING:
    from collections.abc import Mapping

    import httpx

    from multi_http.engine import (
        BatchHandle,
        FinishedTransfer,
        StepResult,
        TransferEngine,
        TransferHandle,
    )
    from multi_http.options import TransferOptions
    from multi_http.transfer_queue import QueueEntry

logger = get_logger("multi_http.client")


@dataclass
class _ResultSlot:
    """Outcome captured for send_request."""

    response: httpx.Response | None = None
    error: TransferError | None = None


class MultiClient(AbstractTransferClient, BatchClient):
    """Batched HTTP client driven by explicit polling.

    Requests are queued with ``send_async_request`` and complete during
    later ``proceed``/``flush`` calls, each invoking the request's
    ``callback(request, response, error)``. Errors are reported twice:
    to the failed request's callback, and, for the first failure of the
    pass that empties the queue, raised from ``proceed``.

    Example:
        >>> def on_done(request, response, error):
        ...     print(request.url, response.status_code if response else error)
        >>> client = MultiClient()
        >>> for url in urls:
        ...     client.send_async_request(httpx.Request("GET", url), {"callback": on_done})
        >>> client.flush()

        >>> # Single request over the same machinery
        >>> response = client.send_request(httpx.Request("GET", "https://example.com"))
    """

    def __init__(
        self,
        options: TransferOptions | Mapping[str, Any] | None = None,
        *,
        engine: TransferEngine | None = None,
        push_handler: PushedResponseHandler | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            options: Default options applied to every request
            engine: Transfer engine (a new httpx-backed engine by default)
            push_handler: Sink for finished transfers that match no request
        """
        super().__init__(options, engine=engine)
        self._queue = TransferQueue()
        self._batch: BatchHandle | None = None
        self._push_handler = push_handler or PushedResponseHandler()

    @property
    def push_handler(self) -> PushedResponseHandler:
        return self._push_handler

    @property
    def has_batch(self) -> bool:
        """Whether a batch handle currently exists."""
        return self._batch is not None

    def send_async_request(
        self,
        request: httpx.Request,
        options: TransferOptions | Mapping[str, Any] | None = None,
    ) -> None:
        """Queue a request.

        Args:
            request: Request to send
            options: Per-request options, including ``callback``

        Raises:
            ValidationError: If the options or the request body are invalid
        """
        self.validate_request(request)
        resolved = self.validate_options(options)
        self._queue.enqueue(request, resolved)

    def send_request(
        self,
        request: httpx.Request,
        options: TransferOptions | Mapping[str, Any] | None = None,
    ) -> httpx.Response:
        """Send a request and wait for its response.

        The whole queue is flushed, not only this request, so an error
        raised for any other queued transfer propagates from here too.

        Args:
            request: Request to send
            options: Per-request options; a ``callback`` still fires

        Returns:
            The response to this request

        Raises:
            TransferError: If this transfer, or a sibling in the batch, failed
            EngineError: If the engine could not drive the batch
            ValidationError: If the options or the request body are invalid
        """
        self.validate_request(request)
        resolved = self.validate_options(options)
        original = resolved.callback
        slot = _ResultSlot()

        def capture(
            req: httpx.Request,
            response: httpx.Response | None,
            error: TransferError | None,
        ) -> None:
            slot.response = response
            slot.error = error
            original(req, response, error)

        self._queue.enqueue(request, resolved.add(callback=capture))
        self.flush()

        if slot.response is None:
            if slot.error is not None:
                raise slot.error
            raise EngineError("Transfer completed without reporting a result")
        return slot.response

    def count(self) -> int:
        return self._queue.size()

    def __len__(self) -> int:
        return self._queue.size()

    def flush(self) -> None:
        """Call ``proceed`` until the queue is empty.

        Raises:
            TransferError: First failure of the draining pass
            EngineError: If the engine could not drive the batch
        """
        while self._queue:
            self.proceed()

    def proceed(self) -> None:
        """Make one pass of the event loop.

        Prepares newly queued requests, drives every attached transfer
        until none is active, and completes each finished one. When the
        pass leaves the queue empty, the batch handle is destroyed and the
        first transfer error of the pass, if any, is raised.

        Raises:
            TransferError: First failure of a pass that empties the queue
            EngineError: If a handle cannot be created or the batch cannot advance
        """
        if not self._queue:
            return

        batch = self._ensure_batch()
        try:
            for entry in self._queue.queued():
                self._prepare_entry(batch, entry)

            result = self._drive(batch)
            error = self._harvest(batch, None)
            while result.still_active and result.ok:
                self._engine.wait_ready(batch)
                result = self._drive(batch)
                error = self._harvest(batch, error)
        finally:
            if not self._queue:
                self._close_batch()

        if not self._queue:
            if error is not None:
                raise error
            return

        if not result.ok:
            raise EngineError(
                f"Transfer engine failed to advance the batch ({len(self._queue)} transfers pending)"
            )

    def close(self) -> None:
        """Destroy the batch handle and drop unfinished requests.

        Handles of in-flight requests are released; their callbacks are
        not invoked.
        """
        abandoned = self._queue.clear()
        for entry in abandoned:
            if entry.handle is None:
                continue
            if self._batch is not None:
                self._engine.detach(self._batch, entry.handle)
            self.release_handle(entry.handle)
        self._close_batch()

        if abandoned:
            logger.warning("Client closed with unfinished transfers", abandoned=len(abandoned))

    def __enter__(self) -> MultiClient:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def _ensure_batch(self) -> BatchHandle:
        if self._batch is None:
            self._batch = self._engine.create_batch()
            self.stats.batches_created += 1
            logger.debug("Batch handle created", queued=len(self._queue))
        return self._batch

    def _close_batch(self) -> None:
        batch, self._batch = self._batch, None
        if batch is None:
            return
        self._engine.destroy_batch(batch)
        self.stats.batches_destroyed += 1
        logger.debug("Batch handle destroyed")

    def _prepare_entry(self, batch: BatchHandle, entry: QueueEntry) -> None:
        handle = self.create_handle()
        try:
            builder = self.prepare(handle, entry.request, entry.options)
            self._engine.attach(batch, handle)
        except Exception:
            self.release_handle(handle)
            raise
        entry.prepare(handle, builder)

    def _drive(self, batch: BatchHandle) -> StepResult:
        """Step the batch until no more work is immediately available."""
        result = self._engine.step(batch)
        while result.may_have_more:
            result = self._engine.step(batch)
        return result

    def _harvest(
        self,
        batch: BatchHandle,
        error: TransferError | None,
    ) -> TransferError | None:
        """Complete every finished transfer; return the first error seen."""
        for finished in self._engine.poll_finished(batch):
            entry = self._queue.find(finished.handle)
            if entry is None:
                self._handle_pushed(batch, finished.handle)
                continue

            failure = self._complete(batch, entry, finished)
            if failure is not None and error is None:
                error = failure
        return error

    def _complete(
        self,
        batch: BatchHandle,
        entry: QueueEntry,
        finished: FinishedTransfer,
    ) -> TransferError | None:
        handle = finished.handle
        builder = entry.builder
        if builder is None:
            raise EngineError(f"Transfer handle #{handle.id} finished for an unprepared request")

        response: httpx.Response | None = None
        failure: TransferError | None = None
        try:
            self.parse_error(entry.request, finished.code, handle, finished.reason)
            response = builder.get_response()
        except TransferError as e:
            failure = e

        self._engine.detach(batch, handle)
        self.release_handle(handle)
        self._queue.remove(entry)

        previous = get_log_context()
        set_log_context(
            LogContext(
                transfer_id=handle.id,
                method=entry.request.method,
                url=str(entry.request.url),
            )
        )
        try:
            if failure is None:
                self.stats.transfers_succeeded += 1
            else:
                self.stats.transfers_failed += 1
                logger.warning("Transfer failed", code=failure.code.value, error=failure.message)

            entry.options.callback(entry.request, response, failure)
        finally:
            set_log_context(previous)
        return failure

    def _handle_pushed(self, batch: BatchHandle, handle: TransferHandle) -> None:
        self.stats.pushed += 1
        try:
            self._push_handler.handle(handle)
        finally:
            self._engine.detach(batch, handle)
            self._engine.release(handle)
