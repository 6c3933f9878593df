"""
Client base classes.

``BatchClient`` is the interface of clients that queue requests and
complete them later; ``AbstractTransferClient`` holds what every
engine-backed client needs: option resolution, handle creation and
release, handle preparation and transport error classification.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from multi_http.engine import HandleState, TransferEngine, ensure_sync_body
from multi_http.errors import (
    ErrorContext,
    NetworkError,
    RequestError,
    describe,
    is_network_failure,
)
from multi_http.message import ResponseBuilder
from multi_http.options import TransferOptions, resolve_options
from multi_http.telemetry import TransferStats

if TYPE_CHECKING:
    from collections.abc import Mapping

    import httpx

    from multi_http.engine import TransferHandle
    from multi_http.errors import TransferCode


class BatchClient(ABC):
    """A client that queues requests and completes them on demand."""

    @abstractmethod
    def send_async_request(
        self,
        request: httpx.Request,
        options: TransferOptions | Mapping[str, Any] | None = None,
    ) -> None:
        """Queue a request; its callback fires during a later proceed/flush."""

    @abstractmethod
    def proceed(self) -> None:
        """Make one pass over the queued requests."""

    @abstractmethod
    def flush(self) -> None:
        """Complete every queued request."""

    @abstractmethod
    def count(self) -> int:
        """Number of requests not yet completed."""


class AbstractTransferClient:
    """Shared plumbing for clients built on a TransferEngine.

    Attributes:
        stats: Handle, batch and completion counters
    """

    def __init__(
        self,
        options: TransferOptions | Mapping[str, Any] | None = None,
        *,
        engine: TransferEngine | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            options: Default options applied to every request
            engine: Transfer engine (a new httpx-backed engine by default)

        Raises:
            ValidationError: If the default options are invalid
        """
        self._engine = engine or TransferEngine()
        self._default_options = resolve_options(options)
        self.stats = TransferStats()

    @property
    def engine(self) -> TransferEngine:
        return self._engine

    @property
    def default_options(self) -> TransferOptions:
        return self._default_options

    def validate_options(
        self,
        options: TransferOptions | Mapping[str, Any] | None = None,
    ) -> TransferOptions:
        """Resolve per-request options over the client defaults."""
        return resolve_options(options, defaults=self._default_options)

    def validate_request(self, request: httpx.Request) -> None:
        """Check a request can be sent by the engine before it is accepted."""
        ensure_sync_body(request)

    def create_handle(self) -> TransferHandle:
        handle = self._engine.create_handle()
        self.stats.handles_created += 1
        return handle

    def release_handle(self, handle: TransferHandle) -> None:
        if handle.state is HandleState.RELEASED:
            return
        self._engine.release(handle)
        self.stats.handles_released += 1

    def prepare(
        self,
        handle: TransferHandle,
        request: httpx.Request,
        options: TransferOptions,
    ) -> ResponseBuilder:
        """Configure a handle for a request and return the builder it feeds."""
        builder = ResponseBuilder(request)
        self._engine.configure(handle, request, options, builder)
        return builder

    def parse_error(
        self,
        request: httpx.Request,
        code: TransferCode,
        handle: TransferHandle,
        reason: BaseException | None = None,
    ) -> None:
        """Raise the domain error for a failed transfer result.

        Raises:
            NetworkError: When the server could not be reached
            RequestError: For any other transport failure
        """
        if code.is_ok:
            return

        message = describe(code)
        if reason is not None:
            message = f"{message}: {reason}"

        context = ErrorContext(source="transfer", details={"transfer_id": handle.id})
        error_cls = NetworkError if is_network_failure(code) else RequestError
        raise error_cls(message, context, request=request, code=code, reason=reason)
