"""Base error classes for multi-http-python.

Provides a layered error hierarchy:
- MultiHttpError: Base class for all library errors
- EngineError: Transfer engine resource failures (batch/transfer handles)
- TransferError: A transfer finished with a non-success transport result
- NetworkError: Resolve/connect/proxy/timeout/TLS failures
- RequestError: Any other transport failure
- ResponseError: The response could not be built from the transfer output
- ValidationError: Invalid transfer options
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import httpx

    from multi_http.errors.classification import TransferCode


@dataclass
class ErrorContext:
    """Structured error context for diagnostics."""

    field_path: str | None = None
    """Path to the problematic field (e.g., 'max_redirects')"""

    details: dict[str, Any] = field(default_factory=dict)
    """Additional details about the error"""

    source: str | None = None
    """Error source (e.g., 'engine', 'transfer', 'options')"""

    hint: str | None = None
    """Actionable hint for resolving the error"""

    def __str__(self) -> str:
        parts = []
        if self.source:
            parts.append(f"[{self.source}]")
        if self.field_path:
            parts.append(f"at '{self.field_path}'")
        if self.hint:
            parts.append(f"(hint: {self.hint})")
        return " ".join(parts)


class MultiHttpError(Exception):
    """Base class for all multi-http-python errors.

    Attributes:
        message: Human-readable error message
        context: Optional structured error context
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
    ) -> None:
        self.message = message
        self.context = context or ErrorContext()
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        ctx_str = str(self.context)
        if ctx_str:
            return f"{self.message} {ctx_str}"
        return self.message

    def with_hint(self, hint: str) -> MultiHttpError:
        """Add a hint to this error."""
        self.context.hint = hint
        return self


class EngineError(MultiHttpError):
    """Error raised by the transfer engine itself.

    Raised when:
    - A batch handle cannot be created
    - A transfer handle cannot be created
    - The engine cannot advance the batch

    Always fatal to the ``proceed`` call that triggered it.
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        cause: BaseException | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="engine")
        super().__init__(message, ctx)
        self.__cause__ = cause


class TransferError(MultiHttpError):
    """A single transfer finished with a non-success result.

    Attributes:
        request: The request whose transfer failed
        code: Classified transport result
        reason: Native failure reason reported by the transport
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        request: httpx.Request,
        code: TransferCode,
        reason: BaseException | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="transfer")
        ctx.details["method"] = request.method
        ctx.details["url"] = str(request.url)
        ctx.details["code"] = code.value
        super().__init__(message, ctx)
        self.request = request
        self.code = code
        self.reason = reason
        self.__cause__ = reason


class NetworkError(TransferError):
    """The request could not reach the server (resolve, connect, proxy, timeout, TLS)."""


class RequestError(TransferError):
    """The transfer failed after the connection was established."""


class ResponseError(TransferError):
    """The transfer output could not be turned into a response."""

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        request: httpx.Request,
        code: TransferCode | None = None,
        reason: BaseException | None = None,
    ) -> None:
        from multi_http.errors.classification import TransferCode

        super().__init__(
            message,
            context or ErrorContext(source="response"),
            request=request,
            code=code or TransferCode.INVALID_RESPONSE,
            reason=reason,
        )


class ValidationError(MultiHttpError):
    """Invalid transfer options.

    Raised when:
    - An unknown option is supplied
    - An option has the wrong type or an out-of-range value
    - An option needs an extra that is not installed
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        field: str | None = None,
        expected: Any = None,
        actual: Any = None,
    ) -> None:
        ctx = context or ErrorContext(source="options")
        if field:
            ctx.field_path = field
        if expected is not None:
            ctx.details["expected"] = expected
        if actual is not None:
            ctx.details["actual"] = actual
        super().__init__(message, ctx)
        self.field = field
        self.expected = expected
        self.actual = actual
