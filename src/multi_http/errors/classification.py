"""Transfer result classification.

Maps the exceptions raised by the httpx transport onto a fixed set of
transfer result codes, the way a native multi-transfer engine reports a
numeric result for every finished transfer.
"""

from __future__ import annotations

from enum import Enum

import httpx

from multi_http.errors.base import ResponseError


class TransferCode(str, Enum):
    """Result code of one finished transfer."""

    OK = "ok"
    """Transfer completed and a response was received."""

    UNSUPPORTED_PROTOCOL = "unsupported_protocol"
    """URL scheme is not supported by the transport."""

    COULDNT_RESOLVE_HOST = "couldnt_resolve_host"
    """Host name could not be resolved."""

    COULDNT_CONNECT = "couldnt_connect"
    """Connection to the host or proxy failed."""

    PROXY_ERROR = "proxy_error"
    """Proxy rejected or failed the request."""

    OPERATION_TIMEDOUT = "operation_timedout"
    """Connect, read, write or pool timeout elapsed."""

    SSL_ERROR = "ssl_error"
    """TLS handshake or certificate verification failed."""

    TOO_MANY_REDIRECTS = "too_many_redirects"
    """Redirect limit was exceeded."""

    SEND_ERROR = "send_error"
    """Failure while sending the request."""

    RECV_ERROR = "recv_error"
    """Failure while receiving the response."""

    BAD_CONTENT_ENCODING = "bad_content_encoding"
    """Response body could not be decoded."""

    ABORTED = "aborted"
    """Transfer was cancelled before it finished."""

    INVALID_RESPONSE = "invalid_response"
    """Transfer output could not be turned into a response."""

    INTERNAL_ERROR = "internal_error"
    """Unexpected failure inside the transfer."""

    @property
    def is_ok(self) -> bool:
        return self is TransferCode.OK


_NETWORK_CODES: set[TransferCode] = {
    TransferCode.COULDNT_RESOLVE_HOST,
    TransferCode.COULDNT_CONNECT,
    TransferCode.PROXY_ERROR,
    TransferCode.OPERATION_TIMEDOUT,
    TransferCode.SSL_ERROR,
}

_DESCRIPTIONS: dict[TransferCode, str] = {
    TransferCode.OK: "No error",
    TransferCode.UNSUPPORTED_PROTOCOL: "Unsupported protocol",
    TransferCode.COULDNT_RESOLVE_HOST: "Couldn't resolve host name",
    TransferCode.COULDNT_CONNECT: "Couldn't connect to server",
    TransferCode.PROXY_ERROR: "Proxy handshake error",
    TransferCode.OPERATION_TIMEDOUT: "Timeout was reached",
    TransferCode.SSL_ERROR: "SSL connect error",
    TransferCode.TOO_MANY_REDIRECTS: "Number of redirects hit maximum amount",
    TransferCode.SEND_ERROR: "Failed sending data to the peer",
    TransferCode.RECV_ERROR: "Failure when receiving data from the peer",
    TransferCode.BAD_CONTENT_ENCODING: "Unrecognized or bad HTTP Content or Transfer-Encoding",
    TransferCode.ABORTED: "Operation was aborted",
    TransferCode.INVALID_RESPONSE: "Invalid response received from the transfer",
    TransferCode.INTERNAL_ERROR: "Internal transfer error",
}

_RESOLVE_MARKERS = (
    "name or service not known",
    "nodename nor servname",
    "getaddrinfo failed",
    "temporary failure in name resolution",
    "no address associated with hostname",
)

_SSL_MARKERS = ("ssl", "certificate", "tls")


def classify_exception(exc: BaseException) -> TransferCode:
    """Classify a transport exception into a transfer result code.

    Args:
        exc: Exception raised while performing the transfer

    Returns:
        Matching TransferCode (INTERNAL_ERROR when unrecognised)
    """
    if isinstance(exc, ResponseError):
        return exc.code

    message = str(exc).lower()

    # Order matters: subclasses before their bases.
    if isinstance(exc, httpx.UnsupportedProtocol):
        return TransferCode.UNSUPPORTED_PROTOCOL
    if isinstance(exc, httpx.ProxyError):
        return TransferCode.PROXY_ERROR
    if isinstance(exc, httpx.TimeoutException):
        return TransferCode.OPERATION_TIMEDOUT
    if isinstance(exc, httpx.ConnectError):
        if any(marker in message for marker in _RESOLVE_MARKERS):
            return TransferCode.COULDNT_RESOLVE_HOST
        if any(marker in message for marker in _SSL_MARKERS):
            return TransferCode.SSL_ERROR
        return TransferCode.COULDNT_CONNECT
    if isinstance(exc, httpx.TooManyRedirects):
        return TransferCode.TOO_MANY_REDIRECTS
    if isinstance(exc, httpx.DecodingError):
        return TransferCode.BAD_CONTENT_ENCODING
    if isinstance(exc, (httpx.WriteError, httpx.LocalProtocolError)):
        return TransferCode.SEND_ERROR
    if isinstance(exc, (httpx.ReadError, httpx.RemoteProtocolError, httpx.CloseError)):
        return TransferCode.RECV_ERROR
    if isinstance(exc, httpx.TransportError):
        return TransferCode.RECV_ERROR
    if isinstance(exc, httpx.InvalidURL):
        return TransferCode.UNSUPPORTED_PROTOCOL
    return TransferCode.INTERNAL_ERROR


def is_network_failure(code: TransferCode) -> bool:
    """Check whether a result code means the server was never reached."""
    return code in _NETWORK_CODES


def describe(code: TransferCode) -> str:
    """Human-readable description of a result code."""
    return _DESCRIPTIONS.get(code, code.value)
