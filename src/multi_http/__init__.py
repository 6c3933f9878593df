"""multi-http-python: batched HTTP transfers over one polling loop.

Queue many requests, drive them concurrently from the calling thread,
and receive each outcome through a per-request callback.
"""
from __future__ import annotations

from multi_http._features import HAS_HTTP2, require_extra
from multi_http.client import BatchClient, MultiClient, PushedResponseHandler
from multi_http.engine import EngineConfig, TransferEngine
from multi_http.errors import (
    EngineError,
    MultiHttpError,
    NetworkError,
    RequestError,
    ResponseError,
    TransferCode,
    TransferError,
    ValidationError,
)
from multi_http.message import ResponseBuilder
from multi_http.options import TransferOptions, resolve_options

__version__ = "0.1.0"

__all__ = [
    # Client
    "BatchClient",
    "MultiClient",
    "PushedResponseHandler",
    # Engine
    "EngineConfig",
    "TransferEngine",
    # Feature flags
    "HAS_HTTP2",
    "require_extra",
    # Errors
    "EngineError",
    "MultiHttpError",
    "NetworkError",
    "RequestError",
    "ResponseError",
    "TransferCode",
    "TransferError",
    "ValidationError",
    # Messages and options
    "ResponseBuilder",
    "TransferOptions",
    "resolve_options",
    # Version
    "__version__",
]
