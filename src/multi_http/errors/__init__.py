"""
Error hierarchy for multi-http-python.

Provides structured error types and transfer result classification.
"""

from multi_http.errors.base import (
    EngineError,
    ErrorContext,
    MultiHttpError,
    NetworkError,
    RequestError,
    ResponseError,
    TransferError,
    ValidationError,
)
from multi_http.errors.classification import (
    TransferCode,
    classify_exception,
    describe,
    is_network_failure,
)

__all__ = [
    # Base errors
    "EngineError",
    "ErrorContext",
    "MultiHttpError",
    "NetworkError",
    "RequestError",
    "ResponseError",
    "TransferError",
    "ValidationError",
    # Classification
    "TransferCode",
    "classify_exception",
    "describe",
    "is_network_failure",
]
