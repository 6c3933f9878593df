"""
Telemetry module for multi-http-python.

Provides structured logging and transfer statistics.
"""

from multi_http.telemetry.logger import (
    JsonFormatter,
    LogContext,
    LogLevel,
    MultiHttpLogger,
    SensitiveDataMasker,
    TextFormatter,
    get_log_context,
    get_logger,
    set_log_context,
)
from multi_http.telemetry.stats import TransferStats

__all__ = [
    "JsonFormatter",
    "LogContext",
    "LogLevel",
    "MultiHttpLogger",
    "SensitiveDataMasker",
    "TextFormatter",
    "TransferStats",
    "get_log_context",
    "get_logger",
    "set_log_context",
]
