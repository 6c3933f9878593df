"""
Client layer - User-facing API.

This module provides:
- MultiClient: Batched client driven by proceed/flush
- BatchClient: Interface of queueing clients
- PushedResponseHandler: Sink for untracked finished transfers
"""

from multi_http.client.base import AbstractTransferClient, BatchClient
from multi_http.client.multi import MultiClient
from multi_http.client.push import PushedResponseHandler

__all__ = [
    "AbstractTransferClient",
    "BatchClient",
    "MultiClient",
    "PushedResponseHandler",
]
