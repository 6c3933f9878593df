"""
Configuration for the transfer engine.
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx


@dataclass
class EngineConfig:
    """Configuration for the transfer engine.

    Attributes:
        max_connections: Maximum total connections per pooled client
        max_keepalive_connections: Maximum idle connections to keep
        keepalive_expiry: Seconds before idle connection expires
        select_timeout: Longest single wait for transfer readiness, in seconds
        max_handles: Maximum live transfer handles (None for no limit)
    """

    max_connections: int = 100
    max_keepalive_connections: int = 20
    keepalive_expiry: float = 30.0
    select_timeout: float = 1.0
    max_handles: int | None = None

    @classmethod
    def default(cls) -> EngineConfig:
        """Create default configuration."""
        return cls()

    @classmethod
    def high_throughput(cls) -> EngineConfig:
        """Create configuration optimized for large batches."""
        return cls(
            max_connections=200,
            max_keepalive_connections=50,
            keepalive_expiry=60.0,
            select_timeout=0.25,
        )

    def to_httpx_limits(self) -> httpx.Limits:
        """Convert to httpx Limits."""
        return httpx.Limits(
            max_connections=self.max_connections,
            max_keepalive_connections=self.max_keepalive_connections,
            keepalive_expiry=self.keepalive_expiry,
        )
