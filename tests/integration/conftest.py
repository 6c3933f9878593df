"""
Integration test helper utilities.

Shared fixtures and utilities for integration tests.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from multi_http import EngineConfig, MultiClient, TransferEngine

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    import pytest_httpx


BASE_URL = "https://api.example.com"


@pytest.fixture
def base_url() -> str:
    return BASE_URL


@pytest.fixture
def mock_responses(httpx_mock: pytest_httpx.HTTPXMock) -> Callable[..., list[str]]:
    """Register one plain-text response per path; return the URLs."""

    def _setup(*paths: str, status_code: int = 200) -> list[str]:
        urls = []
        for path in paths:
            url = f"{BASE_URL}{path}"
            httpx_mock.add_response(
                url=url,
                status_code=status_code,
                headers={"Content-Type": "text/plain"},
                content=f"body of {path}".encode(),
            )
            urls.append(url)
        return urls

    return _setup


@pytest.fixture
def client() -> Iterator[MultiClient]:
    """MultiClient on a real engine with a short readiness wait."""
    engine = TransferEngine(EngineConfig(select_timeout=0.2))
    with MultiClient(engine=engine) as client:
        yield client
