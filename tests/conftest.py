"""Root pytest fixtures for multi-http-python tests."""

from __future__ import annotations

from collections.abc import Callable

import httpx
import pytest


@pytest.fixture
def make_request() -> Callable[..., httpx.Request]:
    """Build requests against example.com paths."""

    def _make(path: str = "/", method: str = "GET", **kwargs: object) -> httpx.Request:
        return httpx.Request(method, f"https://example.com{path}", **kwargs)

    return _make


@pytest.fixture
def recorder() -> list[tuple[httpx.Request, httpx.Response | None, Exception | None]]:
    """Collect callback invocations in call order."""
    return []


@pytest.fixture
def record_callback(recorder: list) -> Callable[..., None]:
    """Callback appending (request, response, error) to ``recorder``."""

    def _callback(request, response, error) -> None:
        recorder.append((request, response, error))

    return _callback
