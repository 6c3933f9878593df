"""
Pushed-response handling.

A finished notification that matches no queue entry did not come from a
request the coordinator sent. Whatever response it carries is kept,
keyed by URL, for the application to pick up.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from multi_http.errors import ResponseError
from multi_http.telemetry import get_logger

if TYPE_CHECKING:
    import httpx

    from multi_http.engine import TransferHandle

logger = get_logger("multi_http.client.push")


class PushedResponseHandler:
    """Best-effort sink for untracked finished transfers."""

    def __init__(self) -> None:
        self._responses: dict[str, httpx.Response] = {}

    def handle(self, handle: TransferHandle) -> httpx.Response | None:
        """Keep the response of an untracked transfer, if it has one."""
        sink = handle.sink
        if sink is None or not sink.has_status:
            logger.debug("Ignoring untracked transfer without a response", transfer_id=handle.id)
            return None

        try:
            response = sink.get_response()
        except ResponseError as e:
            logger.warning("Dropping unreadable pushed response", transfer_id=handle.id, error=str(e))
            return None

        url = str(sink.request.url)
        self._responses[url] = response
        logger.debug("Stored pushed response", transfer_id=handle.id, url=url)
        return response

    def pop(self, url: str) -> httpx.Response | None:
        """Take the stored response for a URL."""
        return self._responses.pop(url, None)

    def __len__(self) -> int:
        return len(self._responses)

    def __contains__(self, url: object) -> bool:
        return url in self._responses
