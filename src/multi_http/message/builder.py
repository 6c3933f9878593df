"""
Response builder.

Collects the status line, headers and body that the transfer engine
reports while a transfer runs, and materialises them as an
``httpx.Response`` once the transfer has finished.
"""

from __future__ import annotations

import httpx

from multi_http.errors import ResponseError


class ResponseBuilder:
    """Accumulates the raw output of one transfer.

    A builder is bound to the request whose transfer feeds it. Redirects
    followed by the transport reset the builder, so only the final hop
    ends up in the response.

    Example:
        >>> builder = ResponseBuilder(request)
        >>> builder.set_status(200, "OK", "HTTP/1.1")
        >>> builder.add_header("Content-Type", "text/plain")
        >>> builder.write_body(b"hello")
        >>> builder.get_response().text
        'hello'
    """

    def __init__(self, request: httpx.Request) -> None:
        self._request = request
        self._status_code: int | None = None
        self._reason_phrase = ""
        self._http_version = "HTTP/1.1"
        self._headers: list[tuple[str, str]] = []
        self._body = bytearray()

    @property
    def request(self) -> httpx.Request:
        return self._request

    @property
    def has_status(self) -> bool:
        return self._status_code is not None

    def set_status(
        self,
        status_code: int,
        reason_phrase: str = "",
        http_version: str = "HTTP/1.1",
    ) -> None:
        """Start a new response, discarding anything from a previous hop."""
        if status_code < 100 or status_code > 999:
            raise ResponseError(
                f"Invalid status code {status_code}",
                request=self._request,
            )
        self._status_code = status_code
        self._reason_phrase = reason_phrase
        self._http_version = http_version
        self._headers.clear()
        self._body.clear()

    def add_header(self, name: str, value: str) -> None:
        if self._status_code is None:
            raise ResponseError(
                "Header received before status line",
                request=self._request,
            )
        self._headers.append((name, value))

    def write_body(self, data: bytes) -> int:
        """Append a body chunk and return the number of bytes taken."""
        self._body.extend(data)
        return len(data)

    def get_response(self) -> httpx.Response:
        """Build the response.

        Returns:
            The response for the bound request

        Raises:
            ResponseError: If no status line was ever received
        """
        if self._status_code is None:
            raise ResponseError(
                "Transfer finished without a response",
                request=self._request,
            )

        extensions: dict[str, object] = {
            "http_version": self._http_version.encode("ascii", "replace"),
        }
        if self._reason_phrase:
            extensions["reason_phrase"] = self._reason_phrase.encode("ascii", "replace")

        return httpx.Response(
            self._status_code,
            headers=self._headers,
            content=bytes(self._body),
            request=self._request,
            extensions=extensions,
        )
