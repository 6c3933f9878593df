#!/usr/bin/env python3
"""
Batched fetch example.

Queues several GET requests, drives them all with one flush and reports
each outcome from its callback.

Usage:
    python examples/batch_fetch.py https://example.com https://example.org
"""

import sys

import httpx

from multi_http import MultiClient, TransferError
from multi_http.telemetry import LogLevel, MultiHttpLogger


def on_done(
    request: httpx.Request,
    response: httpx.Response | None,
    error: TransferError | None,
) -> None:
    if error is not None:
        print(f"{request.url}: failed ({error.code.value})")
        return
    print(f"{request.url}: {response.status_code} ({len(response.content)} bytes)")


def main(urls: list[str]) -> int:
    """Run batched fetch example."""
    MultiHttpLogger.configure(level=LogLevel.INFO, format="text")

    with MultiClient({"allow_redirects": True, "timeout": 10}) as client:
        for url in urls:
            client.send_async_request(httpx.Request("GET", url), {"callback": on_done})

        try:
            client.flush()
        except TransferError as e:
            # Every callback has already run; this is the first failure.
            print(f"First failure: {e.message}")
            return 1

        print(f"Completed: {client.stats.transfers_completed}")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:] or ["https://example.com"]))
