"""
Batch handle: drives many transfers on one private event loop.

The loop is never run in the background. It only advances while the
owner calls ``step`` or ``wait_ready``, so all progress happens on the
calling thread.
"""

from __future__ import annotations

import asyncio
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

import httpx

from multi_http.engine.handle import HandleState, TransferHandle
from multi_http.errors import EngineError, TransferCode, classify_exception
from multi_http.telemetry import LogContext, get_logger, set_log_context

if TYPE_CHECKING:
    from collections.abc import Iterator

    from multi_http.engine.config import EngineConfig
    from multi_http.options import ClientKey, TransferOptions

logger = get_logger("multi_http.engine")

# Bodies are handed to the builder decoded, so these no longer describe them.
_DECODED_BODY_HEADERS = frozenset({"content-encoding", "content-length", "transfer-encoding"})


class StepCode(str, Enum):
    """Outcome of one engine step."""

    OK = "ok"
    CALL_AGAIN = "call_again"
    ERROR = "error"


@dataclass(frozen=True)
class StepResult:
    """Result of advancing a batch once.

    Attributes:
        code: Step outcome
        active: Transfers still running after the step
    """

    code: StepCode
    active: int

    @property
    def still_active(self) -> bool:
        return self.active > 0

    @property
    def may_have_more(self) -> bool:
        """More work can be done right away without blocking."""
        return self.code is StepCode.CALL_AGAIN

    @property
    def ok(self) -> bool:
        return self.code is not StepCode.ERROR


@dataclass(frozen=True)
class FinishedTransfer:
    """Notification that one attached transfer has finished.

    Attributes:
        handle: The finished transfer handle
        code: Classified transport result
        reason: Native failure, when the transfer did not succeed
    """

    handle: TransferHandle
    code: TransferCode
    reason: BaseException | None = None


class BatchHandle:
    """Concurrency primitive driving every attached transfer.

    Owns a private event loop, one ``httpx.AsyncClient`` per distinct
    set of connection settings, and the queue of finished-transfer
    notifications in completion order.
    """

    def __init__(self, config: EngineConfig) -> None:
        self._config = config
        self._loop = asyncio.new_event_loop()
        self._clients: dict[ClientKey, httpx.AsyncClient] = {}
        self._tasks: dict[TransferHandle, asyncio.Task[None]] = {}
        self._finished: deque[FinishedTransfer] = deque()
        self._unstarted = 0
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def active(self) -> int:
        """Number of attached transfers that have not finished yet."""
        return sum(1 for task in self._tasks.values() if not task.done())

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, handle: object) -> bool:
        return handle in self._tasks

    def attach(self, handle: TransferHandle) -> None:
        if self._closed:
            raise EngineError("Cannot attach to a closed batch handle")
        if handle in self._tasks:
            raise EngineError(f"Transfer handle #{handle.id} is already attached")
        if handle.state is not HandleState.CONFIGURED:
            raise EngineError(
                f"Transfer handle #{handle.id} must be configured before it is attached"
            )
        self._tasks[handle] = self._loop.create_task(self._perform(handle))
        handle.state = HandleState.ATTACHED
        self._unstarted += 1

    def detach(self, handle: TransferHandle) -> None:
        task = self._tasks.pop(handle, None)
        if task is None:
            return
        if not task.done():
            task.cancel()
            self._loop.run_until_complete(asyncio.gather(task, return_exceptions=True))

    def step(self) -> StepResult:
        """Run one non-blocking iteration of the loop."""
        if self._closed:
            return StepResult(StepCode.ERROR, 0)

        started, self._unstarted = self._unstarted, 0
        try:
            self._loop.run_until_complete(asyncio.sleep(0))
        except RuntimeError:
            logger.exception("Batch step failed", attached=len(self._tasks))
            return StepResult(StepCode.ERROR, self.active)

        code = StepCode.CALL_AGAIN if started else StepCode.OK
        return StepResult(code, self.active)

    def wait_ready(self, timeout: float) -> int:
        """Block until at least one transfer finishes or the timeout elapses.

        Returns:
            Number of transfers that finished while waiting
        """
        if self._closed:
            raise EngineError("Cannot wait on a closed batch handle")

        pending = [task for task in self._tasks.values() if not task.done()]
        if not pending:
            return 0

        try:
            done, _ = self._loop.run_until_complete(
                asyncio.wait(pending, timeout=timeout, return_when=asyncio.FIRST_COMPLETED)
            )
        except RuntimeError as e:
            raise EngineError("Unable to wait on batch handle", cause=e) from e
        return len(done)

    def poll_finished(self) -> Iterator[FinishedTransfer]:
        """Yield finished-transfer notifications in completion order.

        Notifications are consumed as they are yielded; any left when the
        caller stops iterating remain for the next poll.
        """
        while self._finished:
            yield self._finished.popleft()

    def close(self) -> None:
        """Cancel unfinished transfers, close pooled clients and the loop."""
        if self._closed:
            return
        self._closed = True

        pending = [task for task in self._tasks.values() if not task.done()]
        for task in pending:
            task.cancel()

        try:
            if pending:
                self._loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
            for client in self._clients.values():
                self._loop.run_until_complete(client.aclose())
            self._loop.run_until_complete(self._loop.shutdown_asyncgens())
        except RuntimeError as e:
            raise EngineError("Unable to close batch handle", cause=e) from e
        finally:
            self._clients.clear()
            self._tasks.clear()
            self._finished.clear()
            self._loop.close()

        if pending:
            logger.debug("Batch closed with unfinished transfers", cancelled=len(pending))

    def _client_for(self, options: TransferOptions) -> httpx.AsyncClient:
        key = options.client_key()
        client = self._clients.get(key)
        if client is None:
            client = httpx.AsyncClient(
                verify=key.verify,
                proxy=key.proxy,
                http2=key.http2,
                max_redirects=key.max_redirects,
                trust_env=key.trust_env,
                limits=self._config.to_httpx_limits(),
            )
            self._clients[key] = client
        return client

    async def _perform(self, handle: TransferHandle) -> None:
        # Each task runs in its own copy of the context.
        request = handle.request
        set_log_context(
            LogContext(
                transfer_id=handle.id,
                method=request.method if request is not None else None,
                url=str(request.url) if request is not None else None,
            )
        )
        try:
            await self._transfer(handle)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            code = classify_exception(e)
            handle.state = HandleState.FINISHED
            self._finished.append(FinishedTransfer(handle, code, e))
            logger.debug("Transfer failed", code=code.value, error=str(e))
        else:
            handle.state = HandleState.FINISHED
            self._finished.append(FinishedTransfer(handle, TransferCode.OK))
            logger.debug("Transfer finished")

    async def _transfer(self, handle: TransferHandle) -> None:
        request, options, sink = handle.request, handle.options, handle.sink
        if request is None or options is None or sink is None:
            raise EngineError(f"Transfer handle #{handle.id} is not configured")

        client = self._client_for(options)
        wire_request = client.build_request(
            request.method,
            request.url,
            headers=request.headers,
            content=request.content,
            timeout=options.to_httpx_timeout(),
        )
        logger.debug("Transfer started")

        response = await client.send(
            wire_request,
            stream=True,
            follow_redirects=options.allow_redirects,
        )
        try:
            sink.set_status(response.status_code, response.reason_phrase, response.http_version)
            for name, value in response.headers.multi_items():
                if name.lower() not in _DECODED_BODY_HEADERS:
                    sink.add_header(name, value)
            async for chunk in response.aiter_bytes():
                sink.write_body(chunk)
        finally:
            await response.aclose()
