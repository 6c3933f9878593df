"""
Unit test helpers.

FakeEngine stands in for the httpx-backed engine so the coordinator can
be exercised with scripted completions: every ``wait_ready`` finishes one
pending transfer.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field

import httpx
import pytest

from multi_http.engine import (
    FinishedTransfer,
    HandleState,
    StepCode,
    StepResult,
    TransferHandle,
)
from multi_http.errors import EngineError, TransferCode
from multi_http.message import ResponseBuilder
from multi_http.options import resolve_options


@dataclass
class FakeBatch:
    """Batch handle of the fake engine."""

    attached: list[TransferHandle] = field(default_factory=list)
    pending: list[TransferHandle] = field(default_factory=list)
    finished: deque[FinishedTransfer] = field(default_factory=deque)
    closed: bool = False


class FakeEngine:
    """Scripted transfer engine.

    Outcomes are keyed by URL; unknown URLs answer 200 with body ``ok``.
    """

    def __init__(self) -> None:
        self.outcomes: dict[str, tuple] = {}
        self.lifo = False
        self.fail_batch = False
        self.fail_step = False
        self.handles_created: list[TransferHandle] = []
        self.handles_released: list[TransferHandle] = []
        self.batches: list[FakeBatch] = []
        self.destroyed = 0
        self.untracked: list[TransferHandle] = []
        self.configured: list[str] = []

    # Scripting

    def respond(self, url: str, status: int = 200, body: bytes = b"ok") -> None:
        self.outcomes[url] = ("respond", status, body)

    def fail(
        self,
        url: str,
        code: TransferCode = TransferCode.COULDNT_CONNECT,
        reason: BaseException | None = None,
    ) -> None:
        self.outcomes[url] = ("fail", code, reason or httpx.ConnectError("Connection refused"))

    def empty(self, url: str) -> None:
        """Finish successfully without ever delivering a status line."""
        self.outcomes[url] = ("empty",)

    def push(self, url: str, body: bytes = b"pushed") -> TransferHandle:
        """Report an untracked finished transfer on the next wait."""
        request = httpx.Request("GET", url)
        builder = ResponseBuilder(request)
        builder.set_status(200, "OK")
        builder.write_body(body)
        handle = TransferHandle()
        handle.configure(request, resolve_options(), builder)
        self.untracked.append(handle)
        return handle

    # Engine interface

    def create_handle(self) -> TransferHandle:
        handle = TransferHandle()
        self.handles_created.append(handle)
        return handle

    def configure(self, handle, request, options, sink) -> None:
        self.configured.append(str(request.url))
        handle.configure(request, options, sink)

    def create_batch(self) -> FakeBatch:
        if self.fail_batch:
            raise EngineError("Unable to create batch handle")
        batch = FakeBatch()
        self.batches.append(batch)
        return batch

    def attach(self, batch: FakeBatch, handle: TransferHandle) -> None:
        batch.attached.append(handle)
        batch.pending.append(handle)
        handle.state = HandleState.ATTACHED

    def detach(self, batch: FakeBatch, handle: TransferHandle) -> None:
        if handle in batch.attached:
            batch.attached.remove(handle)

    def step(self, batch: FakeBatch) -> StepResult:
        if self.fail_step:
            return StepResult(StepCode.ERROR, len(batch.pending))
        return StepResult(StepCode.OK, len(batch.pending))

    def wait_ready(self, batch: FakeBatch) -> int:
        handle = batch.pending.pop(-1 if self.lifo else 0)
        batch.finished.append(self._finish(handle))
        while self.untracked:
            other = self.untracked.pop(0)
            batch.attached.append(other)
            batch.finished.append(FinishedTransfer(other, TransferCode.OK))
        return 1

    def poll_finished(self, batch: FakeBatch):
        while batch.finished:
            yield batch.finished.popleft()

    def destroy_batch(self, batch: FakeBatch) -> None:
        batch.closed = True
        self.destroyed += 1

    def release(self, handle: TransferHandle) -> None:
        self.handles_released.append(handle)
        handle.release()

    def _finish(self, handle: TransferHandle) -> FinishedTransfer:
        outcome = self.outcomes.get(str(handle.request.url), ("respond", 200, b"ok"))
        handle.state = HandleState.FINISHED
        if outcome[0] == "fail":
            return FinishedTransfer(handle, outcome[1], outcome[2])
        if outcome[0] == "respond":
            handle.sink.set_status(outcome[1], "OK")
            handle.sink.add_header("Content-Type", "text/plain")
            handle.sink.write_body(outcome[2])
        return FinishedTransfer(handle, TransferCode.OK)


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine()
