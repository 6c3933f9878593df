"""
Transfer queue.

Holds every request that has been accepted but not yet completed. An
entry starts QUEUED and becomes PREPARED once it owns a transfer handle
attached to the batch; it leaves the queue when its transfer completes.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx

    from multi_http.engine import TransferHandle
    from multi_http.message import ResponseBuilder
    from multi_http.options import TransferOptions


class EntryState(str, Enum):
    """State of a queue entry."""

    QUEUED = "queued"
    PREPARED = "prepared"


@dataclass(eq=False)
class QueueEntry:
    """One unit of work.

    Attributes:
        request: Request to send (borrowed)
        options: Resolved options for the request (borrowed)
        handle: Transfer handle, once prepared
        builder: Response builder bound to the handle, once prepared
    """

    request: httpx.Request
    options: TransferOptions
    handle: TransferHandle | None = None
    builder: ResponseBuilder | None = None

    @property
    def state(self) -> EntryState:
        return EntryState.QUEUED if self.handle is None else EntryState.PREPARED

    def prepare(self, handle: TransferHandle, builder: ResponseBuilder) -> None:
        if self.handle is not None:
            raise RuntimeError("Queue entry is already prepared")
        self.handle = handle
        self.builder = builder


class TransferQueue:
    """Insertion-ordered collection of queue entries.

    Example:
        >>> queue = TransferQueue()
        >>> entry = queue.enqueue(request, options)
        >>> len(queue)
        1
        >>> queue.remove(entry)
        >>> len(queue)
        0
    """

    def __init__(self) -> None:
        self._entries: list[QueueEntry] = []

    def enqueue(self, request: httpx.Request, options: TransferOptions) -> QueueEntry:
        entry = QueueEntry(request=request, options=options)
        self._entries.append(entry)
        return entry

    def size(self) -> int:
        return len(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def queued(self) -> list[QueueEntry]:
        """Entries without a transfer handle, in insertion order."""
        return [entry for entry in self._entries if entry.handle is None]

    def find(self, handle: TransferHandle) -> QueueEntry | None:
        """Find the entry owning a transfer handle (identity match)."""
        for entry in self._entries:
            if entry.handle is handle:
                return entry
        return None

    def remove(self, entry: QueueEntry) -> None:
        for i, candidate in enumerate(self._entries):
            if candidate is entry:
                del self._entries[i]
                return
        raise KeyError("Entry is not in the queue")

    def clear(self) -> list[QueueEntry]:
        """Remove and return every entry."""
        entries, self._entries = self._entries, []
        return entries
