"""Bounded in-memory byte pipes connecting a body producer to the transport.

A pipe has a write end, used by exactly one producer, and a read end,
iterated by the HTTP transport while it sends the request body.  At most
``max_chunks`` chunks are buffered; a producer that gets ahead of the
transport blocks in :meth:`write` until a chunk is consumed.

Either side can end the exchange:

* the producer calls :meth:`close` when it has written everything, or
  ``close(error)`` when it failed.  The error is kept in :attr:`error` so
  the caller can surface it once the request completes;
* the consumer calls :meth:`close_reader` when it stops reading (request
  finished or aborted).  Buffered chunks are discarded and the producer's
  next (or pending) :meth:`write` raises :class:`PipeClosedError`.

:class:`BodyPipe` is for a producer thread feeding ``httpx.Client``;
:class:`AsyncBodyPipe` is for a producer task feeding ``httpx.AsyncClient``.
"""

from __future__ import annotations

import asyncio
import queue
import threading
from collections.abc import AsyncIterator, Iterator

_EOF = object()


class PipeClosedError(Exception):
    """Raised on the write end after the read end has been closed."""


class BodyPipe:
    """Thread-safe bounded pipe; iterate it to read."""

    def __init__(self, max_chunks: int) -> None:
        self._queue: queue.Queue[object] = queue.Queue(maxsize=max_chunks)
        self._reader_closed = threading.Event()
        self._writer_closed = False
        self.error: BaseException | None = None
        self.bytes_written = 0

    @property
    def reader_closed(self) -> bool:
        return self._reader_closed.is_set()

    def write(self, data: bytes) -> int:
        """Block until *data* is buffered and return its length."""
        if self._writer_closed:
            raise ValueError("write to a closed pipe")
        if self._reader_closed.is_set():
            raise PipeClosedError("pipe reader closed")
        if not data:
            return 0
        self._queue.put(bytes(data))
        if self._reader_closed.is_set():
            raise PipeClosedError("pipe reader closed")
        self.bytes_written += len(data)
        return len(data)

    def close(self, error: BaseException | None = None) -> None:
        """Close the write end, recording *error* if the producer failed."""
        if self._writer_closed:
            return
        self._writer_closed = True
        if error is not None:
            self.error = error
        if not self._reader_closed.is_set():
            self._queue.put(_EOF)

    def close_reader(self) -> None:
        """Close the read end and release a producer blocked in ``write``."""
        self._reader_closed.set()
        while True:
            try:
                self._queue.get_nowait()
            except queue.Empty:
                return

    def __iter__(self) -> Iterator[bytes]:
        try:
            while True:
                chunk = self._queue.get()
                if chunk is _EOF:
                    return
                yield chunk  # type: ignore[misc]
        finally:
            self.close_reader()


class AsyncBodyPipe:
    """Bounded pipe for a single event loop; iterate it with ``async for``."""

    def __init__(self, max_chunks: int) -> None:
        self._queue: asyncio.Queue[object] = asyncio.Queue(maxsize=max_chunks)
        self._reader_closed = False
        self._writer_closed = False
        self.error: BaseException | None = None
        self.bytes_written = 0

    @property
    def reader_closed(self) -> bool:
        return self._reader_closed

    async def write(self, data: bytes) -> int:
        """Wait until *data* is buffered and return its length."""
        if self._writer_closed:
            raise ValueError("write to a closed pipe")
        if self._reader_closed:
            raise PipeClosedError("pipe reader closed")
        if not data:
            return 0
        await self._queue.put(bytes(data))
        if self._reader_closed:
            raise PipeClosedError("pipe reader closed")
        self.bytes_written += len(data)
        return len(data)

    async def close(self, error: BaseException | None = None) -> None:
        """Close the write end, recording *error* if the producer failed."""
        if self._writer_closed:
            return
        self._writer_closed = True
        if error is not None:
            self.error = error
        if not self._reader_closed:
            await self._queue.put(_EOF)

    def close_reader(self) -> None:
        """Close the read end and release a producer waiting in ``write``."""
        self._reader_closed = True
        while True:
            try:
                self._queue.get_nowait()
            except asyncio.QueueEmpty:
                return

    async def __aiter__(self) -> AsyncIterator[bytes]:
        try:
            while True:
                chunk = await self._queue.get()
                if chunk is _EOF:
                    return
                yield chunk  # type: ignore[misc]
        finally:
            self.close_reader()
