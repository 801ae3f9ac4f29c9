"""Streaming ``multipart/form-data`` request builder for the upload endpoint.

The form carries, in order:

1. ``key`` -- the API key;
2. ``type=file`` and ``action=upload``;
3. ``expiration`` -- only when the image has a non-zero expiration.  The
   field is omitted entirely otherwise, never sent empty;
4. either a file part ``image`` holding the raw bytes under the image's
   name, or, for source-string images, a ``name`` field followed by an
   ``image`` field holding the source string.

The body is never assembled in memory.  :func:`iter_multipart` renders it
lazily, one part header or payload slice at a time, and a background
producer (a thread for :func:`build_request`, a task for
:func:`build_async_request`) writes those pieces into a bounded pipe that
``httpx`` reads from while it sends the request.
"""

from __future__ import annotations

import asyncio
import threading
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

import httpx
from urllib3.fields import RequestField
from urllib3.filepost import choose_boundary

from imgbbify.config import (
    SERVICE_HOST,
    SERVICE_ORIGIN,
    SERVICE_REFERER,
    ImgBBConfig,
)
from imgbbify.errors import ImgBBInternalError
from imgbbify.image import Image
from imgbbify.observability import get_logger

from .pipe import AsyncBodyPipe, BodyPipe, PipeClosedError

log = get_logger("imgbbify.multipart")

FILE_CONTENT_TYPE = "application/octet-stream"


# ---------------------------------------------------------------------------
# Body rendering
# ---------------------------------------------------------------------------

def form_fields(api_key: str, image: Image) -> list[tuple[str, str]]:
    """Return the plain (non-file) form fields for *image*, in wire order."""
    fields = [
        ("key", api_key),
        ("type", "file"),
        ("action", "upload"),
    ]
    if image.expiration > 0:
        fields.append(("expiration", str(image.expiration)))
    if image.is_source:
        fields.append(("name", image.name))
        fields.append(("image", image.source or ""))
    return fields


def _part_header(boundary: str, field: RequestField) -> bytes:
    return f"--{boundary}\r\n".encode("latin-1") + field.render_headers().encode("utf-8")


def _text_chunks(text: str, chunk_size: int) -> Iterator[bytes]:
    for start in range(0, len(text), chunk_size):
        yield text[start:start + chunk_size].encode("utf-8")


def iter_multipart(
    boundary: str,
    api_key: str,
    image: Image,
    chunk_size: int,
) -> Iterator[bytes]:
    """Yield the encoded form body for *image* piece by piece.

    Payloads (the file bytes or a long source string) are yielded in slices
    of at most *chunk_size* bytes or characters.
    """
    for name, value in form_fields(api_key, image):
        field = RequestField(name=name, data=value)
        field.make_multipart()
        yield _part_header(boundary, field)
        yield from _text_chunks(value, chunk_size)
        yield b"\r\n"

    if not image.is_source:
        field = RequestField(name="image", data=b"", filename=image.name)
        field.make_multipart(content_type=FILE_CONTENT_TYPE)
        yield _part_header(boundary, field)
        payload = memoryview(image.file or b"")
        for start in range(0, len(payload), chunk_size):
            yield payload[start:start + chunk_size].tobytes()
        yield b"\r\n"

    yield f"--{boundary}--\r\n".encode("latin-1")


def upload_headers(boundary: str) -> dict[str, str]:
    """Headers sent with every upload.

    ``Host``, ``Origin`` and ``Referer`` are the service's own values, not
    derived from the endpoint: the upload endpoint only accepts requests
    that look like they come from its web client.
    """
    return {
        "Content-Type": f"multipart/form-data; boundary={boundary}",
        "Host": SERVICE_HOST,
        "Origin": SERVICE_ORIGIN,
        "Referer": SERVICE_REFERER,
    }


# ---------------------------------------------------------------------------
# Producers
# ---------------------------------------------------------------------------

def _produce(pipe: BodyPipe, parts: Iterator[bytes]) -> None:
    """Write every part into *pipe*, then close it.

    A closed reader just stops the producer.  Any other failure is kept in
    the pipe's error cell for the client to report after the request.
    """
    try:
        for part in parts:
            pipe.write(part)
    except PipeClosedError:
        pipe.close()
    except Exception as exc:
        log.debug(
            "Multipart producer failed",
            extra={"extra_fields": {"op": "produce", "error": str(exc)}},
        )
        pipe.close(exc)
    else:
        pipe.close()


async def _aproduce(pipe: AsyncBodyPipe, parts: Iterator[bytes]) -> None:
    """Async equivalent of :func:`_produce`."""
    try:
        for part in parts:
            await pipe.write(part)
    except PipeClosedError:
        await pipe.close()
    except Exception as exc:
        log.debug(
            "Multipart producer failed",
            extra={"extra_fields": {"op": "produce", "error": str(exc)}},
        )
        await pipe.close(exc)
    else:
        await pipe.close()


# ---------------------------------------------------------------------------
# Prepared requests
# ---------------------------------------------------------------------------

def producer_failure(exc: BaseException) -> ImgBBInternalError:
    """Wrap an error recorded by the body producer for the caller."""
    cause = exc if isinstance(exc, Exception) else None
    return ImgBBInternalError(message=f"write multipart body: {exc}", cause=cause)


@dataclass
class PreparedUpload:
    """An upload request whose body is being streamed by a producer thread.

    Call :meth:`finish` once the exchange is over (successfully or not) to
    close the pipe, wait for the producer and collect its error, if any.
    """

    request: httpx.Request
    pipe: BodyPipe
    producer: threading.Thread
    fields: list[tuple[str, str]]

    def finish(self) -> BaseException | None:
        self.pipe.close_reader()
        self.producer.join()
        return self.pipe.error


@dataclass
class AsyncPreparedUpload:
    """Async equivalent of :class:`PreparedUpload`, driven by a task."""

    request: httpx.Request
    pipe: AsyncBodyPipe
    producer: asyncio.Task
    fields: list[tuple[str, str]]

    async def finish(self) -> BaseException | None:
        self.pipe.close_reader()
        await asyncio.gather(self.producer, return_exceptions=True)
        return self.pipe.error


def _request_kwargs(boundary: str, timeout: float | None) -> dict[str, Any]:
    kwargs: dict[str, Any] = {"headers": upload_headers(boundary)}
    if timeout is not None:
        kwargs["timeout"] = httpx.Timeout(timeout)
    return kwargs


def build_request(
    http_client: httpx.Client,
    config: ImgBBConfig,
    image: Image,
    timeout: float | None = None,
) -> PreparedUpload:
    """Build the upload request for *image* and start its body producer.

    Parameters
    ----------
    http_client:
        The client that will send the request.  Its defaults (base headers,
        timeout) are merged into the request.
    config:
        Supplies the API key, endpoint and streaming knobs.
    image:
        The validated image to upload.
    timeout:
        Optional per-operation timeout in seconds, overriding the client's.

    Raises
    ------
    ImgBBInternalError
        If ``httpx`` cannot construct the request (e.g. a malformed
        endpoint URL).  Failures inside the producer are not raised here.
    """
    boundary = choose_boundary()
    pipe = BodyPipe(config.pipe_buffer_chunks)
    try:
        request = http_client.build_request(
            "POST",
            config.endpoint,
            content=pipe,
            **_request_kwargs(boundary, timeout),
        )
    except (httpx.InvalidURL, httpx.UnsupportedProtocol, ValueError, TypeError) as exc:
        raise ImgBBInternalError(message=f"new request: {exc}", cause=exc) from exc

    parts = iter_multipart(boundary, config.api_key, image, config.chunk_size)
    producer = threading.Thread(
        target=_produce,
        args=(pipe, parts),
        name="imgbbify-multipart-producer",
        daemon=True,
    )
    producer.start()
    return PreparedUpload(
        request=request,
        pipe=pipe,
        producer=producer,
        fields=form_fields(config.api_key, image),
    )


def build_async_request(
    http_client: httpx.AsyncClient,
    config: ImgBBConfig,
    image: Image,
    timeout: float | None = None,
) -> AsyncPreparedUpload:
    """Async equivalent of :func:`build_request`.

    Must be called from a running event loop; the producer is scheduled as
    a task on it.
    """
    boundary = choose_boundary()
    pipe = AsyncBodyPipe(config.pipe_buffer_chunks)
    try:
        request = http_client.build_request(
            "POST",
            config.endpoint,
            content=pipe,
            **_request_kwargs(boundary, timeout),
        )
    except (httpx.InvalidURL, httpx.UnsupportedProtocol, ValueError, TypeError) as exc:
        raise ImgBBInternalError(message=f"new request: {exc}", cause=exc) from exc

    parts = iter_multipart(boundary, config.api_key, image, config.chunk_size)
    producer = asyncio.get_running_loop().create_task(_aproduce(pipe, parts))
    return AsyncPreparedUpload(
        request=request,
        pipe=pipe,
        producer=producer,
        fields=form_fields(config.api_key, image),
    )
