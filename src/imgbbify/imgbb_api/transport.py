"""Execute prepared upload requests through a caller-supplied ``httpx`` client.

The transport does one thing: send the request, read the whole response
body and hand back ``(status_code, body)``.  It never retries and never
looks at the status code.

* A request failure (DNS, refused connection, timeout, TLS, redirect loop)
  raises :class:`ImgBBInternalError` wrapping the ``httpx`` error.
* A failure while reading the body, including a body that does not match
  its ``Content-Encoding``, raises :class:`ImgBBInternalError` too.
* The response is closed on every path, including read failures.
"""

from __future__ import annotations

import json as _json
import sys
from typing import Any

import httpx

from imgbbify.config import ImgBBConfig
from imgbbify.errors import ImgBBInternalError
from imgbbify.observability import get_logger
from imgbbify.utils.redact import redact

log = get_logger("imgbbify.transport")


def _transport_error(exc: Exception) -> ImgBBInternalError:
    return ImgBBInternalError(message=f"http client request do: {exc}", cause=exc)


def _read_error(exc: Exception) -> ImgBBInternalError:
    return ImgBBInternalError(message=f"read response body: {exc}", cause=exc)


def send_request(http_client: httpx.Client, request: httpx.Request) -> tuple[int, bytes]:
    """Send *request* and return the status code and the full body.

    Raises
    ------
    ImgBBInternalError
        On any transport error or body read failure.
    """
    try:
        response = http_client.send(request, stream=True)
    except httpx.RequestError as exc:
        log.warning(
            "Upload request failed",
            extra={"extra_fields": {"op": "send", "url": str(request.url), "error": str(exc)}},
        )
        raise _transport_error(exc) from exc

    try:
        try:
            body = response.read()
        except (httpx.RequestError, httpx.StreamError) as exc:
            raise _read_error(exc) from exc
        return response.status_code, body
    finally:
        response.close()


async def async_send_request(
    http_client: httpx.AsyncClient,
    request: httpx.Request,
) -> tuple[int, bytes]:
    """Async equivalent of :func:`send_request`."""
    try:
        response = await http_client.send(request, stream=True)
    except httpx.RequestError as exc:
        log.warning(
            "Upload request failed",
            extra={"extra_fields": {"op": "send", "url": str(request.url), "error": str(exc)}},
        )
        raise _transport_error(exc) from exc

    try:
        try:
            body = await response.aread()
        except (httpx.RequestError, httpx.StreamError) as exc:
            raise _read_error(exc) from exc
        return response.status_code, body
    finally:
        await response.aclose()


# ---------------------------------------------------------------------------
# Debug dump
# ---------------------------------------------------------------------------

def dump_exchange(
    config: ImgBBConfig,
    request: httpx.Request,
    fields: list[tuple[str, str]],
    image_size: int,
    status_code: int,
    body: bytes,
) -> None:
    """Write a redacted summary of one upload exchange to stderr.

    No-op unless ``config.debug_dump_payload`` is set.  The image payload is
    never dumped, only its size: a source string in the ``image`` field is
    replaced by an ``<image:N_bytes>`` marker.
    """
    if not config.debug_dump_payload:
        return
    try:
        response_body: Any = _json.loads(body)
    except ValueError:
        response_body = body[:1000].decode("utf-8", errors="replace")

    dump: dict[str, Any] = {
        "method": request.method,
        "url": str(request.url),
        "request_fields": {
            name: f"<image:{image_size}_bytes>" if name == "image" else value
            for name, value in fields
        },
        "image_size": image_size,
        "response_status": status_code,
        "response_body": response_body,
    }
    print(
        _json.dumps(redact(dump, config.api_key), indent=2, default=str),
        file=sys.stderr,
    )
