"""imgbbify.imgbb_api -- request building, transport and response parsing.

This sub-package provides:

* :mod:`.pipe` -- Bounded byte pipes between body producer and transport.
* :mod:`.multipart` -- Streaming multipart request builder.
* :mod:`.transport` -- Send a prepared request and read the response.
* :mod:`.parser` -- Decode the response into a result or an error.
"""

from __future__ import annotations

from .multipart import (
    AsyncPreparedUpload,
    PreparedUpload,
    build_async_request,
    build_request,
    form_fields,
    iter_multipart,
)
from .parser import parse_response
from .pipe import AsyncBodyPipe, BodyPipe, PipeClosedError
from .transport import async_send_request, dump_exchange, send_request

__all__ = [
    "AsyncBodyPipe",
    "AsyncPreparedUpload",
    "BodyPipe",
    "PipeClosedError",
    "PreparedUpload",
    "async_send_request",
    "build_async_request",
    "build_request",
    "dump_exchange",
    "form_fields",
    "iter_multipart",
    "parse_response",
    "send_request",
]
