"""Shared test fixtures for the imgbbify test suite."""

from __future__ import annotations

import json
import re
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from imgbbify.config import ImgBBConfig
from imgbbify.image import Image

TEST_ENDPOINT = "https://api.imgbb.test/1/upload"
TEST_KEY = "secret-key-1234"

# A truncated PNG signature, enough to look like an image.
PNG_BYTES = bytes([137, 80, 78, 71, 13, 10, 26, 10, 0])

SUCCESS_BODY: dict[str, Any] = {
    "data": {
        "id": "2ndCYJK",
        "title": "c1f64245afb2",
        "url_viewer": "https://ibb.co/2ndCYJK",
        "url": "https://i.ibb.co/w04Prt6/c1f64245afb2.gif",
        "display_url": "https://i.ibb.co/98W13PY/c1f64245afb2.gif",
        "width": 1,
        "height": 1,
        "size": 42,
        "time": "1552042565",
        "expiration": "0",
        "image": {
            "filename": "c1f64245afb2.gif",
            "name": "c1f64245afb2",
            "mime": "image/gif",
            "extension": "gif",
            "url": "https://i.ibb.co/w04Prt6/c1f64245afb2.gif",
        },
        "thumb": {
            "filename": "c1f64245afb2.gif",
            "name": "c1f64245afb2",
            "mime": "image/gif",
            "extension": "gif",
            "url": "https://i.ibb.co/2ndCYJK/c1f64245afb2.gif",
        },
        "medium": {
            "filename": "c1f64245afb2.gif",
            "name": "c1f64245afb2",
            "mime": "image/gif",
            "extension": "gif",
            "url": "https://i.ibb.co/98W13PY/c1f64245afb2.gif",
        },
        "delete_url": "https://ibb.co/2ndCYJK/670a7e48ddcb85ac340c717a41047e5c",
    },
    "success": True,
    "status": 200,
}

ERROR_BODY: dict[str, Any] = {
    "error": {
        "message": "error message",
        "code": 999,
        "context": "error context",
    },
    "status_code": 500,
    "status_txt": "internal error",
}

_NAME_RE = re.compile(rb'; name="([^"]*)"')
_FILENAME_RE = re.compile(rb'; filename="([^"]*)"')


class RecordingHandler:
    """``httpx.MockTransport`` handler that records every request.

    ``httpx.MockTransport`` reads the (streamed) request body before calling
    the handler, so ``request.content`` holds the full multipart body.
    """

    def __init__(
        self,
        status_code: int = 200,
        body: dict[str, Any] | None = None,
        content: bytes | None = None,
    ) -> None:
        self.status_code = status_code
        if content is None:
            content = json.dumps(body if body is not None else SUCCESS_BODY).encode()
        self.content = content
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(
            self.status_code,
            content=self.content,
            headers={"Content-Type": "application/json"},
        )


def parse_form(request: httpx.Request) -> list[tuple[str, str | None, bytes, bytes]]:
    """Split a multipart request body into ``(name, filename, payload, headers)``."""
    boundary = request.headers["content-type"].split("boundary=", 1)[1]
    chunks = request.content.split(f"--{boundary}".encode())
    assert chunks[0] == b""
    assert chunks[-1] == b"--\r\n"
    parts = []
    for chunk in chunks[1:-1]:
        assert chunk.startswith(b"\r\n")
        head, sep, payload = chunk[2:].partition(b"\r\n\r\n")
        assert sep
        assert payload.endswith(b"\r\n")
        name_match = _NAME_RE.search(head)
        assert name_match is not None
        filename_match = _FILENAME_RE.search(head)
        parts.append((
            name_match.group(1).decode(),
            filename_match.group(1).decode() if filename_match else None,
            payload[:-2],
            head,
        ))
    return parts


@pytest.fixture
def config() -> ImgBBConfig:
    """Default test configuration pointing at a fake endpoint."""
    return ImgBBConfig(api_key=TEST_KEY, endpoint=TEST_ENDPOINT)


@pytest.fixture
def image() -> Image:
    """A small valid image."""
    return Image(name="name", file=PNG_BYTES)


@pytest.fixture
def form_parser() -> Callable[[httpx.Request], list[tuple[str, str | None, bytes, bytes]]]:
    return parse_form


@pytest.fixture
def success_body() -> dict[str, Any]:
    return json.loads(json.dumps(SUCCESS_BODY))


@pytest.fixture
def error_body() -> dict[str, Any]:
    return json.loads(json.dumps(ERROR_BODY))


@pytest.fixture
def png_bytes() -> bytes:
    return PNG_BYTES


@pytest.fixture
def recording_handler() -> Callable[..., RecordingHandler]:
    """Factory for :class:`RecordingHandler` instances."""
    return RecordingHandler
