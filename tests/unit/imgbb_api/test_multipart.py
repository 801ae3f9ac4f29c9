"""Tests for imgbbify/imgbb_api/multipart.py: form layout and body streaming."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from imgbbify.config import ImgBBConfig
from imgbbify.errors import ImgBBInternalError
from imgbbify.image import Image
from imgbbify.imgbb_api.multipart import (
    FILE_CONTENT_TYPE,
    build_async_request,
    build_request,
    form_fields,
    iter_multipart,
    producer_failure,
    upload_headers,
)

TEST_KEY = "secret-key-1234"


def _names(parts):
    return [name for name, _, _, _ in parts]


def _send(config, image, handler, **kwargs):
    with httpx.Client(transport=httpx.MockTransport(handler)) as http:
        prepared = build_request(http, config, image, **kwargs)
        try:
            http.send(prepared.request)
        finally:
            error = prepared.finish()
    return prepared, error


# ---------------------------------------------------------------------------
# Field layout
# ---------------------------------------------------------------------------

class TestFormFields:
    def test_file_image_without_expiration(self, image):
        assert form_fields("k", image) == [
            ("key", "k"),
            ("type", "file"),
            ("action", "upload"),
        ]

    def test_expiration_included_when_set(self, png_bytes):
        img = Image(name="n", file=png_bytes, expiration=600)
        assert ("expiration", "600") in form_fields("k", img)

    def test_source_image_adds_name_and_image(self):
        img = Image(name="remote", source="https://example.com/cat.png")
        assert form_fields("k", img)[-2:] == [
            ("name", "remote"),
            ("image", "https://example.com/cat.png"),
        ]


class TestIterMultipart:
    def test_file_payload_sliced_by_chunk_size(self):
        img = Image(name="big.bin", file=bytes(range(10)))
        pieces = list(iter_multipart("b0undary", "k", img, chunk_size=4))
        assert bytes(range(4)) in pieces
        assert bytes(range(4, 8)) in pieces
        assert bytes(range(8, 10)) in pieces
        assert pieces[-1] == b"--b0undary--\r\n"

    def test_file_part_header(self, image):
        body = b"".join(iter_multipart("b0undary", "k", image, chunk_size=1024))
        assert (
            b'--b0undary\r\nContent-Disposition: form-data; name="image"; filename="name"\r\n'
            b"Content-Type: application/octet-stream\r\n\r\n"
        ) in body

    def test_text_part_has_no_content_type(self, image):
        body = b"".join(iter_multipart("b0undary", "k", image, chunk_size=1024))
        assert b'--b0undary\r\nContent-Disposition: form-data; name="key"\r\n\r\nk\r\n' in body

    def test_body_is_lazy(self, image):
        parts = iter_multipart("b0undary", "k", image, chunk_size=1024)
        assert next(parts).startswith(b"--b0undary\r\n")


class TestUploadHeaders:
    def test_fixed_service_headers(self):
        headers = upload_headers("xyz")
        assert headers == {
            "Content-Type": "multipart/form-data; boundary=xyz",
            "Host": "imgbb.com",
            "Origin": "https://imgbb.com",
            "Referer": "https://imgbb.com/",
        }


# ---------------------------------------------------------------------------
# Sync request builder
# ---------------------------------------------------------------------------

class TestBuildRequest:
    def test_request_line_and_headers(self, config, image, recording_handler):
        handler = recording_handler()
        prepared, error = _send(config, image, handler)
        assert error is None
        request = handler.requests[0]
        assert request.method == "POST"
        assert str(request.url) == config.endpoint
        assert request.headers["host"] == "imgbb.com"
        assert request.headers["origin"] == "https://imgbb.com"
        assert request.headers["referer"] == "https://imgbb.com/"
        assert request.headers["content-type"].startswith("multipart/form-data; boundary=")
        assert prepared.fields == form_fields(TEST_KEY, image)

    def test_file_form_in_order(self, config, image, recording_handler, form_parser):
        handler = recording_handler()
        _send(config, image, handler)
        parts = form_parser(handler.requests[0])
        assert _names(parts) == ["key", "type", "action", "image"]
        key, type_, action, file_part = parts
        assert key[2] == TEST_KEY.encode()
        assert type_[2] == b"file"
        assert action[2] == b"upload"
        assert file_part[1] == "name"
        assert file_part[2] == image.file
        assert FILE_CONTENT_TYPE.encode() in file_part[3]

    def test_expiration_part(self, config, png_bytes, recording_handler, form_parser):
        handler = recording_handler()
        _send(config, Image(name="n", file=png_bytes, expiration=60), handler)
        parts = form_parser(handler.requests[0])
        assert _names(parts) == ["key", "type", "action", "expiration", "image"]
        assert parts[3][2] == b"60"

    def test_source_form(self, config, recording_handler, form_parser):
        handler = recording_handler()
        src = "https://example.com/cat.png"
        _send(config, Image(name="cat", source=src), handler)
        parts = form_parser(handler.requests[0])
        assert _names(parts) == ["key", "type", "action", "name", "image"]
        assert parts[3][2] == b"cat"
        assert parts[4][1] is None
        assert parts[4][2] == src.encode()

    def test_large_payload_streams_through_small_buffer(
        self, recording_handler, form_parser,
    ):
        payload = bytes(range(256)) * 1024
        cfg = ImgBBConfig(
            api_key=TEST_KEY,
            endpoint="https://api.imgbb.test/1/upload",
            chunk_size=1000,
            pipe_buffer_chunks=1,
        )
        handler = recording_handler()
        prepared, error = _send(cfg, Image(name="big", file=payload), handler)
        assert error is None
        assert form_parser(handler.requests[0])[-1][2] == payload
        assert prepared.pipe.bytes_written == len(handler.requests[0].content)

    def test_producer_thread_exits_after_finish(self, config, image, recording_handler):
        prepared, _ = _send(config, image, recording_handler())
        assert not prepared.producer.is_alive()

    def test_finish_without_sending_releases_producer(self, config, png_bytes):
        cfg = ImgBBConfig(
            api_key=TEST_KEY,
            endpoint=config.endpoint,
            chunk_size=1,
            pipe_buffer_chunks=1,
        )
        with httpx.Client() as http:
            prepared = build_request(http, cfg, Image(name="n", file=png_bytes * 100))
            assert prepared.finish() is None
        assert not prepared.producer.is_alive()

    def test_per_call_timeout_applied(self, config, image):
        with httpx.Client() as http:
            prepared = build_request(http, config, image, timeout=2.5)
            prepared.finish()
        assert prepared.request.extensions["timeout"] == {
            "connect": 2.5, "read": 2.5, "write": 2.5, "pool": 2.5,
        }

    def test_invalid_endpoint_raises_internal(self, image):
        cfg = ImgBBConfig(api_key=TEST_KEY, endpoint="https://api.imgbb.test/up\x01load")
        with httpx.Client() as http, pytest.raises(ImgBBInternalError) as info:
            build_request(http, cfg, image)
        assert info.value.message.startswith("new request:")


class TestProducerFailure:
    def test_wraps_message_and_cause(self):
        cause = OSError("disk gone")
        err = producer_failure(cause)
        assert err.status_code == 500
        assert err.message == "write multipart body: disk gone"
        assert err.cause is cause


# ---------------------------------------------------------------------------
# Async request builder
# ---------------------------------------------------------------------------

class TestBuildAsyncRequest:
    async def test_form_matches_sync_layout(self, config, image, form_parser):
        seen: list[httpx.Request] = []

        async def handler(request):
            seen.append(request)
            return httpx.Response(200, json={})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            prepared = build_async_request(http, config, image)
            try:
                await http.send(prepared.request)
            finally:
                error = await prepared.finish()

        assert error is None
        assert prepared.producer.done()
        parts = form_parser(seen[0])
        assert _names(parts) == ["key", "type", "action", "image"]
        assert parts[-1][2] == image.file

    async def test_finish_without_sending_releases_producer(self, config, png_bytes):
        cfg = ImgBBConfig(
            api_key=TEST_KEY,
            endpoint=config.endpoint,
            chunk_size=1,
            pipe_buffer_chunks=1,
        )
        async with httpx.AsyncClient() as http:
            prepared = build_async_request(http, cfg, Image(name="n", file=png_bytes * 10))
            await asyncio.sleep(0)
            assert await prepared.finish() is None
        assert prepared.producer.done()
