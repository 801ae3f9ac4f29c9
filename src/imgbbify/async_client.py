"""Asynchronous imgbb upload client.

:class:`AsyncImgBBClient` mirrors :class:`ImgBBClient` but
:meth:`~AsyncImgBBClient.upload` is a coroutine and the request body is
produced by a task on the running event loop.  Cancelling the awaiting task
(directly or with ``asyncio.timeout``) aborts the in-flight request.

Usage::

    import asyncio
    import httpx
    from imgbbify import AsyncImgBBClient, Image

    async def main():
        async with httpx.AsyncClient() as http:
            client = AsyncImgBBClient(api_key="xxx", http_client=http)
            result = await client.upload(Image("cat.png", file=data))
            print(result.data.url)

    asyncio.run(main())
"""

from __future__ import annotations

import time
from typing import Any

import httpx

from imgbbify.config import ImgBBConfig
from imgbbify.errors import ImgBBError
from imgbbify.image import Image
from imgbbify.imgbb_api.multipart import build_async_request, producer_failure
from imgbbify.imgbb_api.parser import parse_response
from imgbbify.imgbb_api.transport import async_send_request, dump_exchange
from imgbbify.models import UploadResponse
from imgbbify.observability import get_logger
from imgbbify.observability.metrics import (
    REQUEST_DURATION_MS,
    UPLOAD_BYTES,
    UPLOAD_FAILURE_TOTAL,
    UPLOAD_SUCCESS_TOTAL,
    UPLOAD_TOTAL,
    resolve_metrics,
)

log = get_logger("imgbbify.async_client")


class AsyncImgBBClient:
    """Asynchronous imgbb upload client.

    Parameters
    ----------
    api_key:
        imgbb API key.  **Required.**
    http_client:
        A shared ``httpx.AsyncClient``; left open by :meth:`close`.  When
        omitted the client creates and owns one.
    **kwargs:
        Forwarded to :class:`ImgBBConfig`.
    """

    def __init__(
        self,
        api_key: str,
        http_client: httpx.AsyncClient | None = None,
        **kwargs: Any,
    ) -> None:
        self._config = ImgBBConfig(api_key=api_key, **kwargs)
        self._metrics = resolve_metrics(self._config.metrics)
        self._owns_http = http_client is None
        if http_client is None:
            http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._config.timeout_seconds),
                proxy=self._config.http_proxy,
            )
        self._http = http_client

    @property
    def config(self) -> ImgBBConfig:
        return self._config

    async def upload(self, image: Image, timeout: float | None = None) -> UploadResponse:
        """Upload *image* (async).

        See :meth:`ImgBBClient.upload` for parameter and error documentation.
        *timeout* limits each network operation, not the whole call; wrap the
        call in ``asyncio.timeout`` for an overall deadline.
        """
        if not isinstance(image, Image):
            raise TypeError(f"upload() expects an Image, got {type(image).__name__}")

        self._metrics.increment(UPLOAD_TOTAL)
        self._metrics.gauge(UPLOAD_BYTES, image.size)
        log.debug(
            "Upload started",
            extra={
                "extra_fields": {
                    "op": "upload",
                    "image": image.name,
                    "size": image.size,
                    "source": image.is_source,
                    "expiration": image.expiration,
                }
            },
        )

        try:
            result = await self._upload(image, timeout)
        except ImgBBError as exc:
            self._metrics.increment(
                UPLOAD_FAILURE_TOTAL,
                tags={"kind": exc.kind.value},
            )
            log.warning(
                "Upload failed",
                extra={
                    "extra_fields": {
                        "op": "upload",
                        "image": image.name,
                        "status_code": exc.status_code,
                        "status_text": exc.status_text,
                        "error": exc.message,
                    }
                },
            )
            raise

        self._metrics.increment(UPLOAD_SUCCESS_TOTAL)
        log.info(
            "Upload complete",
            extra={
                "extra_fields": {
                    "op": "upload",
                    "image": image.name,
                    "id": result.data.id,
                    "status_code": result.status_code,
                }
            },
        )
        return result

    async def _upload(self, image: Image, timeout: float | None) -> UploadResponse:
        prepared = build_async_request(self._http, self._config, image, timeout)

        t0 = time.monotonic()
        try:
            status_code, body = await async_send_request(self._http, prepared.request)
        finally:
            producer_error = await prepared.finish()
        elapsed_ms = (time.monotonic() - t0) * 1000
        self._metrics.timing(
            REQUEST_DURATION_MS,
            elapsed_ms,
            tags={"status": str(status_code)},
        )

        if producer_error is not None:
            raise producer_failure(producer_error) from producer_error

        dump_exchange(
            self._config, prepared.request, prepared.fields, image.size, status_code, body,
        )
        return parse_response(status_code, body)

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> AsyncImgBBClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"AsyncImgBBClient(config={self._config!r})"
