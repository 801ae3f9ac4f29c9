"""Synchronous imgbb upload client.

:class:`ImgBBClient` composes the request builder, the transport and the
response parser behind a single :meth:`~ImgBBClient.upload` call.

Usage::

    import httpx
    from imgbbify import Image, ImgBBClient

    with httpx.Client(timeout=30.0) as http:
        client = ImgBBClient(api_key="xxx", http_client=http)
        image = Image.from_path("cat.png", expiration=600)
        result = client.upload(image)
        print(result.data.url)
"""

from __future__ import annotations

import time
from typing import Any

import httpx

from imgbbify.config import ImgBBConfig
from imgbbify.errors import ImgBBError
from imgbbify.image import Image
from imgbbify.imgbb_api.multipart import build_request, producer_failure
from imgbbify.imgbb_api.parser import parse_response
from imgbbify.imgbb_api.transport import dump_exchange, send_request
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

log = get_logger("imgbbify.client")


class ImgBBClient:
    """Synchronous imgbb upload client.

    Parameters
    ----------
    api_key:
        imgbb API key.  **Required.**  Never logged.
    http_client:
        An ``httpx.Client`` to send requests with.  It is shared, not owned:
        :meth:`close` leaves it open.  When omitted the client creates its
        own from ``timeout_seconds`` / ``http_proxy`` and closes it in
        :meth:`close`.
    **kwargs:
        All remaining keyword arguments are forwarded to
        :class:`ImgBBConfig` (``endpoint``, ``chunk_size`` ...).

    The client holds no mutable state after construction, so one instance
    may serve concurrent :meth:`upload` calls from several threads.
    """

    def __init__(
        self,
        api_key: str,
        http_client: httpx.Client | None = None,
        **kwargs: Any,
    ) -> None:
        self._config = ImgBBConfig(api_key=api_key, **kwargs)
        self._metrics = resolve_metrics(self._config.metrics)
        self._owns_http = http_client is None
        if http_client is None:
            http_client = httpx.Client(
                timeout=httpx.Timeout(self._config.timeout_seconds),
                proxy=self._config.http_proxy,
            )
        self._http = http_client

    @property
    def config(self) -> ImgBBConfig:
        return self._config

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------

    def upload(self, image: Image, timeout: float | None = None) -> UploadResponse:
        """Upload *image* and return the service's success response.

        Parameters
        ----------
        image:
            A validated :class:`Image`.
        timeout:
            Optional per-operation timeout in seconds (connect, each
            write, each read, pool wait), overriding the HTTP client's
            own timeout.  It does not bound the whole call: a server that
            keeps sending bytes slowly can hold it open longer.

        Returns
        -------
        UploadResponse

        Raises
        ------
        ImgBBInternalError
            Transport failure, body read failure, a failure while producing
            the request body, or an undecodable response.
        ImgBBServiceError
            The service rejected the upload with a well-formed error body.
        TypeError
            If *image* is not an :class:`Image`.
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
            result = self._upload(image, timeout)
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

    def _upload(self, image: Image, timeout: float | None) -> UploadResponse:
        prepared = build_request(self._http, self._config, image, timeout)

        t0 = time.monotonic()
        try:
            status_code, body = send_request(self._http, prepared.request)
        finally:
            producer_error = prepared.finish()
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

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> ImgBBClient:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"ImgBBClient(config={self._config!r})"
