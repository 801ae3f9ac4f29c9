"""Client configuration for imgbbify.

:class:`ImgBBConfig` is a dataclass capturing every tuneable knob exposed by
the client.  Instances are built by both :class:`ImgBBClient` and
:class:`AsyncImgBBClient` from their keyword arguments.

The fixed values the upload endpoint expects from its own web client live
here as module constants.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlparse

# ---------------------------------------------------------------------------
# Service constants
# ---------------------------------------------------------------------------

DEFAULT_ENDPOINT = "https://api.imgbb.com/1/upload"
"""Upload URL used when no endpoint override is configured."""

SERVICE_HOST = "imgbb.com"
SERVICE_ORIGIN = "https://imgbb.com"
SERVICE_REFERER = "https://imgbb.com/"


# ---------------------------------------------------------------------------
# Configuration dataclass
# ---------------------------------------------------------------------------

@dataclass
class ImgBBConfig:
    """Complete configuration for an imgbbify client.

    Every parameter has a default so that the only *required* value is
    ``api_key``.

    Parameters
    ----------
    api_key:
        Service API key.  **Required.**  Never logged.
    endpoint:
        Upload URL.  Override for proxy or testing environments.
    timeout_seconds:
        Request timeout for the HTTP client the SDK creates when the caller
        does not supply one.  A caller-supplied client keeps its own
        timeout; use the ``timeout`` argument of ``upload()`` to bound a
        single call instead.
    http_proxy:
        Optional HTTP/HTTPS proxy URL for the SDK-created HTTP client.
    chunk_size:
        Size in bytes of each chunk the body producer writes into the pipe.
    pipe_buffer_chunks:
        Maximum number of chunks buffered between the body producer and the
        HTTP transport.  Bounds the extra memory used per upload to roughly
        ``chunk_size * pipe_buffer_chunks``.
    metrics:
        Optional :class:`~imgbbify.observability.MetricsHook` backend.
    debug_dump_payload:
        Write a redacted summary of each request and response to *stderr*.
    """

    # ── Core ────────────────────────────────────────────────────────────
    api_key: str = ""

    endpoint: str = DEFAULT_ENDPOINT

    # ── HTTP ────────────────────────────────────────────────────────────
    timeout_seconds: float = 30.0

    http_proxy: str | None = None

    # ── Streaming body ──────────────────────────────────────────────────
    chunk_size: int = 64 * 1024  # 64 KiB

    pipe_buffer_chunks: int = 8

    # ── Observability ──────────────────────────────────────────────────
    metrics: Any | None = None

    # ── Debug ───────────────────────────────────────────────────────────
    debug_dump_payload: bool = False

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        parsed = urlparse(self.endpoint)
        if parsed.scheme == "http" and parsed.hostname not in (
            "localhost",
            "127.0.0.1",
            "::1",
        ):
            raise ValueError(
                f"endpoint uses insecure HTTP for non-local host '{parsed.hostname}'. "
                "Use HTTPS to protect your API key, or target localhost for testing."
            )

        if self.timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be > 0, got {self.timeout_seconds}")
        if self.chunk_size <= 0:
            raise ValueError(f"chunk_size must be > 0, got {self.chunk_size}")
        if self.pipe_buffer_chunks < 1:
            raise ValueError(f"pipe_buffer_chunks must be >= 1, got {self.pipe_buffer_chunks}")

    def __repr__(self) -> str:
        """Mask the API key to prevent accidental credential leakage."""
        parts: list[str] = []
        for f in dataclasses.fields(self):
            val = getattr(self, f.name)
            if f.name == "api_key":
                masked = f"...{val[-4:]}" if len(val) >= 8 else "****"
                parts.append(f"api_key='{masked}'")
            else:
                parts.append(f"{f.name}={val!r}")
        return f"ImgBBConfig({', '.join(parts)})"
