"""imgbbify: streaming upload client for the imgbb image-hosting API.

Public re-exports
-----------------

* **Clients:** :class:`ImgBBClient`, :class:`AsyncImgBBClient`
* **Configuration:** :class:`ImgBBConfig`
* **Images:** :class:`Image`, :data:`MAX_IMAGE_SIZE`
* **Errors:** Every :class:`ImgBBError` subclass and :class:`ErrorKind`
* **Models:** :class:`UploadResponse`, :class:`ImageData`, :class:`Info`,
  :class:`ErrorInfo`

Usage::

    from imgbbify import Image, ImgBBClient

    with ImgBBClient(api_key="xxx") as client:
        result = client.upload(Image("cat.png", file=data, expiration=600))
        print(result.data.display_url)
"""

from __future__ import annotations

from imgbbify.async_client import AsyncImgBBClient

# ── Clients ────────────────────────────────────────────────────────────
from imgbbify.client import ImgBBClient

# ── Configuration ───────────────────────────────────────────────────────
from imgbbify.config import DEFAULT_ENDPOINT, ImgBBConfig

# ── Errors ──────────────────────────────────────────────────────────────
from imgbbify.errors import (
    ErrorKind,
    ImgBBError,
    ImgBBFileEmptyError,
    ImgBBFileTooLargeError,
    ImgBBInternalError,
    ImgBBInvalidImageError,
    ImgBBServiceError,
    ImgBBValidationError,
)

# ── Images ──────────────────────────────────────────────────────────────
from imgbbify.image import MAX_IMAGE_SIZE, Image

# ── Models ──────────────────────────────────────────────────────────────
from imgbbify.models import ErrorInfo, ImageData, Info, UploadResponse

# ── Public surface ──────────────────────────────────────────────────────

__all__ = [
    # Clients
    "ImgBBClient",
    "AsyncImgBBClient",
    # Configuration
    "ImgBBConfig",
    "DEFAULT_ENDPOINT",
    # Images
    "Image",
    "MAX_IMAGE_SIZE",
    # Errors
    "ErrorKind",
    "ImgBBError",
    "ImgBBValidationError",
    "ImgBBFileEmptyError",
    "ImgBBFileTooLargeError",
    "ImgBBInvalidImageError",
    "ImgBBInternalError",
    "ImgBBServiceError",
    # Models
    "UploadResponse",
    "ImageData",
    "Info",
    "ErrorInfo",
]
