"""Public data models for the imgbbify client.

All response types are frozen dataclasses decoded from the service's JSON
with :meth:`from_dict`.  Decoding is tolerant of the service's inconsistent
number encoding: every integer field accepts either a JSON number or a
numeric JSON string (``"time": "1552042565"`` and ``"time": 1552042565``
decode identically).  Missing keys decode to zero values.  Any value of the
wrong JSON shape raises :class:`ValueError` (or :class:`TypeError`), which
the response parser maps to an internal error.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# ---------------------------------------------------------------------------
# Decoding helpers
# ---------------------------------------------------------------------------

def _as_int(value: Any, key: str) -> int:
    """Decode an integer that may be encoded as a JSON number or string."""
    if value is None:
        return 0
    if isinstance(value, bool):
        raise TypeError(f"{key}: expected integer, got bool")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"{key}: expected integer, got {value!r}")
        return int(value)
    if isinstance(value, str):
        if value == "":
            return 0
        try:
            return int(value)
        except ValueError:
            raise ValueError(f"{key}: expected numeric string, got {value!r}") from None
    raise TypeError(f"{key}: expected integer, got {type(value).__name__}")


def _as_str(value: Any, key: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise TypeError(f"{key}: expected string, got {type(value).__name__}")
    return value


def _as_bool(value: Any, key: str) -> bool:
    if value is None:
        return False
    if not isinstance(value, bool):
        raise TypeError(f"{key}: expected bool, got {type(value).__name__}")
    return value


def _as_object(value: Any, key: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise TypeError(f"{key}: expected object, got {type(value).__name__}")
    return value


# ---------------------------------------------------------------------------
# Success response
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Info:
    """File details for one rendition (original, thumbnail, medium)."""

    filename: str = ""
    name: str = ""
    mime: str = ""
    extension: str = ""
    url: str = ""

    @classmethod
    def from_dict(cls, raw: Any) -> Info:
        obj = _as_object(raw, "info")
        return cls(
            filename=_as_str(obj.get("filename"), "filename"),
            name=_as_str(obj.get("name"), "name"),
            mime=_as_str(obj.get("mime"), "mime"),
            extension=_as_str(obj.get("extension"), "extension"),
            url=_as_str(obj.get("url"), "url"),
        )


@dataclass(frozen=True)
class ImageData:
    """Information about an uploaded image.

    Attributes
    ----------
    id:
        Service-assigned image identifier.
    url_viewer:
        Page URL for viewing the image on the service.
    url:
        Direct URL of the original image.
    display_url:
        URL of the rendition used for display.
    time:
        Upload time as a Unix timestamp.
    expiration:
        Lifetime in seconds; ``0`` means the image never expires.
    delete_url:
        Capability URL that deletes the image.  Treat as a secret.
    """

    id: str = ""
    title: str = ""
    url_viewer: str = ""
    url: str = ""
    display_url: str = ""
    width: int = 0
    height: int = 0
    size: int = 0
    time: int = 0
    expiration: int = 0
    image: Info = field(default_factory=Info)
    thumb: Info = field(default_factory=Info)
    medium: Info = field(default_factory=Info)
    delete_url: str = ""

    @classmethod
    def from_dict(cls, raw: Any) -> ImageData:
        obj = _as_object(raw, "data")
        return cls(
            id=_as_str(obj.get("id"), "id"),
            title=_as_str(obj.get("title"), "title"),
            url_viewer=_as_str(obj.get("url_viewer"), "url_viewer"),
            url=_as_str(obj.get("url"), "url"),
            display_url=_as_str(obj.get("display_url"), "display_url"),
            width=_as_int(obj.get("width"), "width"),
            height=_as_int(obj.get("height"), "height"),
            size=_as_int(obj.get("size"), "size"),
            time=_as_int(obj.get("time"), "time"),
            expiration=_as_int(obj.get("expiration"), "expiration"),
            image=Info.from_dict(obj.get("image")),
            thumb=Info.from_dict(obj.get("thumb")),
            medium=Info.from_dict(obj.get("medium")),
            delete_url=_as_str(obj.get("delete_url"), "delete_url"),
        )


@dataclass(frozen=True)
class UploadResponse:
    """A successful upload.

    ``status_code`` is the ``status`` value reported in the body.
    """

    data: ImageData = field(default_factory=ImageData)
    status_code: int = 0
    success: bool = False

    @classmethod
    def from_dict(cls, raw: Any) -> UploadResponse:
        obj = _as_object(raw, "response")
        return cls(
            data=ImageData.from_dict(obj.get("data")),
            status_code=_as_int(obj.get("status"), "status"),
            success=_as_bool(obj.get("success"), "success"),
        )


# ---------------------------------------------------------------------------
# Error payload
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ErrorInfo:
    """Details attached to an error: message, numeric code and context."""

    message: str = ""
    code: int = 0
    context: str = ""

    @classmethod
    def from_dict(cls, raw: Any) -> ErrorInfo:
        obj = _as_object(raw, "error")
        return cls(
            message=_as_str(obj.get("message"), "message"),
            code=_as_int(obj.get("code"), "code"),
            context=_as_str(obj.get("context"), "context"),
        )


@dataclass(frozen=True)
class ErrorPayload:
    """The service's error body: ``{"error": {...}, "status_code", "status_txt"}``."""

    status_code: int = 0
    status_text: str = ""
    error: ErrorInfo = field(default_factory=ErrorInfo)

    @classmethod
    def from_dict(cls, raw: Any) -> ErrorPayload:
        obj = _as_object(raw, "response")
        return cls(
            status_code=_as_int(obj.get("status_code"), "status_code"),
            status_text=_as_str(obj.get("status_txt"), "status_txt"),
            error=ErrorInfo.from_dict(obj.get("error")),
        )
