"""Validated image payloads.

An :class:`Image` carries either raw bytes (``file``) or a string payload
(``source``: a remote URL or a base64 string), never both.  All validation
happens once, in the constructor, so an ``Image`` that exists is always
uploadable:

* an empty payload raises :class:`ImgBBFileEmptyError`;
* a payload larger than :data:`MAX_IMAGE_SIZE` raises
  :class:`ImgBBFileTooLargeError`;
* two payloads, or an expiration that is negative or not a number, raise
  :class:`ImgBBInvalidImageError`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Union

from imgbbify.errors import (
    ImgBBFileEmptyError,
    ImgBBFileTooLargeError,
    ImgBBInvalidImageError,
)

MAX_IMAGE_SIZE = 33_554_432
"""Largest accepted payload, in bytes (32 MiB)."""

Expiration = Union[int, str, timedelta, None]


def normalize_expiration(value: Expiration) -> int:
    """Convert an expiration given as seconds, a numeric string or a
    :class:`~datetime.timedelta` into whole seconds.

    ``None``, ``0`` and ``""`` all mean "no expiration" and return ``0``.
    """
    if value is None:
        return 0
    if isinstance(value, bool):
        raise ImgBBInvalidImageError(
            message="expiration must be a number of seconds",
            context=repr(value),
        )
    if isinstance(value, timedelta):
        seconds = int(value.total_seconds())
    elif isinstance(value, int):
        seconds = value
    elif isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            return 0
        try:
            seconds = int(stripped)
        except ValueError as exc:
            raise ImgBBInvalidImageError(
                message="expiration must be a number of seconds",
                context=value,
                cause=exc,
            ) from exc
    else:
        raise ImgBBInvalidImageError(
            message="expiration must be a number of seconds",
            context=type(value).__name__,
        )

    if seconds < 0:
        raise ImgBBInvalidImageError(
            message="expiration must not be negative",
            context=str(seconds),
        )
    return seconds


@dataclass(frozen=True)
class Image:
    """An image ready to upload.

    Parameters
    ----------
    name:
        Filename (for ``file`` payloads) or label (for ``source`` payloads)
        sent to the service.
    file:
        Raw image bytes.
    source:
        Alternative string payload: a remote URL or base64-encoded image.
    expiration:
        Seconds after which the service deletes the image.  Accepts an
        ``int``, a numeric ``str`` or a ``timedelta``; stored as ``int``.
        ``0`` means the image does not expire.
    """

    name: str
    file: bytes | None = field(default=None, repr=False)
    source: str | None = field(default=None, repr=False)
    expiration: int = 0
    size: int = field(init=False)

    def __post_init__(self) -> None:
        if not isinstance(self.name, str):
            raise ImgBBInvalidImageError(
                message="image name must be a string",
                context=type(self.name).__name__,
            )
        if self.file is not None and self.source is not None:
            raise ImgBBInvalidImageError(
                message="image must have either file bytes or a source string, not both",
                context=self.name,
            )

        if self.file is not None:
            if not isinstance(self.file, (bytes, bytearray, memoryview)):
                raise ImgBBInvalidImageError(
                    message="image file must be bytes",
                    context=type(self.file).__name__,
                )
            payload = bytes(self.file)
            object.__setattr__(self, "file", payload)
            size = len(payload)
        elif self.source is not None:
            if not isinstance(self.source, str):
                raise ImgBBInvalidImageError(
                    message="image source must be a string",
                    context=type(self.source).__name__,
                )
            size = len(self.source.encode("utf-8"))
        else:
            size = 0

        if size <= 0:
            raise ImgBBFileEmptyError(context=self.name)
        if size > MAX_IMAGE_SIZE:
            raise ImgBBFileTooLargeError(context=f"{self.name}: {size} bytes")

        object.__setattr__(self, "expiration", normalize_expiration(self.expiration))
        object.__setattr__(self, "size", size)

    @property
    def is_source(self) -> bool:
        """``True`` when the payload is a source string rather than bytes."""
        return self.source is not None

    @classmethod
    def from_path(
        cls,
        path: str | Path,
        name: str | None = None,
        expiration: Expiration = 0,
    ) -> Image:
        """Read *path* and build an image from its bytes.

        The file size is checked before reading so an oversized file is
        rejected without loading it.  *name* defaults to the file name.
        """
        p = Path(path)
        label = name if name is not None else p.name
        size = p.stat().st_size
        if size > MAX_IMAGE_SIZE:
            raise ImgBBFileTooLargeError(context=f"{label}: {size} bytes")
        return cls(name=label, file=p.read_bytes(), expiration=expiration)
