"""Error hierarchy for the imgbbify client.

Every error raised by :meth:`ImgBBClient.upload` is an :class:`ImgBBError`.
Each carries a machine-readable ``kind`` (from :class:`ErrorKind`), the
HTTP-style ``status_code`` / ``status_text`` pair, an :class:`ErrorInfo`
with the message, numeric code and context reported by the service (or
synthesised locally), and an optional ``cause``.

Two errors compare equal when their ``status_code`` and ``status_text``
match.  The nested :class:`ErrorInfo` is ignored, so callers can match on
the class of failure without depending on message text::

    try:
        client.upload(image)
    except ImgBBError as exc:
        if exc == ImgBBError.bad_request():
            ...
"""

from __future__ import annotations

from enum import Enum

import httpx

from imgbbify.models import ErrorInfo

# ---------------------------------------------------------------------------
# Error kind enum
# ---------------------------------------------------------------------------

class ErrorKind(str, Enum):
    """Machine-readable kinds for every error the client can raise."""

    FILE_EMPTY = "FILE_EMPTY"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    INVALID_IMAGE = "INVALID_IMAGE"
    INTERNAL = "INTERNAL"
    SERVICE = "SERVICE"


def status_text(status_code: int) -> str:
    """Return the standard reason phrase for *status_code*."""
    return httpx.codes.get_reason_phrase(status_code)


# ---------------------------------------------------------------------------
# Base error
# ---------------------------------------------------------------------------

class ImgBBError(Exception):
    """Base exception for all imgbbify errors.

    Parameters
    ----------
    kind:
        A value from :class:`ErrorKind` identifying the error category.
    status_code:
        HTTP-style status code.  For service errors this is the value the
        service reported in its payload, which need not equal the HTTP
        status of the response.
    status_text:
        Reason phrase paired with *status_code*.
    info:
        Message, numeric code and context string.
    cause:
        The underlying exception, if this error wraps another.
    """

    def __init__(
        self,
        kind: ErrorKind,
        status_code: int,
        status_text: str,
        info: ErrorInfo | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.kind: ErrorKind = ErrorKind(kind)
        self.status_code: int = status_code
        self.status_text: str = status_text
        self.info: ErrorInfo = info or ErrorInfo()
        self.cause: Exception | None = cause
        super().__init__(str(self))
        if cause is not None:
            self.__cause__ = cause

    @property
    def message(self) -> str:
        return self.info.message

    @classmethod
    def bad_request(cls) -> ImgBBError:
        """A bare 400 error, useful as a match target for validation errors."""
        return cls(ErrorKind.INVALID_IMAGE, 400, status_text(400))

    @classmethod
    def internal(cls) -> ImgBBError:
        """A bare 500 error, useful as a match target for internal errors."""
        return cls(ErrorKind.INTERNAL, 500, status_text(500))

    def __str__(self) -> str:
        info = self.info
        return (
            f"{self.status_code} {self.status_text}: "
            f"{{{info.message} {info.code} {info.context}}}"
        )

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(kind={self.kind!r}, "
            f"status_code={self.status_code!r}, status_text={self.status_text!r}, "
            f"info={self.info!r})"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ImgBBError):
            return NotImplemented
        return (self.status_code, self.status_text) == (
            other.status_code,
            other.status_text,
        )

    def __hash__(self) -> int:
        return hash((self.status_code, self.status_text))


# ---------------------------------------------------------------------------
# Validation errors (raised before any network activity)
# ---------------------------------------------------------------------------

class ImgBBValidationError(ImgBBError):
    """Base class for image validation failures.  Always 400 / Bad Request."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        context: str = "",
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            kind=kind,
            status_code=400,
            status_text=status_text(400),
            info=ErrorInfo(message=message, context=context),
            cause=cause,
        )


class ImgBBFileEmptyError(ImgBBValidationError):
    """The image payload is empty."""

    def __init__(self, message: str = "image file is empty", context: str = "") -> None:
        super().__init__(ErrorKind.FILE_EMPTY, message, context)


class ImgBBFileTooLargeError(ImgBBValidationError):
    """The image payload exceeds the 32 MiB limit."""

    def __init__(
        self,
        message: str = "image is too large (max image size is 32mb)",
        context: str = "",
    ) -> None:
        super().__init__(ErrorKind.FILE_TOO_LARGE, message, context)


class ImgBBInvalidImageError(ImgBBValidationError):
    """The image was constructed with an inconsistent payload or a bad
    expiration value.
    """

    def __init__(
        self,
        message: str,
        context: str = "",
        cause: Exception | None = None,
    ) -> None:
        super().__init__(ErrorKind.INVALID_IMAGE, message, context, cause)


# ---------------------------------------------------------------------------
# Internal and service errors
# ---------------------------------------------------------------------------

class ImgBBInternalError(ImgBBError):
    """A local failure: transport error, body read failure, undecodable
    response, or a failure while producing the request body.

    Always 500 / Internal Server Error, whatever the HTTP status was.
    """

    def __init__(
        self,
        message: str,
        context: str = "",
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            kind=ErrorKind.INTERNAL,
            status_code=500,
            status_text=status_text(500),
            info=ErrorInfo(message=message, context=context),
            cause=cause,
        )


class ImgBBServiceError(ImgBBError):
    """A well-formed error payload returned by the service, passed through
    with the service's own status fields.
    """

    def __init__(
        self,
        status_code: int,
        status_text: str,
        info: ErrorInfo | None = None,
    ) -> None:
        super().__init__(
            kind=ErrorKind.SERVICE,
            status_code=status_code,
            status_text=status_text,
            info=info,
        )
