"""Decode upload responses into an :class:`UploadResponse` or an error.

The outcome depends on two things: the HTTP status and whether the body
decodes as the shape expected for that status.

=========== =============================== ==================================
HTTP status body decodes                    body does not decode
=========== =============================== ==================================
200         return :class:`UploadResponse`  raise :class:`ImgBBInternalError`
other       raise :class:`ImgBBServiceError` raise :class:`ImgBBInternalError`
=========== =============================== ==================================

Only the shape for the status branch is attempted.  A service error keeps
the status fields from the payload, which may differ from the HTTP status.
"""

from __future__ import annotations

import json

import httpx

from imgbbify.errors import ImgBBInternalError, ImgBBServiceError
from imgbbify.models import ErrorPayload, UploadResponse


def _decode_error(exc: Exception) -> ImgBBInternalError:
    return ImgBBInternalError(message=f"json unmarshal: {exc}", cause=exc)


def parse_response(status_code: int, body: bytes) -> UploadResponse:
    """Return the decoded success response, or raise.

    Raises
    ------
    ImgBBServiceError
        For a non-200 status with a well-formed error body.
    ImgBBInternalError
        When the body does not decode as the expected shape.
    """
    if status_code != httpx.codes.OK:
        try:
            payload = ErrorPayload.from_dict(json.loads(body))
        except (ValueError, TypeError) as exc:
            raise _decode_error(exc) from exc
        raise ImgBBServiceError(
            status_code=payload.status_code,
            status_text=payload.status_text,
            info=payload.error,
        )

    try:
        return UploadResponse.from_dict(json.loads(body))
    except (ValueError, TypeError) as exc:
        raise _decode_error(exc) from exc
