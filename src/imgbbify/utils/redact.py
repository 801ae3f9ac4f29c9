"""Scrub secrets and payload bytes out of data before it is logged or dumped.

Rules applied by :func:`redact`:

* Values under a credential-like key (``key``, ``api_key``, ``token``,
  ``authorization`` ...) and under ``delete_url`` become ``"<redacted>"``.
  A delete URL is a capability: whoever holds it can delete the image.
* The API key, passed as *secret*, is masked inside every other string,
  leaving at most its last four characters (``<redacted:...1234>``).
* Base64 data URIs become ``<data_uri:N_bytes>``; ``bytes`` and long
  strings that are mostly unprintable become ``<binary:N_bytes>``.
"""

from __future__ import annotations

import re
from typing import Any

REDACTED = "<redacted>"

_MASKED_KEYS = frozenset({"key", "delete_url"})
_MASKED_KEY_PARTS = (
    "token",
    "secret",
    "password",
    "authorization",
    "cookie",
    "api_key",
    "api-key",
)

_DATA_URI_RE = re.compile(
    r"data:[\w.+-]+/[\w.+-]+;base64,(?P<b64>[A-Za-z0-9+/]+=*)"
)

# Only strings at least this long are tested for binary content.
_BINARY_MIN_LEN = 256
_BINARY_SAMPLE = 512


def _masks_key(name: object) -> bool:
    if not isinstance(name, str):
        return False
    lowered = name.lower()
    return lowered in _MASKED_KEYS or any(part in lowered for part in _MASKED_KEY_PARTS)


def _secret_placeholder(secret: str) -> str:
    if len(secret) < 8:
        return "<redacted:****>"
    placeholder = f"<redacted:...{secret[-4:]}>"
    return REDACTED if secret in placeholder else placeholder


def _data_uri_size(match: re.Match[str]) -> str:
    b64 = match.group("b64")
    decoded = len(b64) * 3 // 4 - (len(b64) - len(b64.rstrip("=")))
    return f"<data_uri:{decoded}_bytes>"


def _is_binary_text(text: str) -> bool:
    if len(text) < _BINARY_MIN_LEN:
        return False
    sample = text[:_BINARY_SAMPLE]
    unprintable = sum(1 for ch in sample if not ch.isprintable() and ch not in "\r\n\t")
    return unprintable * 10 > len(sample)


def _scrub_text(text: str, secret: str | None) -> str:
    text = _DATA_URI_RE.sub(_data_uri_size, text)
    if _is_binary_text(text):
        return f"<binary:{len(text.encode('utf-8'))}_bytes>"
    if secret and secret in text:
        text = text.replace(secret, _secret_placeholder(secret))
    return text


def _scrub(value: Any, secret: str | None) -> Any:
    if isinstance(value, dict):
        return {
            k: REDACTED if _masks_key(k) else _scrub(v, secret)
            for k, v in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [_scrub(item, secret) for item in value]
    if isinstance(value, str):
        return _scrub_text(value, secret)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return f"<binary:{len(value)}_bytes>"
    return value


def redact(payload: dict[str, Any], secret: str | None = None) -> dict[str, Any]:
    """Return a scrubbed copy of *payload*; the input is left untouched.

    Parameters
    ----------
    payload:
        A request field summary, a decoded response body or a log record's
        structured fields.
    secret:
        The API key.  Every occurrence inside a string is masked, including
        inside URLs.

    >>> redact({"key": "abc123", "type": "file"})
    {'key': '<redacted>', 'type': 'file'}
    """
    return _scrub(payload, secret)
