"""JSON-lines logging for imgbbify.

Records are written one JSON object per line::

    {"ts": "2026-10-19T12:00:00.123456+00:00", "level": "INFO",
     "logger": "imgbbify.client", "message": "Upload complete",
     "op": "upload", "image": "cat.png", "id": "2ndCYJK", "status_code": 200}

Structured fields travel in ``extra={"extra_fields": {...}}`` and pass
through :func:`~imgbbify.utils.redact.redact` before they are written, so a
``key`` or ``delete_url`` that reaches a log call is masked.  Records from
the multipart producer thread carry a ``thread`` field.
"""

from __future__ import annotations

import json
import logging
import sys
import threading
from datetime import datetime, timezone
from typing import Any, TextIO

from imgbbify.utils.redact import redact


class StructuredFormatter(logging.Formatter):
    """Render a :class:`logging.LogRecord` as a single JSON line.

    Always present: ``ts`` (UTC, ISO-8601), ``level``, ``logger``,
    ``message``.  Optional: redacted ``extra_fields``, ``thread`` (when not
    logged from the main thread), ``exception`` and ``stack_info``.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.thread != threading.main_thread().ident:
            entry["thread"] = record.threadName

        fields = getattr(record, "extra_fields", None)
        if isinstance(fields, dict):
            entry.update(redact(fields))

        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            entry["stack_info"] = self.formatStack(record.stack_info)

        return json.dumps(entry, default=str)


class _StructuredHandler(logging.StreamHandler):
    """Stream handler marker; at most one is attached per logger."""

    def __init__(self, stream: TextIO | None = None) -> None:
        super().__init__(stream if stream is not None else sys.stderr)
        self.setFormatter(StructuredFormatter())


def get_logger(
    name: str = "imgbbify",
    *,
    level: int | str = logging.WARNING,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Return the logger *name* with a JSON handler attached.

    The first call for a name attaches the handler, sets *level* (an ``int``
    or a level name in any case) and stops propagation to the root logger.
    Later calls return the same logger untouched.  The default level is
    ``WARNING``: upload start/finish records are ``DEBUG`` and ``INFO``
    and stay quiet unless the caller lowers it.
    """
    logger = logging.getLogger(name)
    if any(isinstance(h, _StructuredHandler) for h in logger.handlers):
        return logger

    logger.setLevel(level.upper() if isinstance(level, str) else level)
    logger.addHandler(_StructuredHandler(stream))
    logger.propagate = False
    return logger
