"""Metrics hook protocol, metric names and the no-op default.

Pass any object with ``increment`` / ``timing`` / ``gauge`` methods as
``ImgBBConfig.metrics`` to receive upload metrics; :func:`resolve_metrics`
falls back to :class:`NoopMetricsHook` when none is configured.

=================================== ======= ==========
name                                type    tags
=================================== ======= ==========
``imgbbify.upload_total``           counter
``imgbbify.upload_success_total``   counter
``imgbbify.upload_failure_total``   counter ``kind``
``imgbbify.upload_bytes``           gauge
``imgbbify.request_duration_ms``    timing  ``status``
=================================== ======= ==========
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

UPLOAD_TOTAL = "imgbbify.upload_total"
UPLOAD_SUCCESS_TOTAL = "imgbbify.upload_success_total"
UPLOAD_FAILURE_TOTAL = "imgbbify.upload_failure_total"
UPLOAD_BYTES = "imgbbify.upload_bytes"
REQUEST_DURATION_MS = "imgbbify.request_duration_ms"

Tags = dict[str, str]


@runtime_checkable
class MetricsHook(Protocol):
    """What a metrics backend must provide.

    *tags* maps string keys to string values; translating them into labels,
    tags or name suffixes is up to the backend.
    """

    def increment(self, name: str, value: int = 1, tags: Tags | None = None) -> None:
        """Add *value* to the counter *name*."""
        ...

    def timing(self, name: str, ms: float, tags: Tags | None = None) -> None:
        """Record a duration of *ms* milliseconds."""
        ...

    def gauge(self, name: str, value: float, tags: Tags | None = None) -> None:
        """Set the gauge *name* to *value*."""
        ...


class NoopMetricsHook:
    """Metrics backend that drops everything."""

    __slots__ = ()

    def increment(self, name: str, value: int = 1, tags: Tags | None = None) -> None:
        return None

    def timing(self, name: str, ms: float, tags: Tags | None = None) -> None:
        return None

    def gauge(self, name: str, value: float, tags: Tags | None = None) -> None:
        return None


def resolve_metrics(hook: Any | None) -> MetricsHook:
    """Return *hook*, or a :class:`NoopMetricsHook` when it is ``None``.

    Raises
    ------
    TypeError
        If *hook* lacks one of the :class:`MetricsHook` methods.
    """
    if hook is None:
        return NoopMetricsHook()
    if not isinstance(hook, MetricsHook):
        raise TypeError(
            f"metrics must implement increment/timing/gauge, got {type(hook).__name__}"
        )
    return hook
