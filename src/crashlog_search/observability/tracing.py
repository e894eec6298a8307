"""OpenTelemetry spans around index and search operations.

Exporters are the host application's business: ``init_tracing`` only builds
(or adopts) a provider. Without a processor attached spans are still created,
which is enough to put trace/span ids on every log line.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
import logging
from typing import Any

from opentelemetry import trace
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.trace import Span, SpanKind, Status, StatusCode, Tracer


logger = logging.getLogger(__name__)

TRACER_NAME = "crashlog_search"

_tracer: Tracer | None = None


def init_tracing(
    service_name: str = "crashlog-search",
    resource_attributes: Mapping[str, str] | None = None,
    provider: TracerProvider | None = None,
) -> TracerProvider:
    """Bind the module tracer to ``provider``.

    Without an explicit provider a new one is created for ``service_name`` and
    installed as the global provider. An explicit provider is used as given
    and the global one is left alone.
    """
    global _tracer

    if provider is None:
        provider = TracerProvider(resource=Resource.create({**(resource_attributes or {}), SERVICE_NAME: service_name}))
        trace.set_tracer_provider(provider)
    _tracer = provider.get_tracer(TRACER_NAME)
    logger.info("Tracing initialized for %s", service_name)
    return provider


def reset_tracing() -> None:
    """Forget the bound tracer; the next span uses the global provider."""
    global _tracer
    _tracer = None


def get_tracer() -> Tracer:
    global _tracer

    if _tracer is None:
        _tracer = trace.get_tracer(TRACER_NAME)
    return _tracer


@contextmanager
def create_span(
    name: str,
    kind: SpanKind = SpanKind.INTERNAL,
    attributes: Mapping[str, Any] | None = None,
) -> Iterator[Span]:
    """Run the block inside a new current span.

    An exception escaping the block marks the span as failed, is attached to
    it as an event and propagates unchanged.
    """
    with get_tracer().start_as_current_span(
        name,
        kind=kind,
        attributes=dict(attributes or {}),
        record_exception=False,
        set_status_on_exception=False,
    ) as span:
        try:
            yield span
        except Exception as exc:
            span.record_exception(exc)
            span.set_status(Status(StatusCode.ERROR, f"{type(exc).__name__}: {exc}"))
            raise
