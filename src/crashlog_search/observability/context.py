"""Correlation context attached to every structured log record.

Each service operation (index, remove, search, rebuild) runs inside an
``operation_context`` so log lines emitted by the engine underneath carry the
operation name and the active trace/span ids.
"""

from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager
from contextvars import ContextVar
from uuid import uuid4

from opentelemetry import trace


log_context: ContextVar[dict[str, object] | None] = ContextVar("log_context", default=None)


def generate_trace_id() -> str:
    """Generate a 32-char hex trace ID."""
    return uuid4().hex


def generate_span_id() -> str:
    """Generate a 16-char hex span ID."""
    return uuid4().hex[:16]


def _current_span_ids() -> tuple[str, str] | None:
    span_context = trace.get_current_span().get_span_context()
    if not span_context.is_valid:
        return None
    return format(span_context.trace_id, "032x"), format(span_context.span_id, "016x")


def get_log_context() -> dict[str, object]:
    """Return correlation fields for the current context.

    Ids of the active OpenTelemetry span win over the ones generated when the
    context was opened.
    """
    ctx = log_context.get()
    if ctx is None:
        ctx = {"trace_id": generate_trace_id(), "span_id": generate_span_id()}
        log_context.set(ctx)
    span_ids = _current_span_ids()
    if span_ids is None:
        return dict(ctx)
    trace_id, span_id = span_ids
    return {**ctx, "trace_id": trace_id, "span_id": span_id}


@contextmanager
def operation_context(operation: str, **fields: object) -> Generator[dict[str, object], None, None]:
    """Bind ``operation`` (plus extra fields) to logs emitted inside the block."""
    parent = log_context.get() or {}
    ctx = {
        "trace_id": parent.get("trace_id") or generate_trace_id(),
        "span_id": generate_span_id(),
        **{key: value for key, value in parent.items() if key not in ("trace_id", "span_id")},
        "operation": operation,
        **fields,
    }
    token = log_context.set(ctx)
    try:
        yield ctx
    finally:
        log_context.reset(token)
