"""Observability module: structured logging, Prometheus/OTel metrics and tracing."""

from crashlog_search.observability.context import get_log_context, log_context, operation_context
from crashlog_search.observability.logging import JsonFormatter, configure_logging
from crashlog_search.observability.metrics import (
    INDEX_DOC_COUNT,
    INDEX_OPERATIONS,
    INDEX_TERM_COUNT,
    SEARCH_LATENCY,
    SEARCH_REQUESTS,
    get_metrics,
    get_metrics_content_type,
    init_metrics,
    search_mode,
    track_latency,
)
from crashlog_search.observability.tracing import create_span, get_tracer, init_tracing, reset_tracing


__all__ = [
    "INDEX_DOC_COUNT",
    "INDEX_OPERATIONS",
    "INDEX_TERM_COUNT",
    "SEARCH_LATENCY",
    "SEARCH_REQUESTS",
    "JsonFormatter",
    "configure_logging",
    "create_span",
    "get_log_context",
    "get_metrics",
    "get_metrics_content_type",
    "get_tracer",
    "init_metrics",
    "init_tracing",
    "log_context",
    "operation_context",
    "reset_tracing",
    "search_mode",
    "track_latency",
]
