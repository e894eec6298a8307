"""Prometheus metrics for the search index, mirrored to OpenTelemetry meters.

Prometheus is the source of truth and is exposed through ``get_metrics``; each
``MetricBridge`` records the same value into an OTel instrument so a host with
an OTel metric reader attached sees identical series.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
import time
from typing import Any

from opentelemetry import metrics as otel_metrics
from opentelemetry.metrics import Meter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import MetricReader
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, Gauge, Histogram, generate_latest


REGISTRY = CollectorRegistry(auto_describe=True)

METER_NAME = "crashlog_search"

# OTel instrument factory per bridge kind; gauges are fed deltas
_INSTRUMENT_FACTORIES = {
    "counter": "create_counter",
    "histogram": "create_histogram",
    "gauge": "create_up_down_counter",
}

_meter_provider: MeterProvider | None = None
_meter: Meter | None = None


def init_metrics(
    service_name: str = "crashlog-search",
    resource_attributes: dict[str, str] | None = None,
    metric_readers: Sequence[MetricReader] = (),
) -> MeterProvider:
    """Install the global OTel meter provider once and return it."""
    global _meter_provider, _meter

    if _meter_provider is None:
        resource = Resource.create({**(resource_attributes or {}), SERVICE_NAME: service_name})
        _meter_provider = MeterProvider(resource=resource, metric_readers=list(metric_readers))
        otel_metrics.set_meter_provider(_meter_provider)
        _meter = _meter_provider.get_meter(METER_NAME)
    return _meter_provider


def _current_meter() -> Meter:
    if _meter is None:
        init_metrics()
    return _meter  # type: ignore[return-value]


@dataclass(frozen=True)
class BoundMetric:
    """A bridge with its label values filled in."""

    bridge: MetricBridge
    labels: dict[str, str]

    def inc(self, amount: float = 1.0) -> None:
        self.bridge.record("inc", self.labels, amount)

    def observe(self, value: float) -> None:
        self.bridge.record("observe", self.labels, value)

    def set(self, value: float) -> None:
        self.bridge.record("set", self.labels, value)


class MetricBridge:
    """Pair a Prometheus metric with a lazily created OTel instrument."""

    def __init__(self, prom_metric: Counter | Histogram | Gauge, *, otel_kind: str) -> None:
        self.prom_metric = prom_metric
        self.otel_kind = otel_kind
        self._instrument: Any = None
        self._gauge_values: dict[frozenset[tuple[str, str]], float] = {}

    @property
    def name(self) -> str:
        return self.prom_metric._name

    def labels(self, **labels: str) -> BoundMetric:
        return BoundMetric(self, labels)

    def record(self, action: str, labels: dict[str, str], value: float) -> None:
        # Unlabelled Prometheus metrics reject .labels()
        child = self.prom_metric.labels(**labels) if labels else self.prom_metric
        getattr(child, action)(value)

        if action == "set":
            key = frozenset(labels.items())
            delta = value - self._gauge_values.get(key, 0.0)
            self._gauge_values[key] = value
            if not delta:
                return
            value = delta
        instrument = self._otel_instrument()
        if action == "observe":
            instrument.record(value, labels)
        else:
            instrument.add(value, labels)

    def _otel_instrument(self) -> Any:
        if self._instrument is None:
            factory = _INSTRUMENT_FACTORIES.get(self.otel_kind)
            if factory is None:
                raise ValueError(f"Unknown metric kind: {self.otel_kind}")
            meter = _current_meter()
            self._instrument = getattr(meter, factory)(self.name, description=self.prom_metric._documentation)
        return self._instrument


SEARCH_LATENCY = MetricBridge(
    Histogram(
        "crashlog_search_latency_seconds",
        "Search query latency in seconds",
        ["mode"],
        buckets=(0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
        registry=REGISTRY,
    ),
    otel_kind="histogram",
)
SEARCH_REQUESTS = MetricBridge(
    Counter("crashlog_search_requests", "Search requests by mode and outcome", ["mode", "status"], registry=REGISTRY),
    otel_kind="counter",
)
INDEX_OPERATIONS = MetricBridge(
    Counter("crashlog_index_operations", "Index mutations by operation", ["operation"], registry=REGISTRY),
    otel_kind="counter",
)
INDEX_DOC_COUNT = MetricBridge(
    Gauge("crashlog_index_documents", "Crash logs held in the search index", registry=REGISTRY),
    otel_kind="gauge",
)
INDEX_TERM_COUNT = MetricBridge(
    Gauge("crashlog_index_terms", "Distinct terms in the inverted index", registry=REGISTRY),
    otel_kind="gauge",
)


def search_mode(*, phrase: bool, fuzzy: bool) -> str:
    if phrase:
        return "phrase"
    return "fuzzy" if fuzzy else "term"


@contextmanager
def track_latency(histogram: MetricBridge, **labels: str) -> Iterator[None]:
    """Observe the wall time of the block, whether or not it raises."""
    started = time.perf_counter()
    try:
        yield
    finally:
        histogram.labels(**labels).observe(time.perf_counter() - started)


def get_metrics() -> bytes:
    """Prometheus text exposition of the search registry."""
    return generate_latest(REGISTRY)


def get_metrics_content_type() -> str:
    return CONTENT_TYPE_LATEST
