"""MetricInstruments registry with typed accessors for the relay OTel instruments."""

from __future__ import annotations

import logging

from opentelemetry import metrics

from ..config.telemetry import (
    METRIC_TTFT,
    OTEL_SERVICE_NAME,
    METRIC_RELAY_LATENCY,
    METRIC_RELAYS_TOTAL,
    METRIC_STORE_ERRORS_TOTAL,
    METRIC_ACTIVE_CONNECTIONS,
    METRIC_QUOTA_DECREMENTS_TOTAL,
    METRIC_CONNECTIONS_REJECTED_TOTAL,
    METRIC_INCREMENTS_FORWARDED_TOTAL,
)

logger = logging.getLogger(__name__)


def _histogram(meter: metrics.Meter, spec: tuple[str, str, str]) -> metrics.Histogram:
    name, unit, desc = spec
    return meter.create_histogram(name, unit=unit, description=desc)


def _counter(meter: metrics.Meter, spec: tuple[str, str, str]) -> metrics.Counter:
    name, unit, desc = spec
    return meter.create_counter(name, unit=unit, description=desc)


def _updown(meter: metrics.Meter, spec: tuple[str, str, str]) -> metrics.UpDownCounter:
    name, unit, desc = spec
    return meter.create_up_down_counter(name, unit=unit, description=desc)


class MetricInstruments:
    """Holds all OTel metric instruments created from config specs."""

    __slots__ = (
        "relay_latency",
        "ttft",
        "relays_total",
        "increments_forwarded_total",
        "quota_decrements_total",
        "store_errors_total",
        "connections_rejected_total",
        "active_connections",
    )

    def __init__(self, meter: metrics.Meter) -> None:
        # Histograms
        self.relay_latency = _histogram(meter, METRIC_RELAY_LATENCY)
        self.ttft = _histogram(meter, METRIC_TTFT)
        # Counters
        self.relays_total = _counter(meter, METRIC_RELAYS_TOTAL)
        self.increments_forwarded_total = _counter(meter, METRIC_INCREMENTS_FORWARDED_TOTAL)
        self.quota_decrements_total = _counter(meter, METRIC_QUOTA_DECREMENTS_TOTAL)
        self.store_errors_total = _counter(meter, METRIC_STORE_ERRORS_TOTAL)
        self.connections_rejected_total = _counter(meter, METRIC_CONNECTIONS_REJECTED_TOTAL)
        # UpDown counters
        self.active_connections = _updown(meter, METRIC_ACTIVE_CONNECTIONS)


_metrics: MetricInstruments | None = None


def get_metrics() -> MetricInstruments:
    """Return the global MetricInstruments (no-op meter if OTel not initialized)."""
    global _metrics  # noqa: PLW0603
    if _metrics is None:
        meter = metrics.get_meter(OTEL_SERVICE_NAME)
        _metrics = MetricInstruments(meter)
    return _metrics


def initialize_metrics() -> None:
    """Create MetricInstruments from the global meter."""
    global _metrics  # noqa: PLW0603
    meter = metrics.get_meter(OTEL_SERVICE_NAME)
    _metrics = MetricInstruments(meter)
    logger.info("Telemetry metrics initialized")


__all__ = ["MetricInstruments", "get_metrics", "initialize_metrics"]
