"""OpenTelemetry metrics export to Axiom over OTLP/HTTP."""

from __future__ import annotations

import os
import socket
import logging

from opentelemetry import metrics
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter

from ..config.relay import RELAY_FRAME_FORMAT
from ..config.stores import RELAY_STORE_BACKEND
from ..config.telemetry import (
    AXIOM_DATASET,
    CLOUD_PLATFORM,
    AXIOM_API_TOKEN,
    AXIOM_ENVIRONMENT,
    OTEL_SERVICE_NAME,
    AXIOM_METRICS_ENDPOINT,
    OTEL_METRICS_EXPORT_INTERVAL_MS,
)

logger = logging.getLogger(__name__)

_provider: MeterProvider | None = None


def _resource() -> Resource:
    attributes: dict[str, str] = {
        "service.name": OTEL_SERVICE_NAME,
        "deployment.environment": AXIOM_ENVIRONMENT,
        "relay.store_backend": RELAY_STORE_BACKEND,
        "relay.frame_format": RELAY_FRAME_FORMAT,
    }
    # Lambda containers report the function instead of an ephemeral host
    function_name = os.getenv("AWS_LAMBDA_FUNCTION_NAME")
    if function_name:
        attributes["faas.name"] = function_name
        attributes["cloud.platform"] = "aws_lambda"
    else:
        attributes["host.name"] = socket.gethostname()
    if CLOUD_PLATFORM:
        attributes["cloud.platform"] = CLOUD_PLATFORM
    return Resource.create(attributes)


def init_otel() -> None:
    """Register the global MeterProvider. Idempotent."""
    global _provider  # noqa: PLW0603
    if _provider is not None:
        return

    exporter = OTLPMetricExporter(
        endpoint=AXIOM_METRICS_ENDPOINT,
        headers={"Authorization": f"Bearer {AXIOM_API_TOKEN}", "X-Axiom-Dataset": AXIOM_DATASET},
    )
    reader = PeriodicExportingMetricReader(exporter, export_interval_millis=OTEL_METRICS_EXPORT_INTERVAL_MS)
    _provider = MeterProvider(resource=_resource(), metric_readers=[reader])
    metrics.set_meter_provider(_provider)
    logger.info("OTel metrics export enabled endpoint=%s dataset=%s", AXIOM_METRICS_ENDPOINT, AXIOM_DATASET)


def shutdown_otel() -> None:
    """Flush pending metrics and release the provider. Idempotent."""
    global _provider  # noqa: PLW0603
    if _provider is None:
        return
    _provider.force_flush()
    _provider.shutdown()
    _provider = None


__all__ = ["init_otel", "shutdown_otel"]
