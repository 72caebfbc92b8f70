"""Telemetry configuration: env vars, metric specs, Sentry constants."""

import os

# ---------------------------------------------------------------------------
# Sentry
# ---------------------------------------------------------------------------
SENTRY_DSN: str = os.getenv("SENTRY_DSN", "")
SENTRY_ENVIRONMENT: str = os.getenv("SENTRY_ENVIRONMENT", "production")
SENTRY_RELEASE: str = os.getenv("SENTRY_RELEASE", "")
SENTRY_SAMPLE_RATE: float = float(os.getenv("SENTRY_SAMPLE_RATE", "1.0"))
SENTRY_RATE_LIMIT_S: float = float(os.getenv("SENTRY_RATE_LIMIT_S", "60"))

SENTRY_TAG_CONNECTION_ID = "relay.connection_id"
SENTRY_TAG_REQUEST_ID = "relay.request_id"
SENTRY_TAG_IDENTITY = "relay.identity"
SENTRY_TAG_ERROR_CATEGORY = "relay.error_category"

# ---------------------------------------------------------------------------
# Axiom / OTel
# ---------------------------------------------------------------------------
AXIOM_API_TOKEN: str = os.getenv("AXIOM_API_TOKEN", "")
AXIOM_DATASET: str = os.getenv("AXIOM_DATASET", "stream-relay")
AXIOM_ENVIRONMENT: str = os.getenv("AXIOM_ENVIRONMENT", "production")
AXIOM_METRICS_ENDPOINT: str = os.getenv("AXIOM_METRICS_ENDPOINT", "https://api.axiom.co/v1/metrics")

OTEL_SERVICE_NAME: str = os.getenv("OTEL_SERVICE_NAME", "stream-relay")
OTEL_METRICS_EXPORT_INTERVAL_MS: int = int(os.getenv("OTEL_METRICS_EXPORT_INTERVAL_MS", "15000"))

CLOUD_PLATFORM: str = os.getenv("CLOUD_PLATFORM", "")

# ---------------------------------------------------------------------------
# Metric definitions: (name, unit, description)
# ---------------------------------------------------------------------------

# Histograms
METRIC_RELAY_LATENCY = ("relay.latency", "s", "Relay duration from upstream call to terminal state")
METRIC_TTFT = ("relay.ttft", "s", "Time to first forwarded increment")

# Counters
METRIC_RELAYS_TOTAL = ("relay.relays_total", "{relay}", "Relays by outcome")
METRIC_INCREMENTS_FORWARDED_TOTAL = (
    "relay.increments_forwarded_total",
    "{increment}",
    "Text increments forwarded to clients",
)
METRIC_QUOTA_DECREMENTS_TOTAL = ("relay.quota_decrements_total", "{decrement}", "Quota decrements by status")
METRIC_STORE_ERRORS_TOTAL = ("relay.store_errors_total", "{error}", "Session/quota store failures")
METRIC_CONNECTIONS_REJECTED_TOTAL = (
    "relay.connections_rejected_total",
    "{connection}",
    "Connections rejected at admission",
)

# UpDown counters
METRIC_ACTIVE_CONNECTIONS = ("relay.active_connections", "{connection}", "Open client connections")

__all__ = [
    "SENTRY_DSN",
    "SENTRY_ENVIRONMENT",
    "SENTRY_RELEASE",
    "SENTRY_SAMPLE_RATE",
    "SENTRY_RATE_LIMIT_S",
    "SENTRY_TAG_CONNECTION_ID",
    "SENTRY_TAG_REQUEST_ID",
    "SENTRY_TAG_IDENTITY",
    "SENTRY_TAG_ERROR_CATEGORY",
    "AXIOM_API_TOKEN",
    "AXIOM_DATASET",
    "AXIOM_ENVIRONMENT",
    "AXIOM_METRICS_ENDPOINT",
    "OTEL_SERVICE_NAME",
    "OTEL_METRICS_EXPORT_INTERVAL_MS",
    "CLOUD_PLATFORM",
    "METRIC_RELAY_LATENCY",
    "METRIC_TTFT",
    "METRIC_RELAYS_TOTAL",
    "METRIC_INCREMENTS_FORWARDED_TOTAL",
    "METRIC_QUOTA_DECREMENTS_TOTAL",
    "METRIC_STORE_ERRORS_TOTAL",
    "METRIC_CONNECTIONS_REJECTED_TOTAL",
    "METRIC_ACTIVE_CONNECTIONS",
]
