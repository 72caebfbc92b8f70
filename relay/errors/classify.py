"""Exception classification helpers for metrics and telemetry labels."""

from __future__ import annotations

from .stores import StoreFailure
from .transport import ClientSendFailure
from .validation import ValidationFailure
from .base import QuotaExhausted, RelayTimeout
from .auth import AuthenticationFailure, IdentityNotFound
from .upstream import UpstreamProtocolFailure, UpstreamTransportFailure

# Order matters: subclasses before their parents
ERROR_CATEGORIES: tuple[tuple[type[BaseException], str], ...] = (
    (IdentityNotFound, "identity_not_found"),
    (AuthenticationFailure, "authentication"),
    (QuotaExhausted, "quota"),
    (ValidationFailure, "validation"),
    (UpstreamTransportFailure, "upstream_transport"),
    (UpstreamProtocolFailure, "upstream_protocol"),
    (ClientSendFailure, "client_send"),
    (RelayTimeout, "timeout"),
    (StoreFailure, "store"),
    (TimeoutError, "timeout"),
    (ConnectionError, "connection"),
)


def classify_error(exc: BaseException) -> str:
    """Map an exception to a metric-friendly category label."""

    for cls, label in ERROR_CATEGORIES:
        if isinstance(exc, cls):
            return label
    return "unknown"


__all__ = ["ERROR_CATEGORIES", "classify_error"]
