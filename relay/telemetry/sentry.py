"""Sentry reporting for relay failures.

Events are tagged with the connection, request and identity of the relay
that failed plus the error category from ``classify_error``. Reports are
throttled per (category, class) so a flapping upstream does not flood the
project, and client disconnects are never reported at all.
"""

from __future__ import annotations

import time
import logging
import contextlib
from typing import Any

from ..errors import ClientSendFailure, classify_error
from ..logging import _IDENTITY, _REQUEST_ID, _CONNECTION_ID
from ..config.telemetry import (
    SENTRY_DSN,
    SENTRY_RELEASE,
    SENTRY_ENVIRONMENT,
    SENTRY_SAMPLE_RATE,
    SENTRY_RATE_LIMIT_S,
    SENTRY_TAG_IDENTITY,
    SENTRY_TAG_REQUEST_ID,
    SENTRY_TAG_CONNECTION_ID,
    SENTRY_TAG_ERROR_CATEGORY,
)

logger = logging.getLogger(__name__)

# Failures that describe the client, not the relay
_IGNORED_ERRORS: tuple[type[BaseException], ...] = (ClientSendFailure,)

_error_timestamps: dict[tuple[str, str], float] = {}
_initialized: bool = False


def _before_send(event: dict[str, Any], hint: dict[str, Any]) -> dict[str, Any] | None:
    exc_info = hint.get("exc_info")
    if exc_info and isinstance(exc_info[1], _IGNORED_ERRORS):
        return None
    return event


def init_sentry() -> None:
    """Initialize Sentry SDK. Idempotent."""
    global _initialized  # noqa: PLW0603
    if _initialized:
        return
    import sentry_sdk

    options: dict[str, Any] = {
        "dsn": SENTRY_DSN,
        "environment": SENTRY_ENVIRONMENT,
        "sample_rate": SENTRY_SAMPLE_RATE,
        "traces_sample_rate": 0.0,
        "before_send": _before_send,
    }
    if SENTRY_RELEASE:
        options["release"] = SENTRY_RELEASE

    sentry_sdk.init(**options)
    _initialized = True
    logger.info("Sentry initialized: environment=%s release=%s", SENTRY_ENVIRONMENT, SENTRY_RELEASE or "-")


def shutdown_sentry() -> None:
    """Flush pending events. Idempotent."""
    global _initialized  # noqa: PLW0603
    if not _initialized:
        return
    import sentry_sdk

    with contextlib.suppress(Exception):
        sentry_sdk.flush(timeout=2.0)
    _initialized = False


def _throttled(category: str, error: BaseException) -> bool:
    key = (category, type(error).__qualname__)
    now = time.monotonic()
    last = _error_timestamps.get(key)
    if last is not None and now - last < SENTRY_RATE_LIMIT_S:
        return True
    _error_timestamps[key] = now
    return False


def capture_error(
    error: BaseException,
    *,
    connection_id: str | None = None,
    request_id: str | None = None,
    identity: str | None = None,
    extra: dict[str, Any] | None = None,
) -> None:
    """Report a relay failure; ids default to the current log context."""
    if not _initialized or isinstance(error, _IGNORED_ERRORS):
        return

    category = classify_error(error)
    if _throttled(category, error):
        logger.debug("sentry report throttled category=%s", category)
        return

    import sentry_sdk

    with sentry_sdk.new_scope() as scope:
        scope.set_tag(SENTRY_TAG_ERROR_CATEGORY, category)
        scope.set_tag(SENTRY_TAG_CONNECTION_ID, connection_id or _CONNECTION_ID.get())
        scope.set_tag(SENTRY_TAG_REQUEST_ID, request_id or _REQUEST_ID.get())
        scope.set_tag(SENTRY_TAG_IDENTITY, identity or _IDENTITY.get())
        for key, value in (extra or {}).items():
            scope.set_extra(key, value)
        sentry_sdk.capture_exception(error)


def add_breadcrumb(message: str, *, category: str, data: dict[str, Any] | None = None) -> None:
    """Record a breadcrumb on the current scope. No-op when Sentry is off."""
    if not _initialized:
        return
    import sentry_sdk

    sentry_sdk.add_breadcrumb(message=message, category=category, level="info", data=data or {})


__all__ = ["init_sentry", "shutdown_sentry", "capture_error", "add_breadcrumb"]
