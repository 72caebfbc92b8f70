"""Logging context helpers for consistent structured fields.

Every Coordinator operation runs inside ``log_context`` so that log lines
emitted anywhere below it (stores, transport, upstream client) carry the
connection id, request id and resolved identity without threading them
through every call.
"""

from __future__ import annotations

import logging
import contextlib
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import Token, ContextVar

_CONNECTION_ID: ContextVar[str] = ContextVar("connection_id", default="-")
_REQUEST_ID: ContextVar[str] = ContextVar("request_id", default="-")
_IDENTITY: ContextVar[str] = ContextVar("identity", default="-")


def set_log_context(
    *,
    connection_id: str | None = None,
    request_id: str | None = None,
    identity: str | None = None,
) -> list[tuple[ContextVar[str], Token[str]]]:
    """Set log context values and return tokens for reset."""
    tokens: list[tuple[ContextVar[str], Token[str]]] = []
    if connection_id is not None:
        tokens.append((_CONNECTION_ID, _CONNECTION_ID.set(connection_id)))
    if request_id is not None:
        tokens.append((_REQUEST_ID, _REQUEST_ID.set(request_id)))
    if identity is not None:
        tokens.append((_IDENTITY, _IDENTITY.set(identity)))
    return tokens


def reset_log_context(tokens: list[tuple[ContextVar[str], Token[str]]]) -> None:
    """Reset log context values using tokens returned by set_log_context."""
    for var, token in reversed(tokens):
        var.reset(token)


@contextmanager
def log_context(
    *,
    connection_id: str | None = None,
    request_id: str | None = None,
    identity: str | None = None,
) -> Iterator[None]:
    """Context manager for applying log fields within a block."""
    tokens = set_log_context(
        connection_id=connection_id,
        request_id=request_id,
        identity=identity,
    )
    try:
        yield
    finally:
        reset_log_context(tokens)


def current_log_context() -> dict[str, str]:
    """Return the active context fields (used for error reporting tags)."""
    return {
        "connection_id": _CONNECTION_ID.get(),
        "request_id": _REQUEST_ID.get(),
        "identity": _IDENTITY.get(),
    }


def install_log_context() -> None:
    """Install a LogRecord factory that injects context fields."""
    if getattr(install_log_context, "_installed", False):
        return

    old_factory = logging.getLogRecordFactory()

    def record_factory(*args, **kwargs):
        record = old_factory(*args, **kwargs)
        record.connection_id = _CONNECTION_ID.get()
        record.request_id = _REQUEST_ID.get()
        record.identity = _IDENTITY.get()
        return record

    logging.setLogRecordFactory(record_factory)
    install_log_context._installed = True  # type: ignore[attr-defined]


def configure_logging() -> None:
    """Initialize root logging configuration once per process."""
    from relay.config.logging import APP_LOG_LEVEL, APP_LOG_FORMAT, APP_LOG_DATEFMT  # noqa: PLC0415

    install_log_context()
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(level=APP_LOG_LEVEL, format=APP_LOG_FORMAT, datefmt=APP_LOG_DATEFMT)
    else:
        root_logger.setLevel(APP_LOG_LEVEL)
        for handler in root_logger.handlers:
            with contextlib.suppress(Exception):
                handler.setLevel(APP_LOG_LEVEL)
                handler.setFormatter(logging.Formatter(APP_LOG_FORMAT, datefmt=APP_LOG_DATEFMT))

    logging.getLogger("relay").setLevel(APP_LOG_LEVEL)
    # httpx logs every request line at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


__all__ = [
    "install_log_context",
    "log_context",
    "current_log_context",
    "reset_log_context",
    "set_log_context",
    "configure_logging",
]
