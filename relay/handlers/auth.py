"""Credential extraction for WebSocket connections.

Browsers cannot set arbitrary headers on a WebSocket handshake, so clients
pass the credential as the requested subprotocol; the server must then echo
it back as the accepted subprotocol or the browser drops the connection.
Non-browser clients may use the ``X-API-Key`` header or ``api_key`` query
parameter instead.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import WebSocket

from ..config.websocket import (
    WS_CREDENTIAL_HEADER,
    WS_CREDENTIAL_QUERY_PARAM,
    WS_CREDENTIAL_SUBPROTOCOL_HEADER,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ConnectionCredential:
    value: str | None
    subprotocol: str | None = None


def _first_subprotocol(header: str | None) -> str | None:
    if not header:
        return None
    for candidate in header.split(","):
        candidate = candidate.strip()
        if candidate:
            return candidate
    return None


def _select_credential(*candidates: str | None) -> str | None:
    """Return the first non-empty credential candidate from the provided values."""
    for candidate in candidates:
        if candidate and candidate.strip():
            return candidate.strip()
    return None


def extract_credential(websocket: WebSocket) -> ConnectionCredential:
    subprotocol = _first_subprotocol(websocket.headers.get(WS_CREDENTIAL_SUBPROTOCOL_HEADER))
    if subprotocol:
        return ConnectionCredential(value=subprotocol, subprotocol=subprotocol)

    value = _select_credential(
        websocket.headers.get(WS_CREDENTIAL_HEADER),
        websocket.query_params.get(WS_CREDENTIAL_QUERY_PARAM),
    )
    if value is None:
        logger.info("WebSocket connection without credential")
    return ConnectionCredential(value=value)


__all__ = ["ConnectionCredential", "extract_credential"]
