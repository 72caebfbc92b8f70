"""Shared response helpers for WebSocket error handling.

Error frames sent by the handler itself (before a connection reaches the
Coordinator) follow the same envelope as relay errors:

    {
        "type": "error",
        "error_code": "server_at_capacity",
        "message": "Human-readable description",
        ...extra fields
    }

Error codes emitted here:
    - server_at_capacity: Connection limit reached
    - internal_error: Unexpected server error
"""

from __future__ import annotations

from typing import Any

import orjson
from fastapi import WebSocket


def build_error_payload(
    *,
    error_code: str,
    message: str,
    extra: dict[str, Any] | None = None,
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "type": "error",
        "error_code": error_code,
        "message": message,
    }
    if extra:
        payload.update(extra)
    return payload


async def send_error(
    ws: WebSocket,
    *,
    error_code: str,
    message: str,
    extra: dict[str, Any] | None = None,
) -> None:
    """Send a structured error message to the client."""
    payload = build_error_payload(error_code=error_code, message=message, extra=extra)
    await ws.send_text(orjson.dumps(payload).decode())


async def reject_connection(
    ws: WebSocket,
    *,
    error_code: str,
    message: str,
    close_code: int,
    subprotocol: str | None = None,
    extra: dict[str, Any] | None = None,
) -> None:
    """Accept connection briefly to send an error, then close immediately.

    This pattern ensures the client receives a meaningful error message
    rather than just a raw close code.
    """
    await ws.accept(subprotocol=subprotocol)
    await send_error(ws, error_code=error_code, message=message, extra=extra)
    await ws.close(code=close_code)


__all__ = ["build_error_payload", "send_error", "reject_connection"]
