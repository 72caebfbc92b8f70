"""Primary WebSocket connection handler.

Drives one socket through the Coordinator:

1. Connection setup
   - Credential extraction (subprotocol, header or query parameter)
   - Connection admission (capacity check)
   - Registration with the push transport under a fresh connection id
   - ``on_connect``; a rejected connection has already been closed

2. Message loop
   - Control frames: ping/pong/end
   - Anything else is a relay request handed to ``on_message``; the loop
     ends as soon as the Coordinator reports the connection closed

3. Cleanup (always)
   - ``on_disconnect`` (idempotent)
   - Transport unregistration, idle watchdog stop, slot release
"""

from __future__ import annotations

import uuid
import logging
import contextlib
from typing import TYPE_CHECKING

import orjson
from fastapi import WebSocket

from ..telemetry import capture_error
from ..transport import is_expected_disconnect
from .auth import extract_credential
from .parser import parse_control_frame
from .lifecycle import WebSocketLifecycle
from .errors import send_error, reject_connection
from ..config.websocket import WS_CLOSE_BUSY_CODE, WS_CLOSE_NORMAL_CODE

if TYPE_CHECKING:
    from ..runtime.dependencies import RuntimeDeps

logger = logging.getLogger(__name__)

_PONG_FRAME = orjson.dumps({"type": "pong"}).decode()
_CLIENT_CLOSE_FRAME = orjson.dumps({"type": "connection_closed", "reason": "client_request"}).decode()


async def _admit(ws: WebSocket, deps: RuntimeDeps, subprotocol: str | None) -> bool:
    if not await deps.connections.connect(ws):
        capacity_info = deps.connections.capacity()
        await reject_connection(
            ws,
            error_code="server_at_capacity",
            message=(
                "Server is at capacity. "
                f"Active connections: {capacity_info['active']}/{capacity_info['max']}. "
                "Please try again later."
            ),
            close_code=WS_CLOSE_BUSY_CODE,
            subprotocol=subprotocol,
            extra={"capacity": capacity_info},
        )
        return False

    await ws.accept(subprotocol=subprotocol)
    return True


async def _handle_control_message(ws: WebSocket, msg_type: str) -> bool:
    """Process ping/pong/end frames; return True if the connection should close."""
    if msg_type == "ping":
        await ws.send_text(_PONG_FRAME)
        return False
    if msg_type == "end":
        logger.info("WS recv: end")
        with contextlib.suppress(Exception):
            await ws.send_text(_CLIENT_CLOSE_FRAME)
        await ws.close(code=WS_CLOSE_NORMAL_CODE)
        return True
    return False


async def handle_websocket_connection(ws: WebSocket, deps: RuntimeDeps) -> None:
    """Handle one WebSocket connection from handshake to cleanup."""
    credential = extract_credential(ws)
    if not await _admit(ws, deps, credential.subprotocol):
        return

    connection_id = uuid.uuid4().hex
    coordinator = deps.coordinator
    deps.transport.register(connection_id, ws)
    lifecycle = WebSocketLifecycle(ws)

    try:
        result = await coordinator.on_connect(connection_id, credential.value)
        if result.closed:
            return
        lifecycle.start()

        while True:
            raw_msg = await ws.receive_text()
            lifecycle.touch()

            msg_type = parse_control_frame(raw_msg)
            if msg_type is not None:
                if await _handle_control_message(ws, msg_type):
                    break
                continue

            with lifecycle.paused():
                result = await coordinator.on_message(connection_id, raw_msg)
            logger.info(
                "WS relay finished outcome=%s increments=%s",
                result.outcome.value,
                result.increments_sent,
            )
            if result.closed:
                break
    except Exception as exc:  # noqa: BLE001
        if lifecycle.idle_timed_out() or is_expected_disconnect(exc):
            logger.debug("WebSocket closed: %s", type(exc).__name__)
        else:
            logger.exception("WebSocket error")
            capture_error(exc, connection_id=connection_id)
            with contextlib.suppress(Exception):
                await send_error(ws, error_code="internal_error", message=str(exc))
    finally:
        with contextlib.suppress(Exception):
            await lifecycle.stop()
        try:
            await coordinator.on_disconnect(connection_id)
        except Exception:  # noqa: BLE001
            logger.exception("disconnect cleanup failed")
        deps.transport.unregister(connection_id)
        await deps.connections.disconnect(ws)
        logger.info(
            "WebSocket connection closed. Active: %s",
            deps.connections.active,
        )


__all__ = ["handle_websocket_connection"]
