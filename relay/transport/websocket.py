"""Push transport over FastAPI WebSocket connections held by this process."""

from __future__ import annotations

import logging

from fastapi import WebSocket

from ..errors import ClientSendFailure
from .disconnects import is_expected_disconnect
from ..config.websocket import WS_CLOSE_NORMAL_CODE

logger = logging.getLogger(__name__)


class WebSocketPushTransport:
    """Registry of live sockets addressed by connection id.

    The WebSocket handler registers a socket right after accepting it and
    unregisters it once its receive loop has ended. A closed connection stays
    registered until then so late sends fail loudly instead of silently.
    """

    def __init__(self) -> None:
        self._sockets: dict[str, WebSocket] = {}
        self._closed: set[str] = set()

    def register(self, connection_id: str, websocket: WebSocket) -> None:
        self._sockets[connection_id] = websocket
        self._closed.discard(connection_id)

    def unregister(self, connection_id: str) -> None:
        self._sockets.pop(connection_id, None)
        self._closed.discard(connection_id)

    def is_closed(self, connection_id: str) -> bool:
        return connection_id in self._closed or connection_id not in self._sockets

    def _socket(self, connection_id: str) -> WebSocket:
        websocket = self._sockets.get(connection_id)
        if websocket is None:
            raise ClientSendFailure(f"no connection registered for {connection_id}")
        return websocket

    async def send(self, connection_id: str, data: str) -> None:
        if connection_id in self._closed:
            raise ClientSendFailure(f"connection {connection_id} is closed")
        websocket = self._socket(connection_id)
        try:
            await websocket.send_text(data)
        except Exception as exc:
            if is_expected_disconnect(exc):
                logger.info("client disconnected while sending %s chars", len(data))
            raise ClientSendFailure(f"send to {connection_id} failed: {exc}") from exc

    async def close(self, connection_id: str, *, code: int | None = None) -> None:
        websocket = self._socket(connection_id)
        if connection_id in self._closed:
            return
        self._closed.add(connection_id)
        try:
            await websocket.close(code=code if code is not None else WS_CLOSE_NORMAL_CODE)
        except Exception as exc:
            if is_expected_disconnect(exc):
                logger.debug("close on already disconnected client %s", connection_id)
                return
            raise ClientSendFailure(f"close of {connection_id} failed: {exc}") from exc

    def __len__(self) -> int:
        return len(self._sockets)


__all__ = ["WebSocketPushTransport"]
