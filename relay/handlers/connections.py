"""Admission control for relay sockets.

One slot per open socket. A socket that cannot get a slot within the
handshake timeout is rejected with a busy close code by the caller.
"""

from __future__ import annotations

import asyncio
import logging

from fastapi import WebSocket

from ..telemetry import get_metrics
from ..config.limits import MAX_CONCURRENT_CONNECTIONS
from ..config.websocket import WS_HANDSHAKE_ACQUIRE_TIMEOUT_S

logger = logging.getLogger(__name__)


class ConnectionHandler:
    """Bounds the number of sockets the server relays for at once."""

    def __init__(
        self,
        max_connections: int = MAX_CONCURRENT_CONNECTIONS,
        acquire_timeout: float = WS_HANDSHAKE_ACQUIRE_TIMEOUT_S,
    ):
        self.max_connections = max_connections
        self.acquire_timeout = acquire_timeout
        self._slots = asyncio.Semaphore(max_connections)
        self._admitted: set[WebSocket] = set()

    @property
    def active(self) -> int:
        return len(self._admitted)

    def capacity(self) -> dict[str, int]:
        return {"active": self.active, "max": self.max_connections, "available": self.max_connections - self.active}

    async def connect(self, websocket: WebSocket) -> bool:
        """Take a slot for ``websocket``; False when none frees up in time."""
        try:
            await asyncio.wait_for(self._slots.acquire(), timeout=self.acquire_timeout)
        except asyncio.TimeoutError:
            logger.warning("connection rejected at capacity max=%s", self.max_connections)
            get_metrics().connections_rejected_total.add(1, {"reason": "capacity"})
            return False

        self._admitted.add(websocket)
        get_metrics().active_connections.add(1)
        logger.info("connection admitted active=%s/%s", self.active, self.max_connections)
        return True

    async def disconnect(self, websocket: WebSocket) -> None:
        # Sockets that were never admitted hold no slot
        if websocket not in self._admitted:
            return
        self._admitted.discard(websocket)
        self._slots.release()
        get_metrics().active_connections.add(-1)


__all__ = ["ConnectionHandler"]
