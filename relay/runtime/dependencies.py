"""Runtime dependency container.

All long-lived runtime services are assembled at startup and passed explicitly
through request handlers. This avoids lazy singleton initialization during
request processing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from relay.upstream.client import UpstreamClient
    from relay.coordinator.coordinator import RelayCoordinator
    from relay.handlers.connections import ConnectionHandler
    from relay.transport.websocket import WebSocketPushTransport


@dataclass(slots=True)
class RuntimeDeps:
    """Process-wide runtime services initialized during startup."""

    connections: ConnectionHandler
    transport: WebSocketPushTransport
    coordinator: RelayCoordinator
    upstream: UpstreamClient
    store_backend: str = "memory"

    async def shutdown(self) -> None:
        await self.upstream.aclose()


__all__ = ["RuntimeDeps"]
