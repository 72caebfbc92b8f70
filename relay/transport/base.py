"""Push transport interface.

A push transport delivers text frames to a connected client by connection id
and releases the client handle. Both operations raise ``ClientSendFailure``
when the client cannot be reached.
"""

from __future__ import annotations

from typing import Protocol


class PushTransport(Protocol):
    async def send(self, connection_id: str, data: str) -> None: ...

    async def close(self, connection_id: str, *, code: int | None = None) -> None: ...


__all__ = ["PushTransport"]
