"""Connection session store adapter.

Wraps a ``SessionBackend`` so the Coordinator only ever sees
``ConnectionSession`` values and ``StoreFailure`` errors, whatever the backend
raises underneath.
"""

from __future__ import annotations

import logging

from ..errors import StoreFailure
from .base import SessionBackend, ConnectionSession

logger = logging.getLogger(__name__)


class ConnectionSessionStore:
    def __init__(self, backend: SessionBackend) -> None:
        self._backend = backend

    async def create(self, connection_id: str, identity: str) -> ConnectionSession:
        try:
            await self._backend.put(connection_id, identity)
        except StoreFailure:
            raise
        except Exception as exc:
            raise StoreFailure(f"failed to store session: {exc}", operation="session.put") from exc
        return ConnectionSession(connection_id=connection_id, identity=identity)

    async def lookup(self, connection_id: str) -> ConnectionSession | None:
        try:
            identity = await self._backend.get(connection_id)
        except StoreFailure:
            raise
        except Exception as exc:
            raise StoreFailure(f"failed to read session: {exc}", operation="session.get") from exc
        if identity is None:
            return None
        return ConnectionSession(connection_id=connection_id, identity=identity)

    async def remove(self, connection_id: str) -> None:
        """Delete the session record; deleting a missing record is not an error."""
        try:
            await self._backend.delete(connection_id)
        except StoreFailure:
            raise
        except Exception as exc:
            raise StoreFailure(f"failed to delete session: {exc}", operation="session.delete") from exc
        logger.debug("session removed connection_id=%s", connection_id)


__all__ = ["ConnectionSessionStore"]
