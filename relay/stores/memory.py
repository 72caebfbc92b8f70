"""In-process store backends for local development and tests."""

from __future__ import annotations

import asyncio
import logging

from ..errors import QuotaExhausted, StoreFailure, IdentityNotFound

logger = logging.getLogger(__name__)


class MemoryIdentityResolver:
    def __init__(self, credentials: dict[str, str] | None = None) -> None:
        self._credentials = dict(credentials or {})

    async def resolve(self, credential: str) -> str:
        identity = self._credentials.get(credential)
        if identity is None:
            raise IdentityNotFound("unknown credential")
        return identity


class MemoryQuotaStore:
    """Remaining-relay counters keyed by identity.

    Decrements are serialized by a lock and refuse to go below zero, which
    mirrors the conditional update of the DynamoDB backend.
    """

    def __init__(self, remaining: dict[str, int] | None = None) -> None:
        self._remaining = dict(remaining or {})
        self._lock = asyncio.Lock()

    async def get(self, identity: str) -> int:
        try:
            return self._remaining[identity]
        except KeyError:
            raise StoreFailure(f"no quota record for identity {identity!r}", operation="quota.get") from None

    async def decrement(self, identity: str, amount: int = 1) -> None:
        async with self._lock:
            current = self._remaining.get(identity)
            if current is None:
                raise StoreFailure(f"no quota record for identity {identity!r}", operation="quota.decrement")
            if current < amount:
                raise QuotaExhausted(f"cannot decrement {amount} from remaining {current}")
            self._remaining[identity] = current - amount

    def remaining(self, identity: str) -> int | None:
        return self._remaining.get(identity)


class MemorySessionBackend:
    def __init__(self) -> None:
        self._sessions: dict[str, str] = {}

    async def put(self, connection_id: str, identity: str) -> None:
        self._sessions[connection_id] = identity

    async def get(self, connection_id: str) -> str | None:
        return self._sessions.get(connection_id)

    async def delete(self, connection_id: str) -> None:
        self._sessions.pop(connection_id, None)

    def __contains__(self, connection_id: object) -> bool:
        return connection_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)


def parse_dev_credentials(raw: str) -> tuple[dict[str, str], dict[str, int]]:
    """Parse ``credential:identity:remaining`` entries separated by commas.

    Returns:
        (credential -> identity, identity -> remaining)

    Raises:
        ValueError: An entry is malformed.
    """
    credentials: dict[str, str] = {}
    remaining: dict[str, int] = {}
    for entry in raw.split(","):
        entry = entry.strip()
        if not entry:
            continue
        parts = entry.split(":")
        if len(parts) != 3 or not all(p.strip() for p in parts):
            raise ValueError(f"RELAY_DEV_CREDENTIALS entry must be credential:identity:remaining, got {entry!r}")
        credential, identity, count = (p.strip() for p in parts)
        try:
            remaining[identity] = int(count)
        except ValueError:
            raise ValueError(f"RELAY_DEV_CREDENTIALS remaining must be an integer, got {count!r}") from None
        credentials[credential] = identity
    return credentials, remaining


def build_memory_stores(raw_credentials: str) -> tuple[MemoryIdentityResolver, MemoryQuotaStore, MemorySessionBackend]:
    credentials, remaining = parse_dev_credentials(raw_credentials)
    if not credentials:
        logger.warning("memory store backend has no credentials; every connection will be rejected")
    return MemoryIdentityResolver(credentials), MemoryQuotaStore(remaining), MemorySessionBackend()


__all__ = [
    "MemoryIdentityResolver",
    "MemoryQuotaStore",
    "MemorySessionBackend",
    "parse_dev_credentials",
    "build_memory_stores",
]
