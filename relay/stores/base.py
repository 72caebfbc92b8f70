"""Narrow interfaces to the identity, quota and session backends.

Backends raise ``StoreFailure`` for anything that is not a definitive answer
(network errors, throttling, malformed records). ``IdentityResolver`` raises
``IdentityNotFound`` when the credential is simply unknown.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True, slots=True)
class ConnectionSession:
    """Binds a live connection to the identity it authenticated as."""

    connection_id: str
    identity: str


@dataclass(frozen=True, slots=True)
class QuotaState:
    identity: str
    remaining: int

    @property
    def exhausted(self) -> bool:
        return self.remaining <= 0


class IdentityResolver(Protocol):
    async def resolve(self, credential: str) -> str: ...


class QuotaStore(Protocol):
    async def get(self, identity: str) -> int: ...

    async def decrement(self, identity: str, amount: int = 1) -> None: ...


class SessionBackend(Protocol):
    async def put(self, connection_id: str, identity: str) -> None: ...

    async def get(self, connection_id: str) -> str | None: ...

    async def delete(self, connection_id: str) -> None: ...


__all__ = [
    "ConnectionSession",
    "QuotaState",
    "IdentityResolver",
    "QuotaStore",
    "SessionBackend",
]
