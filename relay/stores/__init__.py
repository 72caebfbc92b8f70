"""Identity, quota and connection session stores."""

from .sessions import ConnectionSessionStore
from .base import QuotaState, QuotaStore, SessionBackend, IdentityResolver, ConnectionSession

__all__ = [
    "ConnectionSession",
    "ConnectionSessionStore",
    "QuotaState",
    "QuotaStore",
    "SessionBackend",
    "IdentityResolver",
]
