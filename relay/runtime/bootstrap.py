"""Runtime dependency bootstrap.

Builds the store backends, upstream client, push transport and Coordinator
once at startup. The store backend is chosen by RELAY_STORE_BACKEND.
"""

from __future__ import annotations

import logging

from relay.prompts import PromptBuilder
from relay.upstream import UpstreamClient
from relay.coordinator import RelayCoordinator
from relay.stores import ConnectionSessionStore
from relay.handlers.connections import ConnectionHandler
from relay.transport.websocket import WebSocketPushTransport
from relay.config.stores import RELAY_STORE_BACKEND, RELAY_DEV_CREDENTIALS

from .dependencies import RuntimeDeps

logger = logging.getLogger(__name__)


def build_stores(backend: str = RELAY_STORE_BACKEND):
    """Return (identity resolver, quota store, session backend) for ``backend``."""
    if backend == "dynamodb":
        from relay.stores.dynamodb import build_dynamodb_stores  # noqa: PLC0415

        return build_dynamodb_stores()
    if backend == "memory":
        from relay.stores.memory import build_memory_stores  # noqa: PLC0415

        return build_memory_stores(RELAY_DEV_CREDENTIALS)
    raise RuntimeError(f"Unsupported store backend: {backend!r}")


def build_runtime_deps(
    *,
    backend: str = RELAY_STORE_BACKEND,
    upstream: UpstreamClient | None = None,
) -> RuntimeDeps:
    """Build runtime dependencies eagerly for the configured store backend."""
    identity_resolver, quota_store, session_backend = build_stores(backend)
    upstream = upstream if upstream is not None else UpstreamClient()
    transport = WebSocketPushTransport()
    coordinator = RelayCoordinator(
        identity_resolver=identity_resolver,
        quota_store=quota_store,
        sessions=ConnectionSessionStore(session_backend),
        transport=transport,
        upstream=upstream,
        prompt_builder=PromptBuilder(),
    )
    logger.info("runtime ready: store_backend=%s upstream=%s", backend, upstream.url)
    return RuntimeDeps(
        connections=ConnectionHandler(),
        transport=transport,
        coordinator=coordinator,
        upstream=upstream,
        store_backend=backend,
    )


__all__ = ["build_stores", "build_runtime_deps"]
