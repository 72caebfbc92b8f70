"""Endpoint tests driving /ws through the FastAPI test client."""

from __future__ import annotations

import pytest
from fastapi import WebSocketDisconnect
from fastapi.testclient import TestClient

from relay.server import create_app
from relay.runtime import RuntimeDeps
from relay.prompts import PromptBuilder
from relay.coordinator import RelayCoordinator
from relay.stores import ConnectionSessionStore
from relay.handlers import ConnectionHandler
from relay.transport import WebSocketPushTransport
from relay.stores.memory import MemoryQuotaStore, MemorySessionBackend, MemoryIdentityResolver
from tests.helpers.fakes import MESSAGE_STOP, TEMPLATE_ENV, LineUpstream, delta, event_lines, trip_request


def _deps(upstream: LineUpstream, *, max_connections: int = 4, remaining: int = 1):
    transport = WebSocketPushTransport()
    quota = MemoryQuotaStore({"u1": remaining})
    sessions = MemorySessionBackend()
    coordinator = RelayCoordinator(
        identity_resolver=MemoryIdentityResolver({"key-1": "u1"}),
        quota_store=quota,
        sessions=ConnectionSessionStore(sessions),
        transport=transport,
        upstream=upstream,
        prompt_builder=PromptBuilder(TEMPLATE_ENV),
        relay_timeout_s=5.0,
        frame_format="json",
    )
    deps = RuntimeDeps(
        connections=ConnectionHandler(max_connections=max_connections, acquire_timeout=0.05),
        transport=transport,
        coordinator=coordinator,
        upstream=upstream,
    )
    return deps, quota, sessions


def test_relay_over_websocket_streams_tokens_then_closes() -> None:
    upstream = LineUpstream(event_lines(delta("Hello"), delta(" world"), MESSAGE_STOP))
    deps, quota, sessions = _deps(upstream)

    with TestClient(create_app(deps)) as client:
        with client.websocket_connect("/ws", subprotocols=["key-1"]) as ws:
            assert ws.accepted_subprotocol == "key-1"
            ws.send_text(trip_request())

            frames = [ws.receive_json() for _ in range(3)]
            with pytest.raises(WebSocketDisconnect) as exc_info:
                ws.receive_text()

        assert frames == [
            {"type": "token", "text": "Hello"},
            {"type": "token", "text": " world"},
            {"type": "done"},
        ]
        assert exc_info.value.code == 1000
        assert quota.remaining("u1") == 0
        assert len(sessions) == 0
        assert len(deps.transport) == 0
        assert deps.connections.active == 0

    assert upstream.closed


def test_connection_without_credential_gets_error_then_policy_close() -> None:
    deps, _, sessions = _deps(LineUpstream())

    with TestClient(create_app(deps)) as client:
        with client.websocket_connect("/ws") as ws:
            frame = ws.receive_json()
            with pytest.raises(WebSocketDisconnect) as exc_info:
                ws.receive_text()

    assert frame["type"] == "error"
    assert frame["error_code"] == "authentication_required"
    assert exc_info.value.code == 1008
    assert len(sessions) == 0


def test_ping_and_end_control_frames() -> None:
    deps, quota, sessions = _deps(LineUpstream())

    with TestClient(create_app(deps)) as client:
        with client.websocket_connect("/ws?api_key=key-1") as ws:
            ws.send_text("__PING__")
            assert ws.receive_json() == {"type": "pong"}

            ws.send_text('{"type": "end"}')
            assert ws.receive_json() == {"type": "connection_closed", "reason": "client_request"}
            with pytest.raises(WebSocketDisconnect):
                ws.receive_text()

    assert quota.remaining("u1") == 1
    assert len(sessions) == 0


def test_connections_over_capacity_are_rejected() -> None:
    deps, _, _ = _deps(LineUpstream(), max_connections=1)

    with TestClient(create_app(deps)) as client:
        with client.websocket_connect("/ws", subprotocols=["key-1"]) as first:
            first.send_text("__PING__")
            assert first.receive_json() == {"type": "pong"}

            with client.websocket_connect("/ws", subprotocols=["key-1"]) as second:
                frame = second.receive_json()
                with pytest.raises(WebSocketDisconnect) as exc_info:
                    second.receive_text()

    assert frame["error_code"] == "server_at_capacity"
    assert frame["capacity"]["max"] == 1
    assert exc_info.value.code == 1013


def test_health_endpoints() -> None:
    deps, _, _ = _deps(LineUpstream())

    with TestClient(create_app(deps)) as client:
        assert client.get("/").json() == {"status": "ok"}
        body = client.get("/healthz").json()
        assert client.get("/favicon.ico").status_code == 204

    assert body["status"] == "ok"
    assert body["store_backend"] == "memory"
    assert body["connections"]["max"] == 4
