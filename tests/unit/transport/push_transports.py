"""Unit tests for the WebSocket and API Gateway push transports."""

from __future__ import annotations

import asyncio

import pytest
from botocore.exceptions import ClientError
from fastapi import WebSocketDisconnect

from relay.errors import ClientSendFailure
from relay.transport import WebSocketPushTransport
from relay.transport.apigateway import ApiGatewayPushTransport, management_endpoint


class _FakeWebSocket:
    def __init__(self, *, send_error: Exception | None = None, close_error: Exception | None = None) -> None:
        self.sent: list[str] = []
        self.close_codes: list[int] = []
        self.send_error = send_error
        self.close_error = close_error

    async def send_text(self, data: str) -> None:
        if self.send_error is not None:
            raise self.send_error
        self.sent.append(data)

    async def close(self, code: int = 1000) -> None:
        if self.close_error is not None:
            raise self.close_error
        self.close_codes.append(code)


def test_websocket_transport_sends_and_closes_once() -> None:
    async def _run() -> None:
        transport = WebSocketPushTransport()
        ws = _FakeWebSocket()
        transport.register("c1", ws)

        await transport.send("c1", "hello")
        await transport.close("c1", code=1008)
        await transport.close("c1", code=1000)

        assert ws.sent == ["hello"]
        assert ws.close_codes == [1008]
        assert transport.is_closed("c1")
        with pytest.raises(ClientSendFailure):
            await transport.send("c1", "late")

        transport.unregister("c1")
        assert len(transport) == 0

    asyncio.run(_run())


def test_websocket_transport_unknown_connection() -> None:
    async def _run() -> None:
        transport = WebSocketPushTransport()
        with pytest.raises(ClientSendFailure):
            await transport.send("nope", "x")
        with pytest.raises(ClientSendFailure):
            await transport.close("nope")

    asyncio.run(_run())


def test_websocket_transport_wraps_send_errors() -> None:
    async def _run() -> None:
        transport = WebSocketPushTransport()
        transport.register("c1", _FakeWebSocket(send_error=WebSocketDisconnect(code=1001)))
        with pytest.raises(ClientSendFailure):
            await transport.send("c1", "x")

    asyncio.run(_run())


def test_websocket_transport_close_ignores_expected_disconnect() -> None:
    async def _run() -> None:
        transport = WebSocketPushTransport()
        transport.register("c1", _FakeWebSocket(close_error=RuntimeError('Cannot call "send" once a close message has been sent.')))
        await transport.close("c1")

        transport.register("c2", _FakeWebSocket(close_error=RuntimeError("boom")))
        with pytest.raises(ClientSendFailure):
            await transport.close("c2")

    asyncio.run(_run())


class _FakeManagementClient:
    def __init__(self, error_code: str | None = None) -> None:
        self.posts: list[tuple[str, bytes]] = []
        self.deletes: list[str] = []
        self.error_code = error_code

    def _maybe_fail(self, operation: str) -> None:
        if self.error_code is not None:
            raise ClientError({"Error": {"Code": self.error_code, "Message": "x"}}, operation)

    def post_to_connection(self, *, ConnectionId: str, Data: bytes) -> dict:  # noqa: N803
        self._maybe_fail("PostToConnection")
        self.posts.append((ConnectionId, Data))
        return {}

    def delete_connection(self, *, ConnectionId: str) -> dict:  # noqa: N803
        self._maybe_fail("DeleteConnection")
        self.deletes.append(ConnectionId)
        return {}


def test_management_endpoint() -> None:
    assert management_endpoint("abc.execute-api.us-east-1.amazonaws.com", "prod") == (
        "https://abc.execute-api.us-east-1.amazonaws.com/prod"
    )


def test_apigateway_transport_posts_utf8_and_deletes() -> None:
    async def _run() -> None:
        client = _FakeManagementClient()
        transport = ApiGatewayPushTransport(client)

        await transport.send("c1", "héllo")
        await transport.close("c1", code=1011)

        assert client.posts == [("c1", "héllo".encode())]
        assert client.deletes == ["c1"]

    asyncio.run(_run())


def test_apigateway_transport_gone_connection() -> None:
    async def _run() -> None:
        transport = ApiGatewayPushTransport(_FakeManagementClient(error_code="GoneException"))

        with pytest.raises(ClientSendFailure):
            await transport.send("c1", "x")
        await transport.close("c1")

    asyncio.run(_run())


def test_apigateway_transport_close_failure() -> None:
    async def _run() -> None:
        transport = ApiGatewayPushTransport(_FakeManagementClient(error_code="ForbiddenException"))
        with pytest.raises(ClientSendFailure):
            await transport.close("c1")

    asyncio.run(_run())
