"""Unit tests for websocket error payloads and rejection."""

from __future__ import annotations

import asyncio

import orjson

from relay.handlers.errors import send_error, reject_connection, build_error_payload


class _FakeWebSocket:
    def __init__(self) -> None:
        self.events: list[tuple] = []

    async def accept(self, subprotocol: str | None = None) -> None:
        self.events.append(("accept", subprotocol))

    async def send_text(self, data: str) -> None:
        self.events.append(("send", orjson.loads(data)))

    async def close(self, code: int = 1000) -> None:
        self.events.append(("close", code))


def test_build_error_payload_basic() -> None:
    result = build_error_payload(error_code="err_code", message="something went wrong")
    assert result == {"type": "error", "error_code": "err_code", "message": "something went wrong"}


def test_build_error_payload_with_extra() -> None:
    result = build_error_payload(error_code="err", message="msg", extra={"capacity": {"max": 1}})
    assert result["capacity"] == {"max": 1}


def test_send_error_serializes_payload() -> None:
    ws = _FakeWebSocket()
    asyncio.run(send_error(ws, error_code="internal_error", message="boom"))
    assert ws.events == [("send", {"type": "error", "error_code": "internal_error", "message": "boom"})]


def test_reject_connection_accepts_sends_then_closes() -> None:
    ws = _FakeWebSocket()
    asyncio.run(
        reject_connection(
            ws,
            error_code="server_at_capacity",
            message="full",
            close_code=1013,
            subprotocol="key-1",
        )
    )
    assert [event[0] for event in ws.events] == ["accept", "send", "close"]
    assert ws.events[0] == ("accept", "key-1")
    assert ws.events[-1] == ("close", 1013)
