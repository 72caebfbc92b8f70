"""Control frame detection for the WebSocket handler."""

from __future__ import annotations

import orjson

from ..config.websocket import WS_END_SENTINEL, WS_PING_SENTINEL

CONTROL_TYPES = frozenset({"ping", "pong", "end"})


def parse_control_frame(raw: str) -> str | None:
    """Return ``ping`` / ``pong`` / ``end`` for control frames, None for relay requests."""

    text = (raw or "").strip()
    if text == WS_PING_SENTINEL:
        return "ping"
    if text == WS_END_SENTINEL:
        return "end"
    if not text.startswith("{"):
        return None

    try:
        data = orjson.loads(text)
    except orjson.JSONDecodeError:
        return None
    if not isinstance(data, dict):
        return None

    msg_type = data.get("type")
    if isinstance(msg_type, str) and msg_type.strip().lower() in CONTROL_TYPES:
        return msg_type.strip().lower()
    return None


__all__ = ["CONTROL_TYPES", "parse_control_frame"]
