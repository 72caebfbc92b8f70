"""Closed set of upstream stream events.

Each ``data:`` line of the stream is decoded exactly once into one of the
variants below, keyed by the most recent ``event:`` tag. Informational
variants carry nothing the relay needs, so they are decoded leniently: a
payload missing its expected fields still yields the variant instead of an
error.

    message_start        -> MessageStart
    content_block_start  -> ContentBlockStart
    ping                 -> Ping
    content_block_delta  -> ContentBlockDelta(text)   text is None when absent
    content_block_stop   -> ContentBlockStop
    message_delta        -> MessageDelta(stop_reason)
    message_stop         -> MessageStop
    anything else        -> Unknown(name)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class MessageStart:
    pass


@dataclass(frozen=True, slots=True)
class ContentBlockStart:
    index: int | None = None


@dataclass(frozen=True, slots=True)
class Ping:
    pass


@dataclass(frozen=True, slots=True)
class ContentBlockDelta:
    text: str | None = None


@dataclass(frozen=True, slots=True)
class ContentBlockStop:
    index: int | None = None


@dataclass(frozen=True, slots=True)
class MessageDelta:
    stop_reason: str | None = None


@dataclass(frozen=True, slots=True)
class MessageStop:
    pass


@dataclass(frozen=True, slots=True)
class Unknown:
    name: str


StreamEvent = (
    MessageStart
    | ContentBlockStart
    | Ping
    | ContentBlockDelta
    | ContentBlockStop
    | MessageDelta
    | MessageStop
    | Unknown
)


def _index(payload: Any) -> int | None:
    if isinstance(payload, dict):
        value = payload.get("index")
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return None


def _delta_text(payload: Any) -> str | None:
    if not isinstance(payload, dict):
        return None
    delta = payload.get("delta")
    if not isinstance(delta, dict):
        return None
    text = delta.get("text")
    return text if isinstance(text, str) else None


def _stop_reason(payload: Any) -> str | None:
    if not isinstance(payload, dict):
        return None
    delta = payload.get("delta")
    if not isinstance(delta, dict):
        return None
    reason = delta.get("stop_reason")
    return reason if isinstance(reason, str) else None


def decode_event(name: str, payload: Any) -> StreamEvent:
    """Map an event tag and its decoded JSON payload to a variant."""
    if name == "message_start":
        return MessageStart()
    if name == "content_block_start":
        return ContentBlockStart(index=_index(payload))
    if name == "ping":
        return Ping()
    if name == "content_block_delta":
        return ContentBlockDelta(text=_delta_text(payload))
    if name == "content_block_stop":
        return ContentBlockStop(index=_index(payload))
    if name == "message_delta":
        return MessageDelta(stop_reason=_stop_reason(payload))
    if name == "message_stop":
        return MessageStop()
    return Unknown(name=name)


__all__ = [
    "MessageStart",
    "ContentBlockStart",
    "Ping",
    "ContentBlockDelta",
    "ContentBlockStop",
    "MessageDelta",
    "MessageStop",
    "Unknown",
    "StreamEvent",
    "decode_event",
]
