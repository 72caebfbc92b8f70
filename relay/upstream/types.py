"""Values exchanged with the upstream streaming endpoint."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class Message:
    role: str
    content: str


@dataclass(frozen=True, slots=True)
class RelayRequest:
    """The rendered prompt payload for one relay; never persisted."""

    model: str
    max_tokens: int
    system: str
    messages: tuple[Message, ...] = field(default_factory=tuple)
    stream: bool = True

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": [{"role": m.role, "content": m.content} for m in self.messages],
            "stream": self.stream,
        }
        if self.system:
            payload["system"] = self.system
        return payload


@dataclass(frozen=True, slots=True)
class TextIncrement:
    """One ordered fragment of generated text."""

    text: str


@dataclass(frozen=True, slots=True)
class StreamDone:
    """Terminal marker: the upstream sent its explicit completion event."""


STREAM_DONE = StreamDone()

StreamItem = TextIncrement | StreamDone


__all__ = [
    "Message",
    "RelayRequest",
    "TextIncrement",
    "StreamDone",
    "STREAM_DONE",
    "StreamItem",
]
