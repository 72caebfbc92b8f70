"""Upstream streaming client and event-stream decoder."""

from .client import UpstreamClient
from .events import StreamEvent, decode_event
from .decoder import iter_increments, iter_stream_events
from .types import STREAM_DONE, Message, StreamDone, StreamItem, RelayRequest, TextIncrement

__all__ = [
    "UpstreamClient",
    "StreamEvent",
    "decode_event",
    "iter_increments",
    "iter_stream_events",
    "Message",
    "RelayRequest",
    "TextIncrement",
    "StreamDone",
    "STREAM_DONE",
    "StreamItem",
]
