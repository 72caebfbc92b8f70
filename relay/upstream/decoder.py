"""Event-stream decoding for the upstream response body.

The body is a sequence of lines forming tagged blocks::

    event: content_block_delta
    data: {"type": "content_block_delta", "delta": {"text": "Hel"}}

Blocks are separated by blank lines and lines starting with ``:`` are
comments. Every ``data:`` line is decoded against the most recent ``event:``
tag. The resulting sequence is lazy, finite and cannot be restarted.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterable, AsyncIterator

import orjson

from ..errors import UpstreamProtocolFailure
from .types import STREAM_DONE, StreamItem, TextIncrement
from .events import Unknown, StreamEvent, MessageStop, ContentBlockDelta, decode_event

logger = logging.getLogger(__name__)

_EVENT_PREFIX = "event:"
_DATA_PREFIX = "data:"


def _field_value(line: str, prefix: str) -> str:
    value = line[len(prefix):]
    # a single optional space after the colon belongs to the framing
    if value.startswith(" "):
        value = value[1:]
    return value


async def iter_stream_events(lines: AsyncIterable[str]) -> AsyncIterator[StreamEvent]:
    """Yield one decoded event per ``data:`` line.

    Raises:
        UpstreamProtocolFailure: A data line does not hold valid JSON.
    """
    event_name = ""
    async for raw_line in lines:
        line = raw_line.rstrip("\r\n")
        if not line:
            event_name = ""
            continue
        if line.startswith(":"):
            continue
        if line.startswith(_EVENT_PREFIX):
            event_name = _field_value(line, _EVENT_PREFIX).strip()
            continue
        if not line.startswith(_DATA_PREFIX):
            logger.debug("ignoring unrecognized stream line: %.80s", line)
            continue

        data = _field_value(line, _DATA_PREFIX)
        try:
            payload = orjson.loads(data)
        except orjson.JSONDecodeError as exc:
            raise UpstreamProtocolFailure(
                f"undecodable payload for event {event_name or '<untagged>'!r}: {exc}"
            ) from exc
        yield decode_event(event_name, payload)


async def iter_increments(lines: AsyncIterable[str]) -> AsyncIterator[StreamItem]:
    """Yield text increments in order, then ``STREAM_DONE`` on ``message_stop``.

    Nothing is read past the terminal event. A body that ends before it is a
    protocol failure, never a successful completion.
    """
    async for event in iter_stream_events(lines):
        if isinstance(event, ContentBlockDelta):
            if event.text is None:
                logger.debug("skipping content delta without text")
                continue
            yield TextIncrement(event.text)
        elif isinstance(event, MessageStop):
            yield STREAM_DONE
            return
        elif isinstance(event, Unknown):
            logger.info("ignoring unknown stream event %r", event.name)

    raise UpstreamProtocolFailure("stream ended without message_stop")


__all__ = ["iter_stream_events", "iter_increments"]
