"""One-slot channel between the decoder task and the relay consumer.

The producer task drains the upstream stream and puts every increment into a
queue that holds a single item, so a slow client holds back the upstream read
instead of growing a buffer. The stream ends with exactly one terminal item:
``STREAM_DONE`` or a ``StreamFailure``. Closing the channel cancels and awaits
the producer, including one blocked on a full queue.
"""

from __future__ import annotations

import asyncio
import logging
import contextlib
from dataclasses import dataclass
from collections.abc import AsyncIterator

from ..utils import cancel_task
from ..errors import UpstreamProtocolFailure
from ..upstream.types import StreamDone, StreamItem

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StreamFailure:
    error: BaseException


ChannelItem = StreamItem | StreamFailure


class RelayChannel:
    def __init__(self) -> None:
        self._queue: asyncio.Queue[ChannelItem] = asyncio.Queue(maxsize=1)
        self._task: asyncio.Task | None = None

    @property
    def producer(self) -> asyncio.Task | None:
        return self._task

    def start(self, items: AsyncIterator[StreamItem]) -> asyncio.Task:
        if self._task is not None:
            raise RuntimeError("relay channel already started")
        self._task = asyncio.create_task(self._produce(items))
        return self._task

    async def _produce(self, items: AsyncIterator[StreamItem]) -> None:
        try:
            async with contextlib.aclosing(items):
                async for item in items:
                    await self._queue.put(item)
                    if isinstance(item, StreamDone):
                        return
            await self._queue.put(StreamFailure(UpstreamProtocolFailure("stream ended without message_stop")))
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.debug("relay producer failed: %s", exc)
            await self._queue.put(StreamFailure(exc))

    async def receive(self, timeout: float) -> ChannelItem:
        """Wait for the next item; raises ``TimeoutError`` after ``timeout`` seconds."""
        return await asyncio.wait_for(self._queue.get(), timeout=max(timeout, 0.0))

    async def aclose(self) -> None:
        await cancel_task(self._task)


__all__ = ["StreamFailure", "ChannelItem", "RelayChannel"]
