"""Per-connection idle enforcement.

Each accepted socket gets a WebSocketLifecycle whose watchdog closes the
connection once no client frame has arrived for WS_IDLE_TIMEOUT_S. While a
relay is streaming the handler is parked inside the Coordinator and does not
touch the lifecycle, so the handler pauses the watchdog around each relay;
the relay has its own deadline.

Usage:
    lifecycle = WebSocketLifecycle(websocket)
    lifecycle.start()

    lifecycle.touch()        # on every inbound frame
    with lifecycle.paused(): # around a relay
        ...

    await lifecycle.stop()
"""

from __future__ import annotations

import time
import asyncio
import logging
import contextlib
from collections.abc import Iterator

from fastapi import WebSocket

from ..config.websocket import (
    WS_IDLE_TIMEOUT_S,
    WS_WATCHDOG_TICK_S,
    WS_CLOSE_IDLE_CODE,
    WS_CLOSE_IDLE_REASON,
)

logger = logging.getLogger(__name__)


class WebSocketLifecycle:
    """Tracks activity timestamps and enforces idle timeouts."""

    def __init__(
        self,
        websocket: WebSocket,
        idle_timeout_s: float | None = None,
        watchdog_tick_s: float | None = None,
        idle_close_code: int | None = None,
    ):
        self._ws = websocket
        self._idle_timeout_s = float(idle_timeout_s or WS_IDLE_TIMEOUT_S)
        self._watchdog_tick_s = float(watchdog_tick_s or WS_WATCHDOG_TICK_S)
        self._idle_close_code = idle_close_code if idle_close_code is not None else WS_CLOSE_IDLE_CODE
        self._idle_close_reason = WS_CLOSE_IDLE_REASON
        self._last_activity = time.monotonic()
        self._paused = 0
        self._timed_out = False
        self._stop_event = asyncio.Event()
        self._task: asyncio.Task | None = None

    def touch(self) -> None:
        """Record recent activity (resets idle countdown)."""
        self._last_activity = time.monotonic()

    def idle_timed_out(self) -> bool:
        return self._timed_out

    @contextlib.contextmanager
    def paused(self) -> Iterator[None]:
        """Suspend idle enforcement for the duration of the block."""
        self._paused += 1
        try:
            yield
        finally:
            self._paused -= 1
            self.touch()

    def start(self) -> asyncio.Task:
        """Start the watchdog task (idempotent)."""
        if self._task is None:
            self._task = asyncio.create_task(self._watchdog_loop())
        return self._task

    async def stop(self) -> None:
        """Stop the watchdog task and wait for it to finish."""
        self._stop_event.set()
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError, Exception):
            await self._task
        self._task = None

    async def _watchdog_loop(self) -> None:
        try:
            while not self._stop_event.is_set():
                await asyncio.sleep(self._watchdog_tick_s)
                if self._stop_event.is_set():
                    break
                if self._paused:
                    continue
                if (time.monotonic() - self._last_activity) >= self._idle_timeout_s:
                    logger.info("WebSocket idle timeout reached; closing connection")
                    self._timed_out = True
                    self._stop_event.set()
                    await self._close_ws()
                    break
        except asyncio.CancelledError:
            pass
        except Exception:
            logger.debug("Idle watchdog exiting due to unexpected error", exc_info=True)

    async def _close_ws(self) -> None:
        with contextlib.suppress(Exception):
            await self._ws.close(code=self._idle_close_code, reason=self._idle_close_reason)


__all__ = ["WebSocketLifecycle"]
