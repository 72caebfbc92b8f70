"""asyncio task helpers."""

from __future__ import annotations

import asyncio
import logging
import contextlib

logger = logging.getLogger(__name__)


async def cancel_task(task: asyncio.Task | None) -> None:
    """Cancel an asyncio task and await its completion.

    Safely handles None tasks and already-completed tasks. The task's own
    cancellation or failure is not re-raised here.
    """
    if not task or task.done():
        return
    logger.debug("cancelling task %r", task)
    task.cancel()
    with contextlib.suppress(asyncio.CancelledError, Exception):
        await task


__all__ = ["cancel_task"]
