"""Fire-and-forget persistence writes."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

logger = logging.getLogger(__name__)


class BackgroundWriter:
    """Runs persistence coroutines as detached tasks.

    Callers never wait for completion. Failures go to the log and are
    not retried; the next write for the same key re-sends full state.
    """

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def submit(
        self, coro: Coroutine[Any, Any, Any], *, description: str
    ) -> asyncio.Task[None]:
        """Schedule ``coro``; requires a running event loop."""
        task = asyncio.get_running_loop().create_task(
            self._run(coro, description)
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def drain(self) -> None:
        """Wait for every write scheduled so far, including ones they add."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    async def _run(
        self, coro: Coroutine[Any, Any, Any], description: str
    ) -> None:
        try:
            await coro
        except Exception:
            logger.exception("Persistence write failed: %s", description)
