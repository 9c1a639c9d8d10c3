"""Sequential request throttle for the tracking provider."""

from __future__ import annotations

import asyncio
import time
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager


class RequestThrottle:
    """Allows one outbound request at a time with a fixed gap between them.

    A request may only start once the previous one has finished and
    ``interval`` seconds have passed since then, whether it succeeded
    or failed.
    """

    def __init__(
        self,
        interval: float,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.interval = interval
        self._clock = clock
        self._sleep = sleep
        self._lock = asyncio.Lock()
        self._last_finished: float | None = None
        self.in_flight = 0

    def delay_needed(self) -> float:
        """Seconds to wait before the next request may start."""
        if self._last_finished is None:
            return 0.0
        elapsed = self._clock() - self._last_finished
        return max(0.0, self.interval - elapsed)

    @asynccontextmanager
    async def slot(self) -> AsyncIterator[None]:
        async with self._lock:
            delay = self.delay_needed()
            if delay > 0:
                await self._sleep(delay)
            self.in_flight += 1
            try:
                yield
            finally:
                self.in_flight -= 1
                self._last_finished = self._clock()
