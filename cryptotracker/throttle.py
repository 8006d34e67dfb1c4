"""Minimum spacing between outbound requests."""

import asyncio
import logging
import time
import typing as t

logger = logging.getLogger(__name__)


class RequestThrottle:  # pylint: disable=too-few-public-methods
    """Grant at most one request per ``min_interval`` seconds.

    Acquisitions are serialized, so callers from independent flows (paging,
    refresh, search) are spaced against each other as well.

    :param min_interval: Minimum seconds between two granted acquisitions.
    :param clock: Monotonic clock (injectable for tests).
    :param sleep: Async sleep (injectable for tests).
    """

    def __init__(
        self,
        min_interval: float,
        clock: t.Callable[[], float] = time.monotonic,
        sleep: t.Callable[[float], t.Awaitable[t.Any]] = asyncio.sleep,
    ) -> None:
        self.min_interval = max(0.0, min_interval)
        self._clock = clock
        self._sleep = sleep
        self._lock = asyncio.Lock()
        self.last_request_at: float | None = None

    async def acquire(self) -> None:
        """Wait for the next free slot and claim it."""
        async with self._lock:
            if self.last_request_at is not None:
                wait = self.last_request_at + self.min_interval - self._clock()
                if wait > 0:
                    logger.debug("[THROTTLE] waiting %.3fs", wait)
                    await self._sleep(wait)
            self.last_request_at = self._clock()
