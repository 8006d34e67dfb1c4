"""Cooperative cancellation for in-flight fetches."""

import asyncio
import typing as t

from .errors import FetchCancelled

T = t.TypeVar("T")


class CancellationToken:
    """One-shot signal checked by long-running fetch tasks.

    A token starts live and can be cancelled once; every later check on it
    raises :class:`FetchCancelled`.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        """Whether :meth:`cancel` has been called.

        :return: True once cancelled.
        """
        return self._event.is_set()

    def cancel(self) -> None:
        """Signal cancellation to every task holding this token."""
        self._event.set()

    def raise_if_cancelled(self) -> None:
        """Raise if the token has been cancelled.

        :raises FetchCancelled: When cancelled.
        """
        if self._event.is_set():
            raise FetchCancelled("operation cancelled")

    async def run(self, aw: t.Awaitable[T]) -> T:
        """Await ``aw`` unless the token fires first.

        :param aw: Awaitable to race against the token.
        :return: The awaitable's result.
        :raises FetchCancelled: When the token fires first or while the
            awaitable completes.
        """
        if self._event.is_set():
            if asyncio.iscoroutine(aw):
                aw.close()
            raise FetchCancelled("operation cancelled")
        task = asyncio.ensure_future(aw)
        waiter = asyncio.ensure_future(self._event.wait())
        try:
            done, _ = await asyncio.wait(
                {task, waiter},
                return_when=asyncio.FIRST_COMPLETED,
            )
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            waiter.cancel()
        if task not in done:
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
        self.raise_if_cancelled()
        return task.result()

    async def sleep(
        self,
        delay: float,
        sleep: t.Callable[[float], t.Awaitable[t.Any]] = asyncio.sleep,
    ) -> None:
        """Sleep for ``delay`` seconds, waking early on cancellation.

        :param delay: Seconds to wait.
        :param sleep: Sleep implementation (injectable for tests).
        :raises FetchCancelled: When cancelled before or during the wait.
        """
        await self.run(sleep(delay))
