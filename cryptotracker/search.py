"""Debounced, cancellable search against the selected source."""

import asyncio
import enum
import logging
import typing as t

from . import config
from .adapters import SourceAdapter
from .cache import ResultCache, search_key
from .cancel import CancellationToken
from .errors import FetchCancelled, TransientNetworkError
from .fetcher import RetryingFetcher
from .render import Renderer
from .schemas import Asset

logger = logging.getLogger(__name__)


class SearchState(str, enum.Enum):
    """Phase of the current typing session."""

    IDLE = "idle"
    DEBOUNCING = "debouncing"
    SEARCHING = "searching"


class SearchCoordinator:  # pylint: disable=too-many-instance-attributes
    """Turn keystrokes into at most one live search.

    A keystroke restarts the debounce timer. When the timer fires, the
    previous in-flight search is cancelled through its token and a new one
    starts. A cancelled search never writes the cache and never renders.
    Clearing the query restores the accumulated list without any request.

    :param fetcher: Fetcher shared with the page flow.
    :param cache: Cache shared with the page flow.
    :param renderer: Render collaborator.
    :param adapter_for: Returns the adapter of the selected source.
    :param restore: Renders the accumulated list.
    :param debounce: Debounce window in seconds.
    :param min_chars: Shortest trimmed query that triggers a request.
    """

    def __init__(  # pylint: disable=too-many-arguments
        self,
        fetcher: RetryingFetcher,
        cache: ResultCache,
        renderer: Renderer,
        adapter_for: t.Callable[[], SourceAdapter],
        restore: t.Callable[[], None],
        *,
        debounce: float = config.SEARCH_DEBOUNCE_MS / 1000.0,
        min_chars: int = config.SEARCH_MIN_CHARS,
    ) -> None:
        self._fetcher = fetcher
        self._cache = cache
        self._renderer = renderer
        self._adapter_for = adapter_for
        self._restore = restore
        self.debounce = debounce
        self.min_chars = max(1, min_chars)
        self.state = SearchState.IDLE
        self.active_query: str | None = None
        self._pending: asyncio.Task | None = None
        self._token: CancellationToken | None = None
        self._tasks: set[asyncio.Task] = set()

    @property
    def active(self) -> bool:
        """Whether search results currently own the view.

        :return: True while a query's outcome is displayed.
        """
        return self.active_query is not None

    def _cancel_pending(self) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None

    def _cancel_inflight(self) -> None:
        if self._token is not None:
            self._token.cancel()
            self._token = None

    def on_input(self, query: str) -> None:
        """Handle one keystroke; must be called from the event loop.

        :param query: Full current text of the search input.
        """
        self._cancel_pending()
        text = (query or "").strip()
        if not text:
            self.clear()
            return
        self.state = SearchState.DEBOUNCING
        self._pending = asyncio.get_running_loop().create_task(
            self._debounced(text),
        )
        self._tasks.add(self._pending)
        self._pending.add_done_callback(self._tasks.discard)

    async def _debounced(self, text: str) -> None:
        await asyncio.sleep(self.debounce)
        self._pending = None
        await self.search_now(text)

    async def wait_idle(self) -> None:
        """Wait until every debounced search has run or been dropped."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def clear(self) -> None:
        """Drop the query and show the accumulated list again."""
        self.cancel()
        self._restore()

    def cancel(self) -> None:
        """Drop the pending timer and the in-flight search, if any."""
        self._cancel_pending()
        self._cancel_inflight()
        self.state = SearchState.IDLE
        self.active_query = None

    def _finish(self, token: CancellationToken, text: str) -> None:
        if self._token is token:
            self._token = None
        self.active_query = text
        if self._pending is None:
            self.state = SearchState.IDLE
        else:
            self.state = SearchState.DEBOUNCING

    async def search_now(self, query: str) -> list[Asset] | None:
        """Run a search immediately, superseding any in-flight one.

        :param query: Search text.
        :return: The rendered results, or None when nothing was rendered
            from a search (empty or short query, cancellation, failure).
        """
        text = (query or "").strip()
        if not text:
            self.clear()
            return None
        if len(text) < self.min_chars:
            logger.debug("[SEARCH] %r shorter than %d chars", text, self.min_chars)
            self._cancel_inflight()
            if self._pending is None:
                self.state = SearchState.IDLE
            return None

        self._cancel_inflight()
        token = CancellationToken()
        self._token = token
        self.state = SearchState.SEARCHING

        adapter = self._adapter_for()
        key = search_key(adapter.name, text)
        try:
            entry = self._cache.get_valid(key)
            if entry is not None:
                results = list(entry.payload)
            else:
                results = await adapter.search(self._fetcher, text, token)
                token.raise_if_cancelled()
                self._cache.put(key, results)
        except FetchCancelled:
            logger.debug("[SEARCH] %r superseded", text)
            return None
        except TransientNetworkError as e:
            if token.cancelled:
                return None
            self._finish(token, text)
            logger.warning("[SEARCH] %r failed: %s", text, e)
            self._renderer.render_error(str(e))
            return None

        self._finish(token, text)
        logger.info("[SEARCH] %s %r results=%d", adapter.name, text, len(results))
        if results:
            self._renderer.render(results)
        else:
            self._renderer.render_empty()
        return results
