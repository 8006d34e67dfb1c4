"""Top-level orchestration of paging, source switching and search."""

import asyncio
import logging
from dataclasses import dataclass

import httpx

from . import config
from .adapters import SourceAdapter, get_adapter_names, make_adapter
from .cache import ResultCache, page_key
from .errors import TransientNetworkError
from .fetcher import RetryingFetcher
from .render import LoggingRenderer, Renderer
from .schemas import Asset
from .search import SearchCoordinator
from .throttle import RequestThrottle

logger = logging.getLogger(__name__)


@dataclass
class FetchState:
    """Paging state owned by one :class:`TrackerController`."""

    selected_source: str
    current_page: int = 1
    is_loading: bool = False


class TrackerController:
    """Hold the accumulated asset list and drive every fetch flow.

    ``load_more``, ``change_source`` and ``refresh`` share the
    ``is_loading`` guard: a call that arrives while one of them is in
    flight is dropped and returns False.

    A source change is committed only after page 1 of the new source was
    fetched; on failure the previous source and list stay in place.

    :param fetcher: Fetcher shared by every flow.
    :param cache: Cache shared by the page and search flows.
    :param renderer: Render collaborator.
    :param source: Initially selected source id.
    :param debounce: Search debounce window in seconds.
    :param min_query_chars: Shortest query that triggers a search request.
    """

    def __init__(  # pylint: disable=too-many-arguments
        self,
        fetcher: RetryingFetcher,
        cache: ResultCache,
        renderer: Renderer,
        *,
        source: str = config.DEFAULT_SOURCE,
        debounce: float = config.SEARCH_DEBOUNCE_MS / 1000.0,
        min_query_chars: int = config.SEARCH_MIN_CHARS,
    ) -> None:
        self.fetcher = fetcher
        self.cache = cache
        self.renderer = renderer
        self.adapter: SourceAdapter = make_adapter(source)
        self.state = FetchState(selected_source=self.adapter.name)
        self.assets: list[Asset] = []
        self.search_coordinator = SearchCoordinator(
            fetcher,
            cache,
            renderer,
            adapter_for=lambda: self.adapter,
            restore=self._render_pages,
            debounce=debounce,
            min_chars=min_query_chars,
        )

    @staticmethod
    def available_sources() -> list[str]:
        """Get the selectable source ids.

        :return: Sorted source ids.
        """
        return get_adapter_names()

    @property
    def loaded_pages(self) -> int:
        """Number of pages accumulated for the selected source.

        :return: Page count.
        """
        return self.state.current_page - 1

    def view(self) -> list[Asset]:
        """Assets of the accumulated list, in fetch order.

        :return: A copy of the accumulated list.
        """
        return list(self.assets)

    def _render_pages(self) -> None:
        if self.assets:
            self.renderer.render(self.view())
        else:
            self.renderer.render_empty()

    async def _fetch_page(self, adapter: SourceAdapter, page: int) -> list[Asset]:
        key = page_key(adapter.name, page)
        entry = self.cache.get_valid(key)
        if entry is not None:
            return list(entry.payload)
        raw = await self.fetcher.fetch(adapter.build_markets_url(page))
        assets = adapter.parse_markets_page(raw)
        self.cache.put(key, assets)
        logger.info(
            "[TRACKER] %s page=%d mapped=%d",
            adapter.name,
            page,
            len(assets),
        )
        return assets

    def _begin(self, flow: str) -> bool:
        if self.state.is_loading:
            logger.debug("[TRACKER] %s dropped: fetch in flight", flow)
            return False
        self.state.is_loading = True
        return True

    def _fail(self, flow: str, error: TransientNetworkError) -> None:
        logger.warning("[TRACKER] %s failed: %s", flow, error)
        self.renderer.render_error(str(error))

    async def load_more(self) -> bool:
        """Append the next page of the selected source.

        :return: True if a page was appended.
        """
        if not self._begin("load_more"):
            return False
        page = self.state.current_page
        try:
            assets = await self._fetch_page(self.adapter, page)
        except TransientNetworkError as e:
            self._fail("load_more", e)
            return False
        finally:
            self.state.is_loading = False

        self.assets.extend(assets)
        self.state.current_page = page + 1
        if not self.search_coordinator.active:
            self._render_pages()
        return True

    async def change_source(self, source: str) -> bool:
        """Switch to another source and load its first page.

        :param source: Source id to switch to.
        :return: True if the switch was committed.
        :raises KeyError: If the source id is unknown.
        """
        adapter = make_adapter(source)
        if adapter.name == self.state.selected_source:
            logger.debug("[TRACKER] %s already selected", adapter.name)
            return False
        if not self._begin("change_source"):
            return False
        try:
            assets = await self._fetch_page(adapter, 1)
        except TransientNetworkError as e:
            self._fail("change_source", e)
            return False
        finally:
            self.state.is_loading = False

        logger.info(
            "[TRACKER] source %s -> %s",
            self.state.selected_source,
            adapter.name,
        )
        self.search_coordinator.cancel()
        self.adapter = adapter
        self.state.selected_source = adapter.name
        self.assets = list(assets)
        self.state.current_page = 2
        self._render_pages()
        return True

    async def refresh(self) -> bool:
        """Reload every accumulated page of the selected source.

        Fresh cache entries are reused. The list is replaced only when all
        pages loaded; with nothing loaded yet this is the initial load.

        :return: True if the list was reloaded.
        """
        pages = self.loaded_pages
        if pages < 1:
            return await self.load_more()
        if not self._begin("refresh"):
            return False
        adapter = self.adapter
        try:
            reloaded: list[Asset] = []
            for page in range(1, pages + 1):
                reloaded.extend(await self._fetch_page(adapter, page))
        except TransientNetworkError as e:
            self._fail("refresh", e)
            return False
        finally:
            self.state.is_loading = False

        self.assets = reloaded
        if not self.search_coordinator.active:
            self._render_pages()
        return True

    async def run_auto_refresh(self, interval: float) -> None:
        """Call :meth:`refresh` every ``interval`` seconds until cancelled.

        :param interval: Seconds between refreshes.
        """
        while True:
            await asyncio.sleep(interval)
            await self.refresh()

    def on_search_input(self, query: str) -> None:
        """Feed one search keystroke (debounced).

        :param query: Current text of the search input.
        """
        self.search_coordinator.on_input(query)

    async def search(self, query: str) -> list[Asset] | None:
        """Search immediately; an empty query restores the paged list.

        :param query: Search text.
        :return: Rendered search results, or None if none were rendered.
        """
        return await self.search_coordinator.search_now(query)

    async def aclose(self) -> None:
        """Cancel any search and release the HTTP client."""
        self.search_coordinator.cancel()
        await self.fetcher.aclose()


def build_tracker(
    renderer: Renderer | None = None,
    client: httpx.AsyncClient | None = None,
    source: str = config.DEFAULT_SOURCE,
) -> TrackerController:
    """Wire one throttle, fetcher and cache into a controller.

    :param renderer: Render collaborator, logs when omitted.
    :param client: Optional ``httpx.AsyncClient`` (tests inject a mock).
    :param source: Initially selected source id.
    :return: A ready controller.
    """
    throttle = RequestThrottle(config.MIN_REQUEST_INTERVAL_MS / 1000.0)
    fetcher = RetryingFetcher(throttle, client)
    return TrackerController(
        fetcher,
        ResultCache(config.CACHE_TTL_SECONDS),
        renderer or LoggingRenderer(),
        source=source,
    )
