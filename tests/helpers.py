"""Fakes shared by the test suite."""

import asyncio
import typing as t

import httpx

from cryptotracker.cache import ResultCache
from cryptotracker.controller import TrackerController
from cryptotracker.fetcher import RetryingFetcher
from cryptotracker.render import SnapshotRenderer
from cryptotracker.throttle import RequestThrottle

BITCOIN_IDS = [
    "bitcoin",
    "wrapped-bitcoin",
    "bitcoin-cash",
    "bitcoin-sv",
    "bitcoin-gold",
    "bitcoin-diamond",
    "bitcoin-avalanche",
]


def cg_row(i: int, **overrides: t.Any) -> dict:
    """Build one CoinGecko markets row.

    :param i: Row number used to derive values.
    :param overrides: Fields to replace.
    :return: Markets row.
    """
    row = {
        "id": f"coin-{i}",
        "name": f"Coin {i}",
        "symbol": f"c{i}",
        "current_price": 1.5 * i,
        "market_cap": 1000.0 * i,
        "total_volume": 10.0 * i,
        "image": f"https://img.example/{i}.png",
        "price_change_percentage_24h": -1.25 if i % 2 else 2.5,
    }
    row.update(overrides)
    return row


def cl_row(i: int, **overrides: t.Any) -> dict:
    """Build one CoinLore ticker row (numerics as strings).

    :param i: Row number used to derive values.
    :param overrides: Fields to replace.
    :return: Ticker row.
    """
    row = {
        "id": str(i),
        "name": f"Lore {i}",
        "symbol": f"L{i}",
        "nameid": f"lore-{i}",
        "price_usd": f"{2.0 * i:.2f}",
        "market_cap_usd": f"{500.0 * i:.2f}",
        "volume24": 5.0 * i,
        "percent_change_24h": "0.50",
    }
    row.update(overrides)
    return row


class FakeMarkets:
    """Route MockTransport requests to canned CoinGecko/CoinLore payloads.

    Routes are named ``coingecko:page:{n}``, ``coingecko:search:{q}``,
    ``coingecko:ids``, ``coinlore:page:{n}`` and ``coinlore:search:{q}``.

    :param rows_per_page: Rows returned for every page.
    """

    def __init__(self, rows_per_page: int = 3) -> None:
        self.rows_per_page = rows_per_page
        self.routes: list[str] = []
        self.requests: list[httpx.Request] = []
        self.fail: set[str] = set()
        self.gates: dict[str, asyncio.Event] = {}
        self.search_hits: dict[str, list[str]] = {"bitcoin": list(BITCOIN_IDS)}
        self.lore_hits: set[str] = {"bitcoin"}

    def calls(self, route: str) -> int:
        """Count requests made to ``route``.

        :param route: Route name.
        :return: Request count.
        """
        return self.routes.count(route)

    @staticmethod
    def route(request: httpx.Request) -> str:
        """Name the route of ``request``.

        :param request: Outgoing request.
        :return: Route name.
        """
        url = request.url
        params = url.params
        if url.host == "api.coingecko.com":
            if url.path.endswith("/search"):
                return f"coingecko:search:{params['query']}"
            if "ids" in params:
                return "coingecko:ids"
            return f"coingecko:page:{params['page']}"
        if "search" in params:
            return f"coinlore:search:{params['search']}"
        page = int(params["start"]) // int(params["limit"]) + 1
        return f"coinlore:page:{page}"

    def _rows(self, page: int) -> range:
        start = (page - 1) * self.rows_per_page + 1
        return range(start, start + self.rows_per_page)

    def payload(self, route: str, request: httpx.Request) -> t.Any:
        """Build the JSON body for ``route``.

        :param route: Route name.
        :param request: Outgoing request.
        :return: JSON value.
        """
        source, kind, *rest = route.split(":", 2)
        if source == "coingecko":
            if kind == "page":
                return [cg_row(i) for i in self._rows(int(rest[0]))]
            if kind == "search":
                ids = self.search_hits.get(rest[0], [])
                return {"coins": [{"id": cid, "name": cid} for cid in ids]}
            ids = request.url.params["ids"].split(",")
            return [
                cg_row(k + 1, id=cid, name=cid.title(), symbol=cid[:4])
                for k, cid in enumerate(ids)
            ]
        if kind == "page":
            return {"data": [cl_row(i) for i in self._rows(int(rest[0]))]}
        if rest[0] in self.lore_hits:
            return {"data": [cl_row(1, name=rest[0].title())]}
        return {"data": []}

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        route = self.route(request)
        self.routes.append(route)
        self.requests.append(request)
        gate = self.gates.get(route)
        if gate is not None:
            await gate.wait()
        if route in self.fail:
            return httpx.Response(500, json={"error": "boom"})
        return httpx.Response(200, json=self.payload(route, request))

    async def wait_for(self, route: str, spins: int = 1000) -> None:
        """Yield to the loop until ``route`` has been requested.

        :param route: Route name.
        :param spins: Maximum number of loop iterations.
        """
        for _ in range(spins):
            if route in self.routes:
                return
            await asyncio.sleep(0)
        raise AssertionError(f"route {route} never requested")


class FakeClock:
    """Manually advanced clock with an async sleep that advances it."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        """Move the clock forward.

        :param seconds: Seconds to add.
        """
        self.now += seconds

    async def sleep(self, delay: float) -> None:
        """Record ``delay`` and advance the clock by it.

        :param delay: Seconds to sleep.
        """
        self.sleeps.append(delay)
        self.now += delay
        await asyncio.sleep(0)


class RecordingRenderer(SnapshotRenderer):
    """Snapshot renderer that also keeps a log of every call."""

    def __init__(self) -> None:
        super().__init__()
        self.calls: list[tuple[str, t.Any]] = []

    def render(self, assets: t.Sequence[t.Any]) -> None:
        super().render(assets)
        self.calls.append(("render", [a.symbol for a in assets]))

    def render_empty(self) -> None:
        super().render_empty()
        self.calls.append(("empty", None))

    def render_error(self, message: str) -> None:
        super().render_error(message)
        self.calls.append(("error", message))


def mock_client(handler: t.Callable[..., t.Any]) -> httpx.AsyncClient:
    """Build an AsyncClient served by ``handler``.

    :param handler: MockTransport handler.
    :return: Client that never touches the network.
    """
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def make_tracker(  # pylint: disable=too-many-arguments
    markets: FakeMarkets,
    *,
    source: str = "coingecko",
    clock: FakeClock | None = None,
    debounce: float = 0.0,
    min_interval: float = 0.0,
    max_retries: int = 3,
) -> TrackerController:
    """Build a tracker wired to ``markets`` with instant sleeps.

    :param markets: Fake upstream.
    :param source: Initially selected source.
    :param clock: Clock shared by throttle, backoff and cache.
    :param debounce: Search debounce in seconds.
    :param min_interval: Throttle spacing in seconds.
    :param max_retries: Attempts per request.
    :return: Tracker with a :class:`RecordingRenderer`.
    """
    clock = clock or FakeClock()
    throttle = RequestThrottle(min_interval, clock=clock, sleep=clock.sleep)
    fetcher = RetryingFetcher(
        throttle,
        mock_client(markets),
        max_retries=max_retries,
        base_delay=1.0,
        sleep=clock.sleep,
    )
    return TrackerController(
        fetcher,
        ResultCache(300.0, clock=clock),
        RecordingRenderer(),
        source=source,
        debounce=debounce,
        min_query_chars=2,
    )
