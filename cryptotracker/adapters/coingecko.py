"""CoinGecko source adapter."""

import logging
import typing as t

import httpx

from .. import config
from ..schemas import Asset
from ..validators import non_negative, validate_number
from .base import SourceAdapter, logo_or_placeholder, require_list
from .registry import register_adapter

if t.TYPE_CHECKING:  # pragma: no cover
    from ..cancel import CancellationToken
    from ..fetcher import RetryingFetcher

logger = logging.getLogger(__name__)

MARKETS_URL = "https://api.coingecko.com/api/v3/coins/markets"
SEARCH_URL = "https://api.coingecko.com/api/v3/search"


class CoinGeckoAdapter(SourceAdapter):
    """Adapter for the CoinGecko markets and search endpoints.

    Search is two-phase: ``/search`` resolves free text to coin ids, then
    ``/coins/markets?ids=...`` returns market data for those ids.
    """

    name = "coingecko"
    tag = "CG"

    def __init__(
        self,
        page_size: int = config.PAGE_SIZE,
        max_candidates: int = config.SEARCH_MAX_CANDIDATES,
    ) -> None:
        super().__init__(page_size)
        self.max_candidates = max_candidates

    def _markets_params(self) -> dict[str, t.Any]:
        return {"vs_currency": "usd", "order": "market_cap_desc"}

    def build_markets_url(self, page: int) -> str:
        params = {
            **self._markets_params(),
            "per_page": self.page_size,
            "page": max(1, int(page)),
            "sparkline": "false",
        }
        return str(httpx.URL(MARKETS_URL, params=params))

    def build_search_url(self, query: str) -> str:
        return str(httpx.URL(SEARCH_URL, params={"query": query.strip()}))

    def build_markets_by_ids_url(self, ids: list[str]) -> str:
        """URL returning market data for the given coin ids.

        :param ids: CoinGecko coin ids.
        :return: Absolute URL.
        """
        params = {
            **self._markets_params(),
            "ids": ",".join(ids),
            "sparkline": "false",
        }
        return str(httpx.URL(MARKETS_URL, params=params))

    def parse_search_ids(self, raw: t.Any) -> list[str]:
        """Take the first candidate ids out of a ``/search`` payload.

        :param raw: Decoded JSON value.
        :return: Up to ``max_candidates`` coin ids.
        """
        if not isinstance(raw, dict) or not isinstance(raw.get("coins"), list):
            logger.debug("[CG] search payload without coins list")
            return []
        ids: list[str] = []
        for coin in raw["coins"]:
            coin_id = coin.get("id") if isinstance(coin, dict) else None
            if isinstance(coin_id, str) and coin_id.strip():
                ids.append(coin_id.strip())
            if len(ids) >= self.max_candidates:
                break
        return ids

    def _records(self, raw: t.Any) -> list:
        return require_list(raw, "coingecko markets")

    def _to_asset(self, record: dict) -> Asset:
        return Asset(
            name=str(record.get("name") or ""),
            symbol=str(record.get("symbol") or "").upper(),
            price=non_negative(record.get("current_price")),
            marketCap=non_negative(record.get("market_cap")),
            volume24h=non_negative(record.get("total_volume")),
            priceChangePercent24h=validate_number(
                record.get("price_change_percentage_24h"),
            ),
            logoUrl=logo_or_placeholder(record.get("image")),
        )

    async def search(
        self,
        fetcher: "RetryingFetcher",
        query: str,
        token: "CancellationToken",
    ) -> list[Asset]:
        ids = self.parse_search_ids(
            await fetcher.fetch(self.build_search_url(query), token),
        )
        if not ids:
            logger.info("[CG] search %r: no candidates", query)
            return []
        raw = await fetcher.fetch(self.build_markets_by_ids_url(ids), token)
        assets = self.parse_search_result(raw)
        logger.info(
            "[CG] search %r ids=%d mapped=%d",
            query,
            len(ids),
            len(assets),
        )
        return assets


@register_adapter("coingecko")
def _make_coingecko() -> CoinGeckoAdapter:
    return CoinGeckoAdapter()
