"""CoinLore source adapter."""

import typing as t

import httpx

from .. import config
from ..schemas import Asset
from ..validators import non_negative, validate_number
from .base import SourceAdapter, logo_or_placeholder, require_dict, require_list
from .registry import register_adapter

TICKERS_URL = "https://api.coinlore.net/api/tickers/"


def synthesize_logo(record: dict, symbol: str) -> str:
    """Pick the upstream logo or build one from the symbol.

    :param record: One CoinLore ticker record.
    :param symbol: Uppercased ticker symbol.
    :return: Logo URL, the placeholder when nothing is available.
    """
    for field in ("image", "logo"):
        value = record.get(field)
        if isinstance(value, str) and value.strip():
            return value.strip()
    if symbol:
        return config.COINLORE_LOGO_TEMPLATE.format(symbol=symbol.lower())
    return logo_or_placeholder(None)


class CoinLoreAdapter(SourceAdapter):
    """Adapter for the CoinLore tickers endpoint.

    Pages are addressed by offset and search is answered in one call.
    Numeric fields arrive as strings.
    """

    name = "coinlore"
    tag = "CL"

    def build_markets_url(self, page: int) -> str:
        offset = (max(1, int(page)) - 1) * self.page_size
        return str(
            httpx.URL(
                TICKERS_URL,
                params={"start": offset, "limit": self.page_size},
            ),
        )

    def build_search_url(self, query: str) -> str:
        return str(httpx.URL(TICKERS_URL, params={"search": query.strip()}))

    def _records(self, raw: t.Any) -> list:
        payload = require_dict(raw, "coinlore tickers")
        return require_list(payload.get("data"), "coinlore tickers.data")

    def _to_asset(self, record: dict) -> Asset:
        symbol = str(record.get("symbol") or "").upper()
        return Asset(
            name=str(record.get("name") or ""),
            symbol=symbol,
            price=non_negative(record.get("price_usd")),
            marketCap=non_negative(record.get("market_cap_usd")),
            volume24h=non_negative(record.get("volume24")),
            priceChangePercent24h=validate_number(record.get("percent_change_24h")),
            logoUrl=synthesize_logo(record, symbol),
        )


@register_adapter("coinlore")
def _make_coinlore() -> CoinLoreAdapter:
    return CoinLoreAdapter()
