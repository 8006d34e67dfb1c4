"""Capability interface shared by the upstream source adapters."""

import logging
import typing as t
from abc import ABC, abstractmethod

from .. import config
from ..errors import MalformedResponseError
from ..schemas import Asset

if t.TYPE_CHECKING:  # pragma: no cover
    from ..cancel import CancellationToken
    from ..fetcher import RetryingFetcher

logger = logging.getLogger(__name__)


def logo_or_placeholder(url: t.Any) -> str:
    """Return ``url`` when it is a non-empty string, else the placeholder.

    :param url: Logo value from the upstream record.
    :return: Usable logo URL.
    """
    if isinstance(url, str) and url.strip():
        return url.strip()
    return config.PLACEHOLDER_LOGO_URL


def require_list(raw: t.Any, what: str) -> list:
    """Ensure ``raw`` is a list.

    :param raw: Decoded JSON value.
    :param what: Description used in the error message.
    :return: ``raw`` unchanged.
    :raises MalformedResponseError: When ``raw`` is not a list.
    """
    if not isinstance(raw, list):
        raise MalformedResponseError(
            f"{what}: expected list, got {type(raw).__name__}",
        )
    return raw


def require_dict(raw: t.Any, what: str) -> dict:
    """Ensure ``raw`` is a dict.

    :param raw: Decoded JSON value.
    :param what: Description used in the error message.
    :return: ``raw`` unchanged.
    :raises MalformedResponseError: When ``raw`` is not a dict.
    """
    if not isinstance(raw, dict):
        raise MalformedResponseError(
            f"{what}: expected object, got {type(raw).__name__}",
        )
    return raw


class SourceAdapter(ABC):
    """Map one upstream API onto :class:`Asset` records.

    Subclasses build their own endpoint URLs and field mappings. Parsing
    never raises: a payload of the wrong shape yields an empty list, and a
    record of the wrong shape is skipped.
    """

    name: str = ""
    tag: str = ""

    def __init__(self, page_size: int = config.PAGE_SIZE) -> None:
        self.page_size = page_size

    @abstractmethod
    def build_markets_url(self, page: int) -> str:
        """URL of one markets page.

        :param page: One-based page number.
        :return: Absolute URL.
        """

    @abstractmethod
    def build_search_url(self, query: str) -> str:
        """URL of the free-text search endpoint.

        :param query: Search text.
        :return: Absolute URL.
        """

    @abstractmethod
    def _records(self, raw: t.Any) -> list:
        """Extract the list of market records from a payload.

        :param raw: Decoded JSON value.
        :return: Raw records.
        :raises MalformedResponseError: When the payload has the wrong shape.
        """

    @abstractmethod
    def _to_asset(self, record: dict) -> Asset:
        """Map one upstream record onto an :class:`Asset`.

        :param record: One upstream record.
        :return: The normalized asset.
        """

    def _parse(self, raw: t.Any, what: str) -> list[Asset]:
        try:
            records = self._records(raw)
        except MalformedResponseError as e:
            logger.debug("[%s] %s", self.tag, e)
            return []
        assets = []
        for record in records:
            if not isinstance(record, dict):
                logger.debug("[%s] skipping non-object %s record", self.tag, what)
                continue
            assets.append(self._to_asset(record))
        return assets

    def parse_markets_page(self, raw: t.Any) -> list[Asset]:
        """Normalize a markets page payload.

        :param raw: Decoded JSON value.
        :return: Assets in upstream order.
        """
        return self._parse(raw, "markets")

    def parse_search_result(self, raw: t.Any) -> list[Asset]:
        """Normalize the payload that carries search matches.

        :param raw: Decoded JSON value.
        :return: Matching assets in upstream order.
        """
        return self._parse(raw, "search")

    async def search(
        self,
        fetcher: "RetryingFetcher",
        query: str,
        token: "CancellationToken",
    ) -> list[Asset]:
        """Resolve ``query`` to assets with a single search call.

        :param fetcher: Fetcher shared with the rest of the tracker.
        :param query: Trimmed search text.
        :param token: Cancellation token of this search.
        :return: Matching assets.
        """
        raw = await fetcher.fetch(self.build_search_url(query), token)
        return self.parse_search_result(raw)
