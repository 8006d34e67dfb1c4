"""Time-boxed in-memory cache for normalized result sets."""

import logging
import time
import typing as t
from dataclasses import dataclass

from . import config
from .schemas import Asset

logger = logging.getLogger(__name__)


def _now() -> float:
    return time.time()


def normalize_query(query: str) -> str:
    """Lowercase, strip and collapse whitespace for a stable cache key.

    :param query: Raw search text.
    :return: Normalized search text.
    """
    return " ".join((query or "").lower().split())


def page_key(source: str, page: int) -> str:
    """Cache key for one markets page of a source.

    :param source: Source identifier.
    :param page: One-based page number.
    :return: Cache key.
    """
    return f"{source}:page:{int(page)}"


def search_key(source: str, query: str) -> str:
    """Cache key for one search against a source.

    :param source: Source identifier.
    :param query: Raw search text.
    :return: Cache key.
    """
    return f"{source}:search:{normalize_query(query)}"


@dataclass(frozen=True)
class CacheEntry:
    """A result set stamped with the time it was fetched."""

    key: str
    payload: tuple[Asset, ...]
    fetchedAt: float


class ResultCache:
    """Map cache keys to the latest successful result set.

    Stale entries are never evicted; they are ignored on read and replaced
    by the next successful fetch for the same key.

    :param ttl: Expiration window in seconds.
    :param clock: Wall clock (defaults to the module ``_now``).
    """

    def __init__(
        self,
        ttl: float = config.CACHE_TTL_SECONDS,
        clock: t.Callable[[], float] | None = None,
    ) -> None:
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def _time(self) -> float:
        return self._clock() if self._clock else _now()

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> CacheEntry | None:
        """Return the entry stored under ``key``, fresh or not.

        :param key: Cache key.
        :return: The stored entry or None.
        """
        return self._entries.get(key)

    def put(self, key: str, payload: t.Iterable[Asset]) -> CacheEntry:
        """Store ``payload`` under ``key`` stamped with the current time.

        :param key: Cache key.
        :param payload: Assets to store.
        :return: The new entry.
        """
        entry = CacheEntry(key=key, payload=tuple(payload), fetchedAt=self._time())
        self._entries[key] = entry
        logger.debug("[CACHE] stored %d items under %s", len(entry.payload), key)
        return entry

    def is_valid(self, entry: CacheEntry | None) -> bool:
        """Whether ``entry`` exists and is inside the expiration window.

        :param entry: Entry returned by :meth:`get`.
        :return: True if the entry may be served.
        """
        if entry is None:
            return False
        return self._time() - entry.fetchedAt < self.ttl

    def get_valid(self, key: str) -> CacheEntry | None:
        """Return the entry for ``key`` only while it is fresh.

        :param key: Cache key.
        :return: A fresh entry or None.
        """
        entry = self.get(key)
        if not self.is_valid(entry):
            return None
        logger.debug("[CACHE] hit for %s", key)
        return entry

    def clear(self) -> None:
        """Drop every entry."""
        self._entries.clear()
