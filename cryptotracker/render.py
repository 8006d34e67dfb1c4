"""Render collaborators that receive normalized asset lists."""

import logging
import time
import typing as t

from .schemas import Asset

logger = logging.getLogger(__name__)

Status = t.Literal["idle", "items", "empty", "error"]


class Renderer(t.Protocol):
    """Presentation side of the tracker.

    Every call replaces whatever was displayed before.
    """

    def render(self, assets: t.Sequence[Asset]) -> None: ...

    def render_empty(self) -> None: ...

    def render_error(self, message: str) -> None: ...


class LoggingRenderer:
    """Renderer that only logs what would be displayed."""

    def render(self, assets: t.Sequence[Asset]) -> None:
        logger.info("[RENDER] %d assets", len(assets))

    def render_empty(self) -> None:
        logger.info("[RENDER] no results")

    def render_error(self, message: str) -> None:
        logger.info("[RENDER] error: %s", message)


class SnapshotRenderer:
    """Renderer that keeps the last view for the HTTP surface."""

    def __init__(self) -> None:
        self.status: Status = "idle"
        self.items: list[Asset] = []
        self.error: str | None = None
        self.updated_at: float | None = None
        self.renders = 0

    def _set(self, status: Status, items: t.Sequence[Asset], error: str | None) -> None:
        self.status = status
        self.items = list(items)
        self.error = error
        self.updated_at = time.time()
        self.renders += 1

    def render(self, assets: t.Sequence[Asset]) -> None:
        self._set("items", assets, None)

    def render_empty(self) -> None:
        self._set("empty", [], None)

    def render_error(self, message: str) -> None:
        self._set("error", [], message)

    def snapshot(self) -> dict[str, t.Any]:
        """Return the last rendered view.

        :return: Status, items, error and update time.
        """
        return {
            "status": self.status,
            "items": list(self.items),
            "error": self.error,
            "updatedAt": self.updated_at,
        }
