"""Registry of source adapter factories keyed by source id."""

from __future__ import annotations

import typing as t

if t.TYPE_CHECKING:  # pragma: no cover
    from .base import SourceAdapter

_REGISTRY: dict[str, t.Callable[[], SourceAdapter]] = {}


def register_adapter(
    name: str,
) -> t.Callable[[t.Callable[[], SourceAdapter]], t.Callable[[], SourceAdapter]]:
    """Decorator to register an adapter factory under a source id.

    :param name: The source id to register the adapter under.
    :return: The decorator function.
    """

    def _wrap(factory: t.Callable[[], SourceAdapter]):
        key = name.lower().strip()
        if not key:
            raise ValueError("adapter name cannot be empty")
        _REGISTRY[key] = factory
        return factory

    return _wrap


def get_adapter_names() -> list[str]:
    """Get the registered source ids.

    :return: Sorted list of source ids.
    """
    return sorted(_REGISTRY.keys())


def make_adapter(name: str) -> SourceAdapter:
    """Create the adapter for a source id.

    :param name: The source id.
    :return: A new adapter instance.
    :raises KeyError: If the source id is not registered.
    """
    key = (name or "").lower().strip()
    if key not in _REGISTRY:
        raise KeyError(f"unknown source '{name}'")
    return _REGISTRY[key]()
