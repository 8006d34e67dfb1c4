"""Source adapters normalizing upstream market data."""

from .base import SourceAdapter
from .registry import get_adapter_names, make_adapter, register_adapter

# Import for registration side effects
# pylint: disable=wrong-import-position
from . import coingecko, coinlore  # noqa: E402,F401

__all__ = [
    "SourceAdapter",
    "get_adapter_names",
    "make_adapter",
    "register_adapter",
]
