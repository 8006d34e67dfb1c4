"""Cryptocurrency market tracker backed by CoinGecko and CoinLore."""

__version__ = "0.1.0"
