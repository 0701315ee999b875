"""API clients for external services."""

from .base import APIError, RateLimitError
from .coingecko import CoinGeckoClient
from .jupiter import JupiterClient

__all__ = ["APIError", "CoinGeckoClient", "JupiterClient", "RateLimitError"]
