"""Solana Portfolio - aggregate token holdings across wallets."""

from .aggregator import PortfolioAggregator, aggregate_portfolio
from .cache import PriceCache
from .models import (
    AggregatedToken,
    FetchOutcome,
    GroupedTokens,
    PortfolioStatistics,
    PortfolioView,
    PriceFetchResult,
    PriceQuote,
    TokenHolding,
    TrendingResult,
    TrendingToken,
)
from .pricing import PriceFetcher, calculate_usd_value
from .tracker import PortfolioTracker, load_holdings

__all__ = [
    "aggregate_portfolio",
    "calculate_usd_value",
    "load_holdings",
    "AggregatedToken",
    "FetchOutcome",
    "GroupedTokens",
    "PortfolioAggregator",
    "PortfolioStatistics",
    "PortfolioTracker",
    "PortfolioView",
    "PriceCache",
    "PriceFetcher",
    "PriceFetchResult",
    "PriceQuote",
    "TokenHolding",
    "TrendingResult",
    "TrendingToken",
]

__version__ = "0.1.0"
