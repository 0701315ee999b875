"""Portfolio tracker - wires configuration, API clients, cache and aggregator."""

import json
from pathlib import Path
from typing import Any

from .aggregator import PortfolioAggregator
from .api.coingecko import CoinGeckoClient
from .api.jupiter import JupiterClient
from .cache import PriceCache
from .config import Config, get_config
from .models import PortfolioView, PriceFetchResult, TokenHolding, TrendingResult
from .pricing import PriceFetcher


def load_holdings(path: str | Path) -> list[TokenHolding]:
    """
    Load holdings from a JSON file.

    The file holds either a list of holding records or an object with a
    "holdings" list.
    """
    with open(path, "r") as f:
        data: Any = json.load(f)

    if isinstance(data, dict):
        data = data.get("holdings", [])
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a list of holding records")

    return [TokenHolding.from_record(record) for record in data]


class PortfolioTracker:
    """
    Entry point for portfolio lookups.

    Owns one PriceCache shared by price and trending lookups for the
    lifetime of the tracker.
    """

    def __init__(self, config: Config | None = None, cache: PriceCache | None = None):
        self.config = config or get_config()
        self.cache = cache if cache is not None else PriceCache(ttl_seconds=self.config.cache_ttl_seconds)
        self._jupiter: JupiterClient | None = None
        self._coingecko: CoinGeckoClient | None = None
        self._fetcher: PriceFetcher | None = None

    @property
    def jupiter(self) -> JupiterClient:
        if self._jupiter is None:
            self._jupiter = JupiterClient(
                base_url=self.config.jupiter_base_url,
                timeout=self.config.request_timeout,
            )
        return self._jupiter

    @property
    def coingecko(self) -> CoinGeckoClient:
        if self._coingecko is None:
            self._coingecko = CoinGeckoClient(
                api_key=self.config.coingecko_api_key,
                base_url=self.config.coingecko_base_url,
                timeout=self.config.request_timeout,
            )
        return self._coingecko

    @property
    def fetcher(self) -> PriceFetcher:
        if self._fetcher is None:
            self._fetcher = PriceFetcher(
                self.jupiter,
                cache=self.cache,
                batch_size=self.config.price_batch_size,
                fallback=self.coingecko if self.config.use_coingecko_fallback else None,
            )
        return self._fetcher

    @property
    def aggregator(self) -> PortfolioAggregator:
        return PortfolioAggregator(native_symbol=self.config.native_symbol, fetcher=self.fetcher)

    def portfolio(
        self,
        holdings: list[TokenHolding],
        sort_by: str = "value",
        group_view: str = "flat",
    ) -> PortfolioView:
        """Price and aggregate holdings."""
        return self.aggregator.build_portfolio(holdings, sort_by, group_view)

    def prices(self, mints: list[str]) -> PriceFetchResult:
        return self.fetcher.fetch_prices(mints)

    def trending(self, category: str = "toptrending", interval: str = "1h") -> TrendingResult:
        return self.fetcher.fetch_trending(category, interval)

    def close(self) -> None:
        """Clean up resources."""
        if self._jupiter:
            self._jupiter.close()
        if self._coingecko:
            self._coingecko.close()
