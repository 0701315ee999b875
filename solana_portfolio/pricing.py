"""Price and trending-token fetching with batching and a shared TTL cache."""

import logging
from typing import Any, Iterable, Protocol

from .api.base import APIError
from .api.jupiter import TRENDING_CATEGORIES, TRENDING_INTERVALS
from .cache import PriceCache
from .models import (
    FetchOutcome,
    PriceFetchResult,
    PriceQuote,
    TrendingResult,
    TrendingToken,
)

logger = logging.getLogger(__name__)

MAX_MINTS_PER_REQUEST = 50
MAX_FALLBACK_LOOKUPS = 20

# Transport failures plus malformed entries in an otherwise successful response
PROVIDER_ERRORS = (APIError, ValueError, TypeError, AttributeError, KeyError)


class PriceProvider(Protocol):
    def get_prices(self, mints: Iterable[str]) -> dict[str, dict[str, Any]]: ...

    def get_trending(self, category: str, interval: str) -> list[dict[str, Any]]: ...


class FallbackPriceSource(Protocol):
    def get_price_quote(self, mint: str) -> PriceQuote | None: ...


def calculate_usd_value(balance: float, price: float) -> float:
    """Calculate USD value for a token balance."""
    return balance * price


def chunk(items: list[str], size: int) -> list[list[str]]:
    """Split items into ordered chunks of at most size elements."""
    return [items[i:i + size] for i in range(0, len(items), size)]


class PriceFetcher:
    """
    Supplies USD prices and trending lists under rate and freshness limits.

    Price requests are split into batches the provider accepts in one call.
    Every successful response is cached; a failed refresh serves the last
    cached snapshot for that key instead of raising.
    """

    def __init__(
        self,
        client: PriceProvider,
        cache: PriceCache | None = None,
        batch_size: int = MAX_MINTS_PER_REQUEST,
        fallback: FallbackPriceSource | None = None,
        max_fallback_lookups: int = MAX_FALLBACK_LOOKUPS,
    ):
        if not 1 <= batch_size <= MAX_MINTS_PER_REQUEST:
            raise ValueError(
                f"batch_size must be between 1 and {MAX_MINTS_PER_REQUEST}, got {batch_size}"
            )
        self.client = client
        self.cache = cache if cache is not None else PriceCache()
        self.batch_size = batch_size
        self.fallback = fallback
        self.max_fallback_lookups = max_fallback_lookups

    def fetch_prices(self, mints: Iterable[str]) -> PriceFetchResult:
        """
        Get USD price quotes for a set of token mints.

        Args:
            mints: Token mint addresses (duplicates are ignored)

        Returns:
            PriceFetchResult; mints nobody could price are absent from it
        """
        ordered = list(dict.fromkeys(mints))
        if not ordered:
            return PriceFetchResult()

        result = PriceFetchResult()
        cached_batches = 0
        batches = chunk(ordered, self.batch_size)

        for batch in batches:
            key = "prices:" + ",".join(batch)
            hit = self.cache.get(key)

            if hit is not None and hit[1]:
                logger.debug("Price cache hit for batch of %d", len(batch))
                result.prices.update(hit[0])
                cached_batches += 1
                continue

            try:
                raw = self.client.get_prices(batch)
                quotes = {mint: PriceQuote.from_jupiter(data) for mint, data in raw.items()}
            except PROVIDER_ERRORS as e:
                if hit is not None:
                    logger.warning(
                        "Price batch of %d failed (%s), serving stale cache", len(batch), e
                    )
                    result.prices.update(hit[0])
                    result.stale_batches.append(batch)
                else:
                    logger.warning("Price batch of %d failed (%s), skipping", len(batch), e)
                    result.failed_batches.append(batch)
                continue

            self.cache.put(key, quotes)
            result.prices.update(quotes)

        if self.fallback is not None:
            self._fill_from_fallback(result, ordered)

        if result.failed_batches:
            result.outcome = FetchOutcome.PARTIAL if result.prices else FetchOutcome.UNAVAILABLE
        elif result.stale_batches:
            result.outcome = FetchOutcome.STALE
        elif cached_batches == len(batches):
            result.outcome = FetchOutcome.CACHED

        return result

    def _fill_from_fallback(self, result: PriceFetchResult, mints: list[str]) -> None:
        missing = result.missing(mints)
        if not missing:
            return

        if len(missing) > self.max_fallback_lookups:
            logger.warning(
                "Fallback price source limited to %d of %d missing prices",
                self.max_fallback_lookups, len(missing),
            )
            missing = missing[:self.max_fallback_lookups]

        logger.info("Trying fallback price source for %d missing prices", len(missing))
        for mint in missing:
            quote = self._fallback_quote(mint)
            if quote is not None:
                result.prices[mint] = quote

    def _fallback_quote(self, mint: str) -> PriceQuote | None:
        try:
            return self.fallback.get_price_quote(mint)
        except PROVIDER_ERRORS as e:
            logger.warning("Fallback price lookup failed for %s: %s", mint, e)
            return None

    def get_price(self, mint: str) -> float | None:
        """
        Get the USD price of a single token.

        Returns:
            Price, or None if unknown (never 0 for a missing quote)
        """
        quote = self.fetch_prices([mint]).get(mint)
        if quote is not None and quote.usd_price > 0:
            return quote.usd_price

        # A zero quote is treated as missing; fetch_prices only falls back on absent ones
        if quote is not None and self.fallback is not None:
            quote = self._fallback_quote(mint)
            if quote is not None and quote.usd_price > 0:
                return quote.usd_price
        return None

    def fetch_trending(
        self,
        category: str = "toptrending",
        interval: str = "1h",
    ) -> TrendingResult:
        """
        Get trending tokens, served from cache while fresh.

        An empty result with outcome UNAVAILABLE means "no data", not
        "no trending tokens".
        """
        if category not in TRENDING_CATEGORIES:
            raise ValueError(f"Unknown trending category: {category}")
        if interval not in TRENDING_INTERVALS:
            raise ValueError(f"Unknown trending interval: {interval}")

        key = f"{category}:{interval}"
        hit = self.cache.get(key)
        if hit is not None and hit[1]:
            return TrendingResult(tokens=hit[0], outcome=FetchOutcome.CACHED)

        try:
            raw = self.client.get_trending(category, interval)
            tokens = [TrendingToken.from_jupiter(item) for item in raw]
        except PROVIDER_ERRORS as e:
            logger.warning("Error fetching trending tokens for %s: %s", key, e)
            if hit is not None:
                return TrendingResult(tokens=hit[0], outcome=FetchOutcome.STALE)
            return TrendingResult(tokens=[], outcome=FetchOutcome.UNAVAILABLE)

        self.cache.put(key, tokens)
        return TrendingResult(tokens=tokens, outcome=FetchOutcome.FRESH)

    def clear_cache(self) -> None:
        self.cache.clear()
