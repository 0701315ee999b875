"""
Pytest configuration and fixtures for the portfolio tracker tests.

This module provides:
- A controllable clock for cache freshness
- Deterministic and failing stand-ins for the Jupiter client
- Holding factory helpers
"""

from typing import Any, Callable, Iterable

import pytest

from solana_portfolio.api.base import APIError
from solana_portfolio.cache import PriceCache
from solana_portfolio.models import PriceQuote, TokenHolding
from solana_portfolio.pricing import PriceFetcher


SOL_MINT = "So11111111111111111111111111111111111111112"
USDC_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZsaAkJ9"
BONK_MINT = "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263"

WALLET_A = "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU"
WALLET_B = "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM"
WALLET_C = "3Kz9kUqFzT3mM6Tz3xUu2yDdE8Rf7p5n9hWqVb1cLx2Y"


def make_mints(count: int, prefix: str = "Mint") -> list[str]:
    return [f"{prefix}{i:04d}" for i in range(count)]


def jupiter_entry(price: float, change: float = 0.0) -> dict[str, Any]:
    return {"usdPrice": price, "blockId": 348000000, "decimals": 6, "priceChange24h": change}


def trending_entry(mint: str, symbol: str, price: float = 1.0) -> dict[str, Any]:
    return {
        "id": mint,
        "name": f"{symbol} Token",
        "symbol": symbol,
        "decimals": 6,
        "usdPrice": price,
        "mcap": 1_000_000.0,
        "fdv": 2_000_000.0,
        "liquidity": 250_000.0,
        "holderCount": 1234,
        "organicScore": 87.5,
        "isVerified": True,
        "tags": ["verified"],
        "audit": {"mintAuthorityDisabled": True, "freezeAuthorityDisabled": True},
        "stats1h": {"priceChange": 4.2, "numTraders": 310},
        "stats24h": {"priceChange": -1.5, "numTraders": 5400},
    }


# =============================================================================
# CLOCK
# =============================================================================


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# =============================================================================
# FAKE PROVIDERS
# =============================================================================


class FakeJupiterClient:
    """
    Deterministic Jupiter stand-in that records every call.

    Every mint is priced at 1.0 unless listed in `prices`; mints in
    `unknown` are omitted like Jupiter omits unroutable ids. Batches whose
    call number is in `fail_calls` raise APIError.
    """

    def __init__(
        self,
        prices: dict[str, float] | None = None,
        unknown: Iterable[str] = (),
        trending: list[dict[str, Any]] | None = None,
    ):
        self.prices = prices or {}
        self.unknown = set(unknown)
        self.trending = trending if trending is not None else [
            trending_entry(BONK_MINT, "BONK", 0.00002),
            trending_entry(USDC_MINT, "USDC", 1.0),
        ]
        self.price_calls: list[list[str]] = []
        self.trending_calls: list[tuple[str, str]] = []
        self.fail_calls: set[int] = set()
        self.fail_all = False

    def get_prices(self, mints: Iterable[str]) -> dict[str, dict[str, Any]]:
        batch = list(mints)
        self.price_calls.append(batch)
        if self.fail_all or len(self.price_calls) in self.fail_calls:
            raise APIError("Service Unavailable", 503)
        return {
            mint: jupiter_entry(self.prices.get(mint, 1.0))
            for mint in batch
            if mint not in self.unknown
        }

    def get_trending(self, category: str, interval: str) -> list[dict[str, Any]]:
        self.trending_calls.append((category, interval))
        if self.fail_all:
            raise APIError("Request failed: connection refused")
        return list(self.trending)


class FakeFallbackSource:
    """CoinGecko stand-in keyed by mint."""

    def __init__(self, prices: dict[str, float], failing: Iterable[str] = ()):
        self.prices = prices
        self.failing = set(failing)
        self.calls: list[str] = []

    def get_price_quote(self, mint: str) -> PriceQuote | None:
        self.calls.append(mint)
        if mint in self.failing:
            raise APIError("Rate limit exceeded after retries", 429)
        if mint not in self.prices:
            return None
        return PriceQuote(usd_price=self.prices[mint], decimals=6)


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> PriceCache:
    return PriceCache(ttl_seconds=30.0, clock=clock)


@pytest.fixture
def jupiter() -> FakeJupiterClient:
    return FakeJupiterClient()


@pytest.fixture
def fetcher(jupiter: FakeJupiterClient, cache: PriceCache) -> PriceFetcher:
    return PriceFetcher(jupiter, cache=cache)


@pytest.fixture
def make_holding() -> Callable[..., TokenHolding]:
    """Factory for priced holdings; pass usd_price=None for unpriced ones."""

    def _make(
        wallet: str = WALLET_A,
        mint: str = SOL_MINT,
        symbol: str = "SOL",
        balance: float = 1.0,
        usd_price: float | None = 150.0,
        usd_value: float | None = None,
    ) -> TokenHolding:
        return TokenHolding(
            wallet_address=wallet,
            token_mint=mint,
            symbol=symbol,
            balance=balance,
            usd_price=usd_price,
            usd_value=usd_value,
        )

    return _make
