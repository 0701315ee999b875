"""Data models for the portfolio tracker."""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any


class InvalidHoldingError(ValueError):
    """Raised when an upstream holding record cannot be normalized."""
    pass


def _optional_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    return float(value)


@dataclass(frozen=True)
class TokenHolding:
    """One wallet's balance of one token."""
    wallet_address: str
    token_mint: str
    symbol: str
    balance: float
    usd_price: float | None = None    # None = unknown, 0.0 = known zero
    usd_value: float | None = None    # Derived from balance * usd_price if not given

    def __post_init__(self):
        if self.balance < 0:
            raise InvalidHoldingError(
                f"Negative balance {self.balance} for {self.token_mint} in {self.wallet_address}"
            )
        if self.usd_value is None and self.usd_price is not None:
            object.__setattr__(self, "usd_value", self.balance * self.usd_price)

    @property
    def is_priced(self) -> bool:
        """True when both price and value are known and positive."""
        return bool(self.usd_price and self.usd_price > 0
                    and self.usd_value and self.usd_value > 0)

    def with_price(self, usd_price: float | None) -> "TokenHolding":
        """Return a copy priced at usd_price, with the value re-derived."""
        return replace(self, usd_price=usd_price, usd_value=None)

    @classmethod
    def from_record(cls, data: dict[str, Any]) -> "TokenHolding":
        """
        Create a TokenHolding from a loosely-typed balance record.

        Accepts the portfolio table's column names (token_symbol, token_price)
        as well as the field names used here.
        """
        wallet = data.get("wallet_address")
        mint = data.get("token_mint")
        if not wallet or not mint:
            raise InvalidHoldingError(f"Holding record missing wallet or mint: {data!r}")

        try:
            balance = float(data.get("balance", 0) or 0)
            price = _optional_float(data.get("usd_price", data.get("token_price")))
            value = _optional_float(data.get("usd_value"))
        except (TypeError, ValueError) as e:
            raise InvalidHoldingError(f"Non-numeric field in holding for {mint}: {e}") from e

        return cls(
            wallet_address=wallet,
            token_mint=mint,
            symbol=data.get("symbol") or data.get("token_symbol") or "",
            balance=balance,
            usd_price=price,
            usd_value=value,
        )


@dataclass
class AggregatedToken:
    """One token's position summed across every wallet holding it."""
    token_mint: str
    symbol: str
    balance: float
    usd_value: float
    usd_price: float | None = None
    wallets: list[str] = field(default_factory=list)

    @property
    def wallet_count(self) -> int:
        return len(self.wallets)

    @classmethod
    def from_holding(cls, holding: TokenHolding) -> "AggregatedToken":
        return cls(
            token_mint=holding.token_mint,
            symbol=holding.symbol,
            balance=holding.balance,
            usd_value=holding.usd_value or 0.0,
            usd_price=holding.usd_price,
            wallets=[holding.wallet_address],
        )

    def add(self, holding: TokenHolding) -> None:
        """Fold another wallet's holding of the same mint into this record."""
        self.balance += holding.balance
        self.usd_value += holding.usd_value or 0.0
        self.wallets.append(holding.wallet_address)


@dataclass
class GroupedTokens:
    """Aggregated tokens split into the native asset and everything else."""
    native: list[AggregatedToken] = field(default_factory=list)
    spl: list[AggregatedToken] = field(default_factory=list)


@dataclass
class PortfolioStatistics:
    total_tokens: int = 0       # Raw input holdings, priced or not
    unique_tokens: int = 0      # Distinct priced mints
    total_value: float = 0.0


@dataclass
class PortfolioView:
    """Result of a portfolio aggregation."""
    aggregated: list[AggregatedToken] | GroupedTokens
    by_wallet: dict[str, list[TokenHolding]]
    statistics: PortfolioStatistics

    @classmethod
    def empty(cls, grouped: bool = False) -> "PortfolioView":
        return cls(
            aggregated=GroupedTokens() if grouped else [],
            by_wallet={},
            statistics=PortfolioStatistics(),
        )

    @property
    def tokens(self) -> list[AggregatedToken]:
        """Aggregated tokens as one list, native entries first when grouped."""
        if isinstance(self.aggregated, GroupedTokens):
            return self.aggregated.native + self.aggregated.spl
        return self.aggregated


@dataclass(frozen=True)
class PriceQuote:
    """A USD price quote for one token."""
    usd_price: float
    block_id: int = 0
    decimals: int = 0
    price_change_24h: float = 0.0

    @classmethod
    def from_jupiter(cls, data: dict[str, Any]) -> "PriceQuote":
        """Create PriceQuote from a Jupiter price v3 entry."""
        return cls(
            usd_price=float(data.get("usdPrice", 0) or 0),
            block_id=int(data.get("blockId", 0) or 0),
            decimals=int(data.get("decimals", 0) or 0),
            price_change_24h=float(data.get("priceChange24h", 0) or 0),
        )

    @classmethod
    def from_coingecko(cls, data: dict[str, Any]) -> "PriceQuote":
        """Create PriceQuote from CoinGecko contract market data."""
        return cls(
            usd_price=float(data["current_price"]),
            block_id=0,
            decimals=6,
            price_change_24h=float(data.get("price_change_percentage_24h", 0) or 0),
        )


@dataclass
class TrendingToken:
    """Summary of a trending token from Jupiter's token lists."""
    id: str
    symbol: str
    name: str
    decimals: int = 0
    usd_price: float = 0.0
    mcap: float = 0.0
    fdv: float = 0.0
    liquidity: float = 0.0
    holder_count: int = 0
    organic_score: float = 0.0
    is_verified: bool = False
    tags: list[str] = field(default_factory=list)
    stats: dict[str, dict[str, Any]] = field(default_factory=dict)  # interval -> stats
    audit: dict[str, Any] = field(default_factory=dict)
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_jupiter(cls, data: dict[str, Any]) -> "TrendingToken":
        """Create TrendingToken from a Jupiter tokens v2 entry."""
        stats = {
            interval: data[f"stats{interval}"]
            for interval in ("5m", "1h", "6h", "24h")
            if data.get(f"stats{interval}")
        }
        return cls(
            id=data.get("id", ""),
            symbol=data.get("symbol", ""),
            name=data.get("name", ""),
            decimals=int(data.get("decimals", 0) or 0),
            usd_price=float(data.get("usdPrice", 0) or 0),
            mcap=float(data.get("mcap", 0) or 0),
            fdv=float(data.get("fdv", 0) or 0),
            liquidity=float(data.get("liquidity", 0) or 0),
            holder_count=int(data.get("holderCount", 0) or 0),
            organic_score=float(data.get("organicScore", 0) or 0),
            is_verified=bool(data.get("isVerified", False)),
            tags=list(data.get("tags") or []),
            stats=stats,
            audit=dict(data.get("audit") or {}),
            raw=data,
        )

    def price_change(self, interval: str = "24h") -> float:
        return float(self.stats.get(interval, {}).get("priceChange", 0) or 0)


@dataclass(frozen=True)
class CacheEntry:
    """A cached provider payload and the clock reading it was stored at."""
    payload: Any
    fetched_at: float


class FetchOutcome(str, Enum):
    """How a price or trending lookup was satisfied."""
    FRESH = "fresh"                # Everything came from the provider just now
    CACHED = "cached"              # Everything came from a fresh cache entry
    STALE = "stale"                # Provider failed, an expired entry was served
    PARTIAL = "partial"            # Some batches failed with nothing cached
    UNAVAILABLE = "unavailable"    # Provider failed and nothing was cached


@dataclass
class PriceFetchResult:
    """Prices resolved for a set of mints, plus how they were obtained."""
    prices: dict[str, PriceQuote] = field(default_factory=dict)
    outcome: FetchOutcome = FetchOutcome.FRESH
    failed_batches: list[list[str]] = field(default_factory=list)
    stale_batches: list[list[str]] = field(default_factory=list)

    def __contains__(self, mint: str) -> bool:
        return mint in self.prices

    def __len__(self) -> int:
        return len(self.prices)

    def get(self, mint: str) -> PriceQuote | None:
        return self.prices.get(mint)

    def missing(self, mints) -> list[str]:
        """Mints from the request that have no quote."""
        return [m for m in mints if m not in self.prices]


@dataclass
class TrendingResult:
    """Trending tokens for one category/interval, plus how they were obtained."""
    tokens: list[TrendingToken] = field(default_factory=list)
    outcome: FetchOutcome = FetchOutcome.FRESH

    @property
    def available(self) -> bool:
        return self.outcome is not FetchOutcome.UNAVAILABLE
