"""Portfolio aggregation engine - merge per-wallet holdings into one view."""

import logging
from typing import Iterable, Sequence

from .models import (
    AggregatedToken,
    GroupedTokens,
    PortfolioStatistics,
    PortfolioView,
    TokenHolding,
)
from .pricing import PriceFetcher

logger = logging.getLogger(__name__)

SORT_KEYS = ("balance", "value", "symbol")
GROUP_VIEWS = ("flat", "grouped")


def _symbol_key(token: AggregatedToken) -> tuple[str, str]:
    # Case-insensitive first, lowercase before uppercase on ties
    return token.symbol.casefold(), token.symbol.swapcase()


class PortfolioAggregator:
    """
    Builds the cross-wallet portfolio view.

    Holdings without a positive price and value are left out of the
    aggregated and per-wallet listings but still counted in total_tokens.
    """

    def __init__(
        self,
        native_symbol: str = "SOL",
        fetcher: PriceFetcher | None = None,
    ):
        self.native_symbol = native_symbol
        self.fetcher = fetcher

    def aggregate(
        self,
        holdings: Sequence[TokenHolding],
        sort_by: str = "value",
        group_view: str = "flat",
    ) -> PortfolioView:
        """
        Aggregate holdings across wallets.

        Args:
            holdings: Per-wallet token balances, in any order
            sort_by: balance, value or symbol
            group_view: flat, or grouped into native vs. other tokens

        Returns:
            PortfolioView with aggregated tokens, per-wallet listing and stats
        """
        if sort_by not in SORT_KEYS:
            raise ValueError(f"Unknown sort key: {sort_by}")
        if group_view not in GROUP_VIEWS:
            raise ValueError(f"Unknown group view: {group_view}")

        if not holdings:
            return PortfolioView.empty(grouped=group_view == "grouped")

        priced = [h for h in holdings if h.is_priced]

        by_wallet: dict[str, list[TokenHolding]] = {}
        by_mint: dict[str, AggregatedToken] = {}

        for holding in priced:
            by_wallet.setdefault(holding.wallet_address, []).append(holding)

            existing = by_mint.get(holding.token_mint)
            if existing is None:
                by_mint[holding.token_mint] = AggregatedToken.from_holding(holding)
            else:
                existing.add(holding)

        aggregated = self._sort(list(by_mint.values()), sort_by)

        statistics = PortfolioStatistics(
            total_tokens=len(holdings),
            unique_tokens=len(aggregated),
            total_value=sum(t.usd_value or 0.0 for t in aggregated),
        )

        if group_view == "grouped":
            grouped = GroupedTokens(
                native=[t for t in aggregated if t.symbol == self.native_symbol],
                spl=[t for t in aggregated if t.symbol != self.native_symbol],
            )
            return PortfolioView(aggregated=grouped, by_wallet=by_wallet, statistics=statistics)

        return PortfolioView(aggregated=aggregated, by_wallet=by_wallet, statistics=statistics)

    @staticmethod
    def _sort(tokens: list[AggregatedToken], sort_by: str) -> list[AggregatedToken]:
        # sorted() is stable, ties keep first-seen order
        if sort_by == "balance":
            return sorted(tokens, key=lambda t: t.balance, reverse=True)
        if sort_by == "value":
            return sorted(tokens, key=lambda t: t.usd_value or 0.0, reverse=True)
        return sorted(tokens, key=_symbol_key)

    def resolve_prices(self, holdings: Iterable[TokenHolding]) -> list[TokenHolding]:
        """
        Fill in prices for holdings that arrived without a usable one.

        Upstream balance rows carry token_price=0 until priced, so a zero
        price is looked up the same as a missing one. Priced holdings pass
        through unchanged, and holdings the fetcher cannot price are kept
        as they arrived.
        """
        if self.fetcher is None:
            raise RuntimeError("PortfolioAggregator has no PriceFetcher to resolve prices with")

        holdings = list(holdings)
        unpriced = [h.token_mint for h in holdings if not h.is_priced]
        if not unpriced:
            return holdings

        result = self.fetcher.fetch_prices(unpriced)
        logger.info(
            "Resolved %d of %d missing prices (%s)",
            len(result), len(set(unpriced)), result.outcome.value,
        )

        resolved = []
        for holding in holdings:
            quote = None if holding.is_priced else result.get(holding.token_mint)
            if quote is not None and quote.usd_price > 0:
                holding = holding.with_price(quote.usd_price)
            resolved.append(holding)
        return resolved

    def build_portfolio(
        self,
        holdings: Iterable[TokenHolding],
        sort_by: str = "value",
        group_view: str = "flat",
    ) -> PortfolioView:
        """Resolve missing prices, then aggregate."""
        return self.aggregate(self.resolve_prices(holdings), sort_by, group_view)


def aggregate_portfolio(
    holdings: Sequence[TokenHolding],
    sort_by: str = "value",
    group_view: str = "flat",
    native_symbol: str = "SOL",
) -> PortfolioView:
    """
    Quick function to aggregate already-priced holdings.

    Args:
        holdings: Per-wallet token balances
        sort_by: balance, value or symbol
        group_view: flat or grouped
        native_symbol: Symbol of the chain's native asset

    Returns:
        PortfolioView
    """
    return PortfolioAggregator(native_symbol=native_symbol).aggregate(
        holdings, sort_by, group_view
    )
