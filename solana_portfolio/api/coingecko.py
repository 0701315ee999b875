"""CoinGecko API client, used as a fallback price source."""

from typing import Any

import httpx

from ..models import PriceQuote
from .base import APIError, BaseAPIClient


class CoinGeckoClient(BaseAPIClient):
    """Client for CoinGecko API (FREE demo tier: 30 requests/min)."""

    BASE_URL = "https://api.coingecko.com/api/v3"

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float = 30.0,
        max_retries: int = 1,
        transport: httpx.BaseTransport | None = None,
    ):
        self.api_key = api_key
        # One attempt per mint; the fallback runs mint by mint
        super().__init__(
            base_url=base_url or self.BASE_URL,
            timeout=timeout,
            max_retries=max_retries,
            transport=transport,
        )

    def _get_default_headers(self) -> dict[str, str]:
        headers = super()._get_default_headers()
        if self.api_key:
            headers["x-cg-demo-api-key"] = self.api_key
        return headers

    def get_token_by_contract(
        self,
        address: str,
        platform: str = "solana",
    ) -> dict[str, Any] | None:
        """
        Get market data for a token by its contract (mint) address.

        Args:
            address: Token contract address
            platform: CoinGecko asset platform id

        Returns:
            Dict with current_price and price_change_percentage_24h, or None
            if CoinGecko does not list the token
        """
        try:
            data = self.get(f"/coins/{platform}/contract/{address}")
        except APIError as e:
            if e.status_code == 404:
                return None
            raise

        market = data.get("market_data") or {}
        price = (market.get("current_price") or {}).get("usd")
        if price is None:
            return None

        return {
            "current_price": float(price),
            "price_change_percentage_24h": float(
                market.get("price_change_percentage_24h") or 0
            ),
        }

    def get_price_quote(self, mint: str) -> PriceQuote | None:
        """Get a PriceQuote for a Solana mint, or None if unlisted."""
        token = self.get_token_by_contract(mint, "solana")
        if not token or not token["current_price"]:
            return None
        return PriceQuote.from_coingecko(token)
