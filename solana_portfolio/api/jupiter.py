"""Jupiter API client for token prices and trending token lists."""

from typing import Any, Iterable

import httpx

from .base import APIError, BaseAPIClient


TRENDING_CATEGORIES = ("toptrending", "toporganicscore", "toptraded")
TRENDING_INTERVALS = ("5m", "1h", "6h", "24h")


class JupiterClient(BaseAPIClient):
    """
    Client for the Jupiter lite API (FREE, no key required).

    Price endpoint accepts at most 50 mint ids per call. Ids without a
    known price are omitted from the response rather than errored.
    """

    BASE_URL = "https://lite-api.jup.ag"
    MAX_IDS_PER_REQUEST = 50

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ):
        super().__init__(
            base_url=base_url or self.BASE_URL,
            timeout=timeout,
            transport=transport,
        )

    def get_prices(self, mints: Iterable[str]) -> dict[str, dict[str, Any]]:
        """
        Get USD prices for up to 50 token mints.

        Args:
            mints: Token mint addresses

        Returns:
            Mapping mint -> {usdPrice, blockId, decimals, priceChange24h}
        """
        ids = list(mints)
        if len(ids) > self.MAX_IDS_PER_REQUEST:
            raise ValueError(
                f"Jupiter accepts at most {self.MAX_IDS_PER_REQUEST} ids per call, got {len(ids)}"
            )
        if not ids:
            return {}

        response = self.get("/price/v3", params={"ids": ",".join(ids)})
        if not isinstance(response, dict):
            raise APIError("Unexpected price response shape")
        # Some ids come back as null when Jupiter has no route for them
        return {mint: data for mint, data in response.items() if data}

    def get_trending(self, category: str, interval: str) -> list[dict[str, Any]]:
        """
        Get trending tokens for a category and interval.

        Args:
            category: toptrending, toporganicscore or toptraded
            interval: 5m, 1h, 6h or 24h

        Returns:
            Ordered list of token summary dicts
        """
        response = self.get(f"/tokens/v2/{category}/{interval}")
        if not isinstance(response, list):
            raise APIError("Unexpected trending response shape")
        return response
