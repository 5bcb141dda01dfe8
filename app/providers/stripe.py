"""Stripe REST API client for catalog reads."""

import asyncio
import logging

import httpx

from .base import BaseProvider, ProviderError

logger = logging.getLogger(__name__)

STRIPE_API = "https://api.stripe.com/v1"


class StripeClient(BaseProvider):
    """Read-only access to active products and prices."""

    def __init__(self, api_key: str, base_url: str = STRIPE_API, **kwargs):
        super().__init__(api_key, **kwargs)
        self.base_url = base_url.rstrip("/")

    @property
    def provider_name(self) -> str:
        return "stripe"

    async def _list(self, path: str, params: dict, client: httpx.AsyncClient | None = None) -> list[dict]:
        response = await self._request("GET", f"{self.base_url}/{path}", client=client, params=params)
        try:
            return response.json().get("data", [])
        except ValueError:
            raise ProviderError(self.provider_name, f"invalid JSON from /{path}")

    async def list_products(self, client: httpx.AsyncClient | None = None) -> list[dict]:
        return await self._list("products", {"active": "true", "limit": 100}, client)

    async def list_prices(self, product_id: str, client: httpx.AsyncClient | None = None) -> list[dict]:
        return await self._list("prices", {"product": product_id, "active": "true"}, client)

    async def fetch_catalog(self) -> list[tuple[dict, list[dict]]]:
        """Fetch active products, then their active prices in parallel.

        A failed product listing raises ProviderError. A failed price lookup is
        logged and yields an empty price list for that product only.
        """
        async with self.client() as client:
            products = await self.list_products(client)
            results = await asyncio.gather(
                *(self.list_prices(p["id"], client) for p in products),
                return_exceptions=True,
            )

        catalog = []
        for product, prices in zip(products, results):
            if isinstance(prices, Exception):
                logger.warning("Price fetch failed for %s: %s", product.get("id"), prices)
                prices = []
            catalog.append((product, prices))
        return catalog
