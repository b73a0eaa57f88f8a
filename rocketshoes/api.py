"""
Stock and catalog API client.

Endpoints:
- GET stock/{product_id}     -> {"id": ..., "amount": ...}
- GET products/{product_id}  -> product record
"""

from typing import Any, Optional

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from rocketshoes import config
from rocketshoes.errors import CatalogUnavailable, StockUnavailable
from rocketshoes.logging import get_logger, sanitize_string_for_logging
from rocketshoes.models import Product, Stock

logger = get_logger(__name__)


class ShopApi:
    """Async client for the storefront API."""

    def __init__(
        self,
        base_url: str = config.API_BASE_URL,
        timeout: float = config.API_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def __aenter__(self) -> "ShopApi":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    # Only connection-level failures are retried; HTTP error statuses are final.
    @retry(
        stop=stop_after_attempt(config.API_RETRY_ATTEMPTS),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
        retry=retry_if_exception_type(httpx.TransportError),
        reraise=True,
    )
    async def _get_json(self, path: str) -> Any:
        response = await self.client.get(path)
        response.raise_for_status()
        return response.json()

    async def get_stock(self, product_id: int) -> Stock:
        """Current stock for a product."""
        try:
            return Stock.model_validate(await self._get_json(f"stock/{product_id}"))
        except (httpx.HTTPError, ValueError) as e:
            logger.error(
                f"Stock lookup failed for product {product_id}: "
                f"{sanitize_string_for_logging(e)}"
            )
            raise StockUnavailable(product_id, str(e)) from e

    async def get_product(self, product_id: int) -> Product:
        """Full catalog record for a product."""
        try:
            return Product.model_validate(await self._get_json(f"products/{product_id}"))
        except (httpx.HTTPError, ValueError) as e:
            logger.error(
                f"Catalog lookup failed for product {product_id}: "
                f"{sanitize_string_for_logging(e)}"
            )
            raise CatalogUnavailable(product_id, str(e)) from e
