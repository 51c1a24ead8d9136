"""
Product Catalog Client

Reads products from the external product API and converts them into
unified products tagged with their catalog category. No caching and no
retries; callers decide what to do when the upstream fails.
"""

import logging
from typing import Any, List, Optional

import httpx
from pydantic import ValidationError

from ..config.configuration_service import ConfigurationService, get_config_service
from ...models.product import FeaturedProductsResponse, transform_featured_response
from .catalog_filter import ProductClassifier

logger = logging.getLogger(__name__)


class UpstreamProductError(RuntimeError):
    """Raised when the product API cannot deliver a usable product list"""


class ProductCatalogClient:
    def __init__(self, http_client: httpx.AsyncClient, config_service: Optional[ConfigurationService] = None):
        self.http_client = http_client
        self.config_service = config_service or get_config_service()

        policy = self.config_service.get_featured_products_config()
        self.url = self.config_service.get_product_api_base_url() + policy.get("path", "/api/featuredProducts")
        self.timeout = float(policy.get("timeout_seconds", 10))
        self.buyer_id = self.config_service.get_buyer_id()
        self.classifier = ProductClassifier(self.config_service)

    async def fetch_featured_products(self) -> List[Any]:
        """
        Fetch and transform the featured products for the configured buyer.

        Raises:
            UpstreamProductError: On network errors, non-2xx status or an invalid payload
        """
        try:
            response = await self.http_client.get(
                self.url,
                params={"buyer_id": self.buyer_id},
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
            response.raise_for_status()
            feed = FeaturedProductsResponse.model_validate(response.json())
            products = self.classifier.classify_all(transform_featured_response(feed))
        except httpx.HTTPError as e:
            logger.error(f"Product API request failed: {e}")
            raise UpstreamProductError(f"Product API request failed: {e}") from e
        except (ValidationError, ValueError) as e:
            logger.error(f"Product API returned an invalid response: {e}")
            raise UpstreamProductError("Invalid product API response structure") from e

        logger.info(f"Fetched {len(products)} products from product API")
        return products

    async def list_products(self) -> List[Any]:
        return await self.fetch_featured_products()

    async def get_product(self, product_id: str) -> Optional[Any]:
        """Return the product with the given id, or None if the upstream does not list it."""
        products = await self.fetch_featured_products()
        return next((product for product in products if product.id == product_id), None)
