"""
Featured Products Service
Cached product feed for the storefront home page with a static fallback
"""

import logging
import time
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..config.configuration_service import ConfigurationService, get_config_service
from .catalog_client import ProductCatalogClient, UpstreamProductError
from ...models.product import unified_product_list_adapter

logger = logging.getLogger(__name__)


class FeaturedProductService:
    """
    Featured products with:
    - In-process cache (5 minutes by default)
    - Fallback product list when the product API is unavailable

    Fallback results are never cached, so the next request tries the API again.
    """

    def __init__(
        self,
        catalog_client: ProductCatalogClient,
        config_service: Optional[ConfigurationService] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.catalog_client = catalog_client
        self.config_service = config_service or get_config_service()
        self.cache_seconds = float(self.config_service.get_featured_products_config().get("cache_seconds", 300))
        self._clock = clock
        self._cache: Dict[str, Tuple[List[Any], float]] = {}

    def _cache_key(self) -> str:
        return f"featured-products-{self.catalog_client.buyer_id}"

    def get_fallback_products(self) -> List[Any]:
        logger.warning("Using fallback products due to product API unavailability")
        products = unified_product_list_adapter.validate_python(self.config_service.get_fallback_products())
        return self.catalog_client.classifier.classify_all(products)

    async def get_featured_products(self) -> List[Any]:
        cache_key = self._cache_key()
        cached = self._cache.get(cache_key)
        if cached and self._clock() - cached[1] < self.cache_seconds:
            logger.debug("Returning cached featured products")
            return cached[0]

        try:
            products = await self.catalog_client.fetch_featured_products()
        except UpstreamProductError:
            return self.get_fallback_products()

        self._cache[cache_key] = (products, self._clock())
        return products

    async def find_product_by_id(self, product_id: str) -> Optional[Any]:
        products = await self.get_featured_products()
        return next((product for product in products if product.id == product_id), None)

    def clear_cache(self):
        self._cache.clear()
        logger.info("Featured products cache cleared")
