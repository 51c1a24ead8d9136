"""Product services - external catalog access, catalog filters and the cached featured feed"""

from .catalog_client import ProductCatalogClient, UpstreamProductError
from .catalog_filter import ProductClassifier, ProductFilter, filter_products
from .featured_products import FeaturedProductService

__all__ = [
    "ProductCatalogClient",
    "UpstreamProductError",
    "ProductClassifier",
    "ProductFilter",
    "filter_products",
    "FeaturedProductService",
]
