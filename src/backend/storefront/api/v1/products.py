"""
Product API Endpoints
Proxy routes over the external product API (with catalog filters) plus the
cached featured feed
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from ...services.products.catalog_client import ProductCatalogClient, UpstreamProductError
from ...services.products.catalog_filter import ProductFilter, filter_products
from ...services.products.featured_products import FeaturedProductService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["products"])


# Dependency injection placeholders (overridden in main.py)
def get_catalog_client_dep() -> ProductCatalogClient:
    """Dependency injection placeholder for the catalog client - overridden in main.py"""
    raise RuntimeError("Catalog client dependency not initialized")


def get_featured_service_dep() -> FeaturedProductService:
    """Dependency injection placeholder for the featured products service - overridden in main.py"""
    raise RuntimeError("Featured products dependency not initialized")


@router.get("/products")
async def list_products(
    category: List[str] = Query(default=[], description="Category ids; a product matches any of them"),
    subcategory: List[str] = Query(default=[], description="Subcategory ids; a product matches any of them"),
    price_min: Optional[float] = Query(default=None, ge=0, description="Lowest price, inclusive"),
    price_max: Optional[float] = Query(default=None, ge=0, description="Highest price, inclusive"),
    tags: List[str] = Query(default=[], description="Tag ids; a product must carry all of them"),
    q: Optional[str] = Query(default=None, max_length=100, description="Search in product and seller names"),
    catalog: ProductCatalogClient = Depends(get_catalog_client_dep),
):
    """
    List products from the product API as unified products, optionally filtered.

    Returns 422 when price_min exceeds price_max and 500 with {"error"} when
    the upstream fails. No caching, no retries.
    """
    try:
        product_filter = ProductFilter(
            categories=category,
            subcategories=subcategory,
            price_min=price_min,
            price_max=price_max,
            tags=tags,
            search=q,
        )
    except ValidationError:
        raise HTTPException(
            status_code=422,
            detail="price_min must not exceed price_max",
        )

    try:
        products = filter_products(await catalog.list_products(), product_filter)
        return [product.model_dump(mode="json") for product in products]

    except UpstreamProductError as e:
        logger.error(f"Error fetching products: {e}")
        return JSONResponse(status_code=500, content={"error": "Failed to fetch products"})
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error listing products: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/product-categories")
async def get_product_categories(
    catalog: ProductCatalogClient = Depends(get_catalog_client_dep),
) -> Dict[str, Any]:
    """Category tree and selectable tags for the product filters"""
    config_service = catalog.config_service
    return {
        "categories": config_service.get_product_categories(),
        "tags": config_service.get_product_filter_tags(),
    }


@router.get("/product/{pid}")
async def get_product(pid: str, catalog: ProductCatalogClient = Depends(get_catalog_client_dep)):
    """
    Get one product by id.

    Returns 404 with {"error", "productId"} when the product does not exist
    and 500 with the same shape when the upstream fails.
    """
    try:
        product = await catalog.get_product(pid)
        if product is None:
            logger.info(f"Product {pid} not found")
            return JSONResponse(status_code=404, content={"error": "Product not found", "productId": pid})

        return product.model_dump(mode="json")

    except UpstreamProductError as e:
        logger.error(f"Error fetching product {pid}: {e}")
        return JSONResponse(status_code=500, content={"error": "Failed to fetch product", "productId": pid})
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error fetching product {pid}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/featured-products")
async def get_featured_products(
    featured: FeaturedProductService = Depends(get_featured_service_dep),
) -> List[Dict[str, Any]]:
    """Featured products (cached, with fallback products when the product API is down)."""
    try:
        products = await featured.get_featured_products()
        return [product.model_dump(mode="json") for product in products]

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error serving featured products: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")
