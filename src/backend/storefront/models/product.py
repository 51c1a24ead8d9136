"""
Product Models for the Storefront Catalog
Unified product variants (excavator, aluminum sheet, consumer) and the
featured-products feed returned by the external product API.
"""

import zlib
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter


class ProductType(str, Enum):
    """Discriminator values for unified products"""

    EXCAVATOR = "excavator"
    ALUMINUM_SHEET = "aluminum_sheet"
    B2C = "b2c"


# Image pools used when a product arrives without images
PRODUCT_IMAGE_POOLS: Dict[str, List[str]] = {
    ProductType.EXCAVATOR.value: [
        "/images/products/excevator/product-01.jpg",
        "/images/products/excevator/product-04.jpg",
        "/images/products/excevator/product-013.jpg",
        "/images/products/excevator/construction-equipment-product-02.jpg",
    ],
    ProductType.ALUMINUM_SHEET.value: [
        "/images/products/aluminium/product-01.jpg",
        "/images/products/aluminium/product-02.jpg",
        "/images/products/aluminium/product-03.jpg",
        "/images/products/aluminium/product-04.jpg",
        "/images/products/aluminium/product-05.jpg",
    ],
}

GENERIC_PRODUCT_IMAGES: List[str] = [f"/images/products/product-{i}.jpg" for i in range(1, 8)]


class BaseProduct(BaseModel):
    """Fields shared by every product variant"""

    id: str
    name: str
    price: float
    seller_name: str = ""
    seller_playbook: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    category: Optional[str] = None
    subcategory: Optional[str] = None
    tags: List[str] = Field(default_factory=list)


class ExcavatorProduct(BaseProduct):
    """Used or new excavator listed by a supplier"""

    product_type: Literal["excavator"] = "excavator"
    brand: str
    model: str
    year: int
    condition: str
    lifting_capacity_tons: float
    operating_weight_tons: float
    max_digging_depth_m: float
    bucket_capacity_m3: float


class AluminumSheetProduct(BaseProduct):
    """Aluminum sheet stock sold by weight"""

    product_type: Literal["aluminum_sheet"] = "aluminum_sheet"
    availability: int
    thickness_mm: float
    total_weight_kg: float


class ConsumerProduct(BaseProduct):
    """Catalog item from the consumer shop"""

    product_type: Literal["b2c"] = "b2c"
    thumb: Optional[str] = None
    color: Optional[str] = None
    size: Optional[str] = None
    discount: Optional[str] = None
    current_price: Optional[float] = None


UnifiedProduct = Annotated[
    Union[ExcavatorProduct, AluminumSheetProduct, ConsumerProduct],
    Field(discriminator="product_type"),
]

unified_product_adapter = TypeAdapter(UnifiedProduct)
unified_product_list_adapter = TypeAdapter(List[UnifiedProduct])


class FeaturedProductsResponse(BaseModel):
    """Raw response of the external featured-products endpoint"""

    buyer_id: int
    recommended_excavators: List[Dict[str, Any]]
    recommended_aluminum_sheets: List[Dict[str, Any]]
    total_recommendations: int


def assign_product_images(product_id: str, product_type: Optional[str] = None) -> List[str]:
    """
    Pick one to three images for a product from its type's image pool.

    The choice is derived from the product id so the same product always
    gets the same images across requests.
    """
    pool = PRODUCT_IMAGE_POOLS.get(product_type or "", GENERIC_PRODUCT_IMAGES)
    seed = zlib.crc32(product_id.encode("utf-8"))
    count = seed % 3 + 1
    start = seed % len(pool)
    return [pool[(start + offset) % len(pool)] for offset in range(min(count, len(pool)))]


def transform_featured_response(response: FeaturedProductsResponse) -> List[Any]:
    """
    Convert the featured-products feed into unified products.

    Excavators come first, then aluminum sheets, in upstream order.

    Raises:
        pydantic.ValidationError: If an entry lacks fields its variant requires
    """
    raw_products: List[Dict[str, Any]] = []

    for excavator in response.recommended_excavators:
        raw_products.append({
            **excavator,
            "product_type": ProductType.EXCAVATOR.value,
            "images": excavator.get("images") or assign_product_images(
                str(excavator.get("id", "")), ProductType.EXCAVATOR.value
            ),
        })

    for sheet in response.recommended_aluminum_sheets:
        raw_products.append({
            **sheet,
            "product_type": ProductType.ALUMINUM_SHEET.value,
            "images": sheet.get("images") or assign_product_images(
                str(sheet.get("id", "")), ProductType.ALUMINUM_SHEET.value
            ),
        })

    return unified_product_list_adapter.validate_python(raw_products)
