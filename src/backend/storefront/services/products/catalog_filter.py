"""
Catalog Filters

Classifies unified products into the category tree from product_taxonomy.json
and filters product lists by category, subcategory, price range, tags and a
free-text search.

Matching rules:
- categories / subcategories: a product matches any of the selected values
- tags: a product must carry every selected tag
- price range: inclusive on both ends
"""

import logging
import re
from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel, Field, model_validator

from ..config.configuration_service import ConfigurationService, get_config_service

logger = logging.getLogger(__name__)


def _slug(value: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")


class ProductFilter(BaseModel):
    """Filter selection sent by the product listing page"""

    categories: List[str] = Field(default_factory=list)
    subcategories: List[str] = Field(default_factory=list)
    price_min: Optional[float] = Field(default=None, ge=0)
    price_max: Optional[float] = Field(default=None, ge=0)
    tags: List[str] = Field(default_factory=list)
    search: Optional[str] = None

    @model_validator(mode="after")
    def check_price_range(self):
        if self.price_min is not None and self.price_max is not None and self.price_min > self.price_max:
            raise ValueError("price_min must not exceed price_max")
        return self

    @property
    def is_empty(self) -> bool:
        return not (
            self.categories or self.subcategories or self.tags or self.search
            or self.price_min is not None or self.price_max is not None
        )


class ProductClassifier:
    """Attaches category, subcategory and tags to unified products"""

    def __init__(self, config_service: Optional[ConfigurationService] = None):
        self.config_service = config_service or get_config_service()
        self._by_product_type: Dict[str, Dict[str, Any]] = {}

        for category in self.config_service.get_product_categories():
            for subcategory in category.get("subcategories", []):
                for product_type in subcategory.get("product_types", []):
                    self._by_product_type[product_type] = {
                        "category": category["id"],
                        "subcategory": subcategory["id"],
                        "tags": list(subcategory.get("tags", [])),
                    }

    def _derived_tags(self, product: Any) -> List[str]:
        tags: List[str] = []
        if product.product_type == "excavator":
            tags.append(f"condition-{_slug(product.condition)}")
        elif product.product_type == "aluminum_sheet" and product.availability > 0:
            tags.append("stock-items")
        elif product.product_type == "b2c" and product.discount:
            tags.append("volume-discounts")
        return tags

    def classify(self, product: Any) -> Any:
        """Return a copy of the product with its taxonomy fields filled in; explicit values win."""
        entry = self._by_product_type.get(product.product_type, {})
        tags: List[str] = []
        for tag in [*product.tags, *entry.get("tags", []), *self._derived_tags(product)]:
            if tag and tag not in tags:
                tags.append(tag)

        return product.model_copy(update={
            "category": product.category or entry.get("category"),
            "subcategory": product.subcategory or entry.get("subcategory"),
            "tags": tags,
        })

    def classify_all(self, products: Sequence[Any]) -> List[Any]:
        return [self.classify(product) for product in products]


def filter_products(products: Sequence[Any], product_filter: ProductFilter) -> List[Any]:
    """Apply a filter selection to classified products, keeping their order."""
    if product_filter.is_empty:
        return list(products)

    categories = set(product_filter.categories)
    subcategories = set(product_filter.subcategories)
    required_tags = set(product_filter.tags)
    search = (product_filter.search or "").strip().lower()

    matched = []
    for product in products:
        if categories and product.category not in categories:
            continue
        if subcategories and product.subcategory not in subcategories:
            continue
        if product_filter.price_min is not None and product.price < product_filter.price_min:
            continue
        if product_filter.price_max is not None and product.price > product_filter.price_max:
            continue
        if required_tags and not required_tags.issubset(product.tags):
            continue
        if search and search not in product.name.lower() and search not in product.seller_name.lower():
            continue
        matched.append(product)

    logger.debug(f"Product filter kept {len(matched)} of {len(products)} products")
    return matched
