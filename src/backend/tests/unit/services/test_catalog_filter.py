"""
Unit tests for product classification and the catalog filters
"""

import pytest
from pydantic import ValidationError

from storefront.models.product import (
    AluminumSheetProduct,
    ConsumerProduct,
    ExcavatorProduct,
    unified_product_list_adapter,
)
from storefront.services.products.catalog_filter import ProductClassifier, ProductFilter, filter_products


def _excavator(product_id="exc-1", price=150000, condition="Used"):
    return ExcavatorProduct(
        id=product_id,
        name="Volvo EC220E",
        price=price,
        seller_name="Nordic Machines",
        brand="Volvo",
        model="EC220E",
        year=2020,
        condition=condition,
        lifting_capacity_tons=21.0,
        operating_weight_tons=22.5,
        max_digging_depth_m=6.7,
        bucket_capacity_m3=1.3,
    )


def _sheet(product_id="alu-1", price=95.5, availability=120):
    return AluminumSheetProduct(
        id=product_id,
        name="Aluminum Sheet 5083-H111",
        price=price,
        seller_name="Alu Works",
        availability=availability,
        thickness_mm=3.0,
        total_weight_kg=24.0,
    )


@pytest.fixture
def classifier(config_service):
    return ProductClassifier(config_service)


@pytest.fixture
def catalog(classifier):
    return classifier.classify_all([
        _excavator("exc-used", price=150000, condition="Used"),
        _excavator("exc-new", price=210000, condition="New"),
        _sheet("alu-stock", price=95.5, availability=120),
        _sheet("alu-empty", price=60.0, availability=0),
        ConsumerProduct(id="b2c-1", name="Work Gloves", price=34.9, seller_name="Shop", discount="10"),
    ])


@pytest.mark.unit
@pytest.mark.services
class TestProductClassifier:
    def test_excavator_classified(self, classifier):
        product = classifier.classify(_excavator(condition="Used"))

        assert product.category == "machinery-equipment"
        assert product.subcategory == "construction-equipment"
        assert product.tags == ["construction", "technical-support", "condition-used"]

    def test_sheet_in_stock_tagged(self, classifier):
        in_stock = classifier.classify(_sheet(availability=5))
        sold_out = classifier.classify(_sheet(availability=0))

        assert in_stock.category == "raw-materials"
        assert "stock-items" in in_stock.tags
        assert "stock-items" not in sold_out.tags

    def test_explicit_values_kept(self, classifier):
        product = _sheet().model_copy(update={"category": "specials", "tags": ["clearance"]})

        classified = classifier.classify(product)

        assert classified.category == "specials"
        assert classified.subcategory == "metals"
        assert classified.tags[0] == "clearance"

    def test_classify_returns_copy(self, classifier):
        product = _sheet()

        classifier.classify(product)

        assert product.category is None
        assert product.tags == []

    def test_fallback_products_all_classified(self, classifier, config_service):
        products = unified_product_list_adapter.validate_python(config_service.get_fallback_products())

        classified = classifier.classify_all(products)

        assert all(product.category and product.subcategory for product in classified)


@pytest.mark.unit
@pytest.mark.services
class TestFilterProducts:
    def test_empty_filter_keeps_everything(self, catalog):
        assert filter_products(catalog, ProductFilter()) == catalog

    def test_categories_match_any(self, catalog):
        selected = filter_products(catalog, ProductFilter(categories=["raw-materials", "consumer-goods"]))

        assert [p.id for p in selected] == ["alu-stock", "alu-empty", "b2c-1"]

    def test_subcategory(self, catalog):
        selected = filter_products(catalog, ProductFilter(subcategories=["construction-equipment"]))

        assert [p.id for p in selected] == ["exc-used", "exc-new"]

    def test_price_range_inclusive(self, catalog):
        selected = filter_products(catalog, ProductFilter(price_min=60.0, price_max=150000))

        assert [p.id for p in selected] == ["exc-used", "alu-stock", "alu-empty"]

    def test_tags_must_all_match(self, catalog):
        selected = filter_products(catalog, ProductFilter(tags=["construction", "condition-new"]))

        assert [p.id for p in selected] == ["exc-new"]

    def test_search_name_and_seller(self, catalog):
        by_name = filter_products(catalog, ProductFilter(search="gloves"))
        by_seller = filter_products(catalog, ProductFilter(search="alu works"))

        assert [p.id for p in by_name] == ["b2c-1"]
        assert [p.id for p in by_seller] == ["alu-stock", "alu-empty"]

    def test_combined_filters(self, catalog):
        selected = filter_products(
            catalog,
            ProductFilter(categories=["raw-materials"], tags=["stock-items"], price_max=100),
        )

        assert [p.id for p in selected] == ["alu-stock"]

    def test_inverted_price_range_rejected(self):
        with pytest.raises(ValidationError):
            ProductFilter(price_min=200, price_max=100)

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError):
            ProductFilter(price_min=-1)
