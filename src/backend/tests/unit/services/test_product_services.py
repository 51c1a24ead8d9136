"""
Unit tests for the product catalog client and the featured products service
"""

import httpx
import pytest

from storefront.models.product import ExcavatorProduct
from storefront.services.products.catalog_client import ProductCatalogClient, UpstreamProductError
from storefront.services.products.featured_products import FeaturedProductService


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


@pytest.mark.unit
@pytest.mark.services
class TestProductCatalogClient:
    @pytest.mark.asyncio
    async def test_fetch_featured_products(self, make_http_client, config_service, sample_featured_payload):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, json=sample_featured_payload)

        catalog = ProductCatalogClient(make_http_client(handler), config_service)
        products = await catalog.fetch_featured_products()

        assert [p.id for p in products] == ["exc-101", "alu-201"]
        assert requests[0].url.path == "/api/featuredProducts"
        assert requests[0].url.params["buyer_id"] == "1"

    @pytest.mark.asyncio
    async def test_get_product_found_and_missing(self, make_http_client, config_service, sample_featured_payload):
        catalog = ProductCatalogClient(
            make_http_client(lambda request: httpx.Response(200, json=sample_featured_payload)), config_service
        )

        product = await catalog.get_product("exc-101")

        assert isinstance(product, ExcavatorProduct)
        assert await catalog.get_product("unknown") is None

    @pytest.mark.asyncio
    async def test_upstream_status_error(self, make_http_client, config_service):
        catalog = ProductCatalogClient(make_http_client(lambda request: httpx.Response(500)), config_service)

        with pytest.raises(UpstreamProductError):
            await catalog.list_products()

    @pytest.mark.asyncio
    async def test_invalid_structure(self, make_http_client, config_service):
        catalog = ProductCatalogClient(
            make_http_client(lambda request: httpx.Response(200, json={"products": []})), config_service
        )

        with pytest.raises(UpstreamProductError, match="Invalid product API response structure"):
            await catalog.list_products()


@pytest.mark.unit
@pytest.mark.services
class TestFeaturedProductService:
    @pytest.mark.asyncio
    async def test_results_cached_until_expiry(self, make_http_client, config_service, sample_featured_payload):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json=sample_featured_payload)

        clock = FakeClock()
        service = FeaturedProductService(
            ProductCatalogClient(make_http_client(handler), config_service), config_service, clock=clock
        )

        first = await service.get_featured_products()
        clock.now += 299
        second = await service.get_featured_products()
        assert len(calls) == 1
        assert first == second

        clock.now += 2
        await service.get_featured_products()
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_fallback_not_cached(self, make_http_client, config_service, sample_featured_payload):
        responses = iter([
            httpx.Response(503),
            httpx.Response(200, json=sample_featured_payload),
        ])
        service = FeaturedProductService(
            ProductCatalogClient(make_http_client(lambda request: next(responses)), config_service),
            config_service,
            clock=FakeClock(),
        )

        fallback = await service.get_featured_products()
        assert [p.id for p in fallback] == [p["id"] for p in config_service.get_fallback_products()]

        fresh = await service.get_featured_products()
        assert [p.id for p in fresh] == ["exc-101", "alu-201"]

    @pytest.mark.asyncio
    async def test_find_product_by_id_and_clear_cache(self, make_http_client, config_service, sample_featured_payload):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json=sample_featured_payload)

        service = FeaturedProductService(
            ProductCatalogClient(make_http_client(handler), config_service), config_service, clock=FakeClock()
        )

        product = await service.find_product_by_id("alu-201")
        assert product.name == "Aluminum Sheet 5083-H111"

        service.clear_cache()
        await service.find_product_by_id("alu-201")
        assert len(calls) == 2
