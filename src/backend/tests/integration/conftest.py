"""
Integration test fixtures

Fixtures for integration tests that drive the FastAPI application.
Upstream product and negotiation APIs are replaced by httpx mock transports;
sessions live in in-memory storage.
"""

import httpx
import pytest
import pytest_asyncio

from storefront.services.negotiation.mock_transcription import MockTranscriptionService
from storefront.services.negotiation.negotiation_service import NegotiationService
from storefront.services.negotiation.progress_simulator import ProgressSimulator
from storefront.services.negotiation.registry import WizardRegistry
from storefront.services.negotiation.transcription_service import TranscriptionService
from storefront.services.negotiation.wizard import NegotiationWizard
from storefront.services.products.catalog_client import ProductCatalogClient
from storefront.services.products.featured_products import FeaturedProductService


class UpstreamStub:
    """Answers product and negotiation API requests; tests swap the responses."""

    def __init__(self, featured_payload, deal_payload):
        self.featured = lambda request: httpx.Response(200, json=featured_payload)
        self.negotiate = lambda request: httpx.Response(200, json=deal_payload)
        self.transcribe = lambda request: httpx.Response(503)

    def __call__(self, request):
        path = request.url.path
        if path == "/api/featuredProducts":
            return self.featured(request)
        if path == "/api/negotiate":
            return self.negotiate(request)
        if path == "/api/transcribe":
            return self.transcribe(request)
        return httpx.Response(404)


@pytest.fixture
def upstream(sample_featured_payload, deal_payload):
    return UpstreamStub(sample_featured_payload, deal_payload)


@pytest_asyncio.fixture
async def wizard_registry(config_service, upstream, no_sleep):
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(upstream))
    transcription = TranscriptionService(
        http_client,
        config_service,
        mock_service=MockTranscriptionService(config_service, delay_seconds=0),
        sleep=no_sleep,
    )
    negotiation = NegotiationService(http_client, config_service)

    def factory(wizard_id):
        return NegotiationWizard(
            wizard_id,
            transcription_service=transcription,
            negotiation_service=negotiation,
            config_service=config_service,
            progress_simulator=ProgressSimulator(config_service, interval_seconds=0),
        )

    registry = WizardRegistry(factory, ttl=0)
    yield registry
    await registry.shutdown()
    await http_client.aclose()


@pytest_asyncio.fixture
async def api_client(config_service, upstream, wizard_registry, memory_storage):
    """
    HTTP client for API integration testing

    Usage:
        async def test_health_endpoint(api_client):
            response = await api_client.get("/")
            assert response.status_code == 200
    """
    from storefront.api.v1.negotiation import get_wizard_registry_dep
    from storefront.api.v1.products import get_catalog_client_dep, get_featured_service_dep
    from storefront.main import app

    upstream_client = httpx.AsyncClient(transport=httpx.MockTransport(upstream))
    catalog = ProductCatalogClient(upstream_client, config_service)
    featured = FeaturedProductService(catalog, config_service)

    original_overrides = dict(app.dependency_overrides)
    app.dependency_overrides[get_catalog_client_dep] = lambda: catalog
    app.dependency_overrides[get_featured_service_dep] = lambda: featured
    app.dependency_overrides[get_wizard_registry_dep] = lambda: wizard_registry

    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
    app.dependency_overrides.update(original_overrides)
    await upstream_client.aclose()
