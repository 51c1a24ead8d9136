"""
Pytest configuration and shared fixtures
Provides common test fixtures for all test modules
"""

import os
import sys
import tempfile
from pathlib import Path

import httpx
import pytest
import pytest_asyncio

# Add backend directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

# Keep test runs from writing into the project log directory
os.environ.setdefault("LOG_FILE_PATH", str(Path(tempfile.gettempdir()) / "storefront-tests.log"))

import fakeredis

from storefront.database import session_storage
from storefront.services.config.configuration_service import ConfigurationService


@pytest.fixture
def config_service():
    """
    ConfigurationService over the packaged config directory
    Function-scoped fixture, new instance per test
    """
    return ConfigurationService()


@pytest.fixture
def sample_featured_payload():
    """Featured-products response as returned by the product API"""
    return {
        "buyer_id": 1,
        "recommended_excavators": [
            {
                "id": "exc-101",
                "name": "Volvo EC220E",
                "seller_name": "Nordic Machines",
                "seller_playbook": "seller_101.json",
                "brand": "Volvo",
                "model": "EC220E",
                "year": 2020,
                "price": 172000,
                "condition": "Used",
                "lifting_capacity_tons": 21.0,
                "operating_weight_tons": 22.5,
                "max_digging_depth_m": 6.7,
                "bucket_capacity_m3": 1.3,
            }
        ],
        "recommended_aluminum_sheets": [
            {
                "id": "alu-201",
                "name": "Aluminum Sheet 5083-H111",
                "seller_name": "Alu Works",
                "price": 95.5,
                "availability": 120,
                "thickness_mm": 3.0,
                "total_weight_kg": 24.0,
                "images": ["/images/custom/alu-201.jpg"],
            }
        ],
        "total_recommendations": 2,
    }


@pytest.fixture
def deal_payload():
    """DEAL_REACHED response from the negotiation service"""
    return {
        "status": "DEAL_REACHED",
        "price": "EUR 166,000",
        "payment_terms": "Net 60, no down payment",
        "warranty": "3-year / 3,000-hour comprehensive warranty",
        "delivery": "Free delivery to buyer's site",
        "maintenance_services": "First two services included",
    }


@pytest.fixture
def make_http_client():
    """
    Build an httpx.AsyncClient whose requests are answered by a handler.

    Usage:
        client = make_http_client(lambda request: httpx.Response(200, json={}))
    """
    def _factory(handler):
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return _factory


@pytest.fixture
def no_sleep():
    """Replacement for asyncio.sleep that records the requested delays"""
    delays = []

    async def _sleep(seconds):
        delays.append(seconds)

    _sleep.delays = delays
    return _sleep


@pytest_asyncio.fixture
async def fake_redis_client():
    """Provide a fakeredis asyncio client for Redis-backed tests."""
    client = fakeredis.FakeAsyncRedis(decode_responses=True)
    try:
        yield client
    finally:
        await client.flushall()
        await client.aclose()


@pytest_asyncio.fixture
async def redis_storage(fake_redis_client):
    """Patch global session storage with a fakeredis-backed instance."""
    original_storage = session_storage._redis_session_storage
    original_memory = session_storage._in_memory_session_storage

    storage = session_storage.RedisSessionStorage(fake_redis_client, ttl=120)
    session_storage._redis_session_storage = storage
    session_storage._in_memory_session_storage = None

    try:
        yield storage
    finally:
        session_storage._redis_session_storage = original_storage
        session_storage._in_memory_session_storage = original_memory


@pytest.fixture
def memory_storage(monkeypatch):
    """Patch global session storage with an in-memory instance without the cleanup task."""
    monkeypatch.setenv("ENABLE_REDIS_CACHING", "false")
    original_storage = session_storage._redis_session_storage
    original_memory = session_storage._in_memory_session_storage

    storage = session_storage.InMemorySessionStorage(ttl=0)
    session_storage._redis_session_storage = None
    session_storage._in_memory_session_storage = storage

    try:
        yield storage
    finally:
        session_storage._redis_session_storage = original_storage
        session_storage._in_memory_session_storage = original_memory


# Pytest markers
def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "api: API endpoint tests")
    config.addinivalue_line("markers", "services: Service layer tests")


# Auto-use fixtures
@pytest.fixture(autouse=True)
def reset_singletons():
    """
    Reset singleton instances before each test
    Ensures test isolation
    """
    import storefront.services.config.configuration_service as config_module
    config_module._config_service = None

    yield

    config_module._config_service = None
