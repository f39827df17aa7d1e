"""Tests for health check endpoints."""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from conftest import FakeGenerator, FakeSearch, make_settings
from knowledge_assistant.api.deps import get_gateway, get_session_factory, get_settings
from knowledge_assistant.main import app
from knowledge_assistant.providers.gateway import ProviderGateway


@pytest_asyncio.fixture
async def client(settings, session_factory):
    """Async test client over a fresh store, without providers."""
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_gateway] = lambda: ProviderGateway(settings)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    """Test basic health endpoint returns ok."""
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_root(client: AsyncClient):
    """Test root endpoint returns app info."""
    response = await client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert "name" in data
    assert "version" in data
    assert data["docs"] == "/docs"


@pytest.mark.asyncio
async def test_ready_without_providers(client: AsyncClient):
    """Disabled providers never make the service degraded."""
    response = await client.get("/health/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert data["services"] == {"database": "ok", "search": "disabled", "ai": "disabled"}


@pytest.mark.asyncio
async def test_ready_lists_providers(client: AsyncClient):
    enabled = make_settings(WEB_SEARCH_ENABLED=True, AI_ENABLED=True)
    app.dependency_overrides[get_gateway] = lambda: ProviderGateway(
        enabled,
        search_providers=[FakeSearch("duckduckgo"), FakeSearch("wikipedia")],
        generative_providers=[FakeGenerator("claude", available=False), FakeGenerator("ollama")],
    )

    data = (await client.get("/health/ready")).json()

    assert data["services"]["search"] == "ok (duckduckgo, wikipedia)"
    assert data["services"]["ai"] == "ok (ollama)"


@pytest.mark.asyncio
async def test_ready_warns_when_no_ai_provider_configured(client: AsyncClient):
    enabled = make_settings(AI_ENABLED=True)
    app.dependency_overrides[get_gateway] = lambda: ProviderGateway(
        enabled, generative_providers=[FakeGenerator("claude", available=False)]
    )

    data = (await client.get("/health/ready")).json()

    assert data["status"] == "ready"
    assert data["services"]["ai"].startswith("warning")
