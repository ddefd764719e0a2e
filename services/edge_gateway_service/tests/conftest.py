"""
Shared fixtures for Edge Gateway Service tests.

Every test gets its own Settings, Prometheus registry and DI container, so
metric counts and rate-limit state never leak between tests. Upstream HTTP
traffic is intercepted with respx.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

import httpx
import pytest
from dishka import AsyncContainer
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from prometheus_client import CollectorRegistry

from edge_service_libs.config import Environment
from services.edge_gateway_service.app.main import create_app
from services.edge_gateway_service.app.metrics import GatewayMetrics
from services.edge_gateway_service.app.startup_setup import create_di_container
from services.edge_gateway_service.config import Settings
from services.edge_gateway_service.implementations.http_client import GatewayHttpClient
from services.edge_gateway_service.routing import ServiceDirectory

WEATHER_URL = "http://weather.test"
AUTH_URL = "http://auth.test"
CACHE_URL = "http://cache.test"
ALERT_URL = "http://alert.test"


def make_settings(**overrides) -> Settings:
    """Settings pointing at fake upstream hosts, rate limiting off unless overridden."""
    values = {
        "ENVIRONMENT": Environment.TESTING,
        "WEATHER_SERVICE_URL": WEATHER_URL,
        "AUTH_SERVICE_URL": AUTH_URL,
        "CACHE_SERVICE_URL": CACHE_URL,
        "ALERT_SERVICE_URL": ALERT_URL,
        "WEATHER_PATH_PREFIX": "",
        "RATE_LIMIT_ENABLED": False,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings_factory():
    return make_settings


@pytest.fixture
def gateway_settings() -> Settings:
    return make_settings()


@pytest.fixture
def registry() -> CollectorRegistry:
    """Isolated Prometheus registry for test independence."""
    return CollectorRegistry()


@pytest.fixture
def metrics(registry: CollectorRegistry) -> GatewayMetrics:
    return GatewayMetrics(registry=registry)


@pytest.fixture
def directory(gateway_settings: Settings) -> ServiceDirectory:
    return ServiceDirectory.from_mapping(gateway_settings.service_urls)


@pytest.fixture
async def http_client() -> AsyncIterator[GatewayHttpClient]:
    async with httpx.AsyncClient() as client:
        yield GatewayHttpClient(client)


@pytest.fixture
async def container(
    gateway_settings: Settings, registry: CollectorRegistry
) -> AsyncIterator[AsyncContainer]:
    container = create_di_container(gateway_settings, registry)
    yield container
    await container.close()


@pytest.fixture
def app(container: AsyncContainer, gateway_settings: Settings) -> FastAPI:
    return create_app(container=container, config=gateway_settings)


@pytest.fixture
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
