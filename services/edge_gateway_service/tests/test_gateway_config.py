"""Tests for Edge Gateway settings."""

from __future__ import annotations

import pytest

from edge_service_libs.config import Environment
from services.edge_gateway_service.config import Settings

ENV_VARS = (
    "PORT",
    "EDGE_GATEWAY_HTTP_PORT",
    "ENVIRONMENT",
    "CORS_ORIGIN",
    "WEATHER_SERVICE_URL",
    "EDGE_GATEWAY_WEATHER_SERVICE_URL",
    "RATE_LIMIT_MAX_REQUESTS",
    "WEATHER_PATH_PREFIX",
    "HEALTH_CHECK_PARALLEL",
    "EDGE_GATEWAY_HEALTH_CHECK_PARALLEL",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    config = Settings(_env_file=None)

    assert config.HTTP_PORT == 3000
    assert config.ENVIRONMENT == Environment.DEVELOPMENT
    assert config.RATE_LIMIT_WINDOW_SECONDS == 900
    assert config.RATE_LIMIT_MAX_REQUESTS == 100
    assert config.PROXY_TIMEOUT_SECONDS == 10.0
    assert config.HEALTH_CHECK_TIMEOUT_SECONDS == 5.0
    assert config.cors_origins == ["http://localhost:3005"]
    assert config.service_urls == {
        "weather": "http://localhost:3001",
        "auth": "http://localhost:3002",
        "cache": "http://localhost:3003",
        "alert": "http://localhost:3004",
    }


def test_plain_environment_names_are_accepted(monkeypatch):
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("WEATHER_SERVICE_URL", "http://weather:9000")
    monkeypatch.setenv("RATE_LIMIT_MAX_REQUESTS", "5")
    monkeypatch.setenv("WEATHER_PATH_PREFIX", "/weather")
    monkeypatch.setenv("ENVIRONMENT", "production")

    config = Settings(_env_file=None)

    assert config.HTTP_PORT == 8080
    assert config.WEATHER_SERVICE_URL == "http://weather:9000"
    assert config.RATE_LIMIT_MAX_REQUESTS == 5
    assert config.WEATHER_PATH_PREFIX == "/weather"
    assert config.is_production()


def test_prefixed_names_are_accepted(monkeypatch):
    monkeypatch.setenv("EDGE_GATEWAY_HTTP_PORT", "9090")
    monkeypatch.setenv("EDGE_GATEWAY_WEATHER_SERVICE_URL", "http://w")

    config = Settings(_env_file=None)

    assert config.HTTP_PORT == 9090
    assert config.WEATHER_SERVICE_URL == "http://w"


def test_parallel_health_checks_can_be_turned_off(monkeypatch):
    assert Settings(_env_file=None).HEALTH_CHECK_PARALLEL is True

    monkeypatch.setenv("HEALTH_CHECK_PARALLEL", "false")

    assert Settings(_env_file=None).HEALTH_CHECK_PARALLEL is False


def test_cors_origins_are_comma_separated(monkeypatch):
    monkeypatch.setenv("CORS_ORIGIN", "http://a.test, http://b.test,")

    assert Settings(_env_file=None).cors_origins == ["http://a.test", "http://b.test"]


def test_field_names_can_be_passed_directly():
    config = Settings(_env_file=None, HTTP_PORT=4000, ENVIRONMENT=Environment.TESTING)

    assert config.HTTP_PORT == 4000
    assert config.is_testing()
