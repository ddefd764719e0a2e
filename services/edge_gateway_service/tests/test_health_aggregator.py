"""Tests for upstream health aggregation."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from unittest.mock import AsyncMock

import httpx
import pytest
from httpx import Response
from respx import MockRouter

from services.edge_gateway_service.health_aggregator import HealthAggregator
from services.edge_gateway_service.models.health_models import HealthCheckResult, HealthStatus
from services.edge_gateway_service.routing import ServiceDirectory


@pytest.fixture
def aggregator(directory, http_client, metrics) -> HealthAggregator:
    return HealthAggregator(directory, http_client, metrics)


def mock_all_healthy(respx_mock: MockRouter, *, except_host: str | None = None) -> None:
    for host in ("weather", "auth", "cache", "alert"):
        if host == except_host:
            continue
        respx_mock.get(f"http://{host}.test/health").mock(
            return_value=Response(200, json={"status": "ok"})
        )


class TestCheckOne:
    @pytest.mark.asyncio
    async def test_200_is_healthy(self, aggregator, registry, respx_mock: MockRouter):
        respx_mock.get("http://auth.test/health").mock(return_value=Response(200))

        result = await aggregator.check_one("auth")

        assert result.service == "auth"
        assert result.status == HealthStatus.HEALTHY
        assert result.response_time_ms >= 0
        assert (
            registry.get_sample_value(
                "gateway_health_probes_total", {"service": "auth", "status": "healthy"}
            )
            == 1.0
        )

    @pytest.mark.asyncio
    async def test_non_200_is_unhealthy(self, aggregator, respx_mock: MockRouter):
        respx_mock.get("http://auth.test/health").mock(return_value=Response(204))

        result = await aggregator.check_one("auth")

        assert result.status == HealthStatus.UNHEALTHY

    @pytest.mark.asyncio
    async def test_transport_error_is_unhealthy(self, aggregator, respx_mock: MockRouter):
        respx_mock.get("http://cache.test/health").mock(side_effect=httpx.ConnectError("down"))

        result = await aggregator.check_one("cache")

        assert result.status == HealthStatus.UNHEALTHY

    @pytest.mark.asyncio
    async def test_malformed_url_is_unhealthy(self, http_client, metrics, respx_mock: MockRouter):
        aggregator = HealthAggregator(
            ServiceDirectory.from_mapping({"cache": "http://cache.test:port"}), http_client, metrics
        )

        result = await aggregator.check_one("cache")

        assert result.status == HealthStatus.UNHEALTHY
        assert not respx_mock.calls

    @pytest.mark.asyncio
    async def test_unknown_service_is_unhealthy_with_zero_latency(
        self, aggregator, respx_mock: MockRouter
    ):
        result = await aggregator.check_one("billing")

        assert result.status == HealthStatus.UNHEALTHY
        assert result.response_time_ms == 0
        assert not respx_mock.calls

    @pytest.mark.asyncio
    async def test_timeout_is_unhealthy(self, metrics):
        async def hangs(*args, **kwargs):
            await asyncio.sleep(5)

        slow_client = AsyncMock()
        slow_client.get.side_effect = hangs
        aggregator = HealthAggregator(
            ServiceDirectory.from_mapping({"weather": "http://weather.test"}),
            slow_client,
            metrics,
            timeout_seconds=0.05,
        )

        result = await aggregator.check_one("weather")

        assert result.status == HealthStatus.UNHEALTHY
        assert result.response_time_ms >= 0

    def test_payload_uses_public_keys(self):
        result = HealthCheckResult(
            service="auth",
            status=HealthStatus.HEALTHY,
            response_time_ms=12,
            observed_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        )

        assert result.to_payload() == {
            "service": "auth",
            "status": "healthy",
            "responseTime": 12,
            "timestamp": "2024-01-01T00:00:00Z",
        }


class TestCheckAll:
    @pytest.mark.asyncio
    async def test_one_result_per_service_in_order(self, aggregator, respx_mock: MockRouter):
        mock_all_healthy(respx_mock)

        results = await aggregator.check_all()

        assert [result.service for result in results] == ["weather", "auth", "cache", "alert"]
        assert all(result.is_healthy for result in results)

    @pytest.mark.asyncio
    async def test_aggregate_is_unhealthy_if_any_probe_fails(
        self, aggregator, respx_mock: MockRouter
    ):
        mock_all_healthy(respx_mock, except_host="alert")
        respx_mock.get("http://alert.test/health").mock(return_value=Response(503))

        aggregate = await aggregator.aggregate()

        assert aggregate.status == HealthStatus.UNHEALTHY
        assert [entry.status for entry in aggregate.services] == [
            HealthStatus.HEALTHY,
            HealthStatus.HEALTHY,
            HealthStatus.HEALTHY,
            HealthStatus.UNHEALTHY,
        ]

    @pytest.mark.asyncio
    async def test_sequential_mode_keeps_order(
        self, directory, http_client, metrics, respx_mock: MockRouter
    ):
        mock_all_healthy(respx_mock)
        aggregator = HealthAggregator(directory, http_client, metrics, parallel=False)

        aggregate = await aggregator.aggregate()

        assert aggregate.status == HealthStatus.HEALTHY
        assert [entry.service for entry in aggregate.services] == aggregator.service_names()

    @pytest.mark.asyncio
    async def test_slow_probe_does_not_block_others(self, metrics):
        async def probe(url, **kwargs):
            if "weather" in url:
                await asyncio.sleep(5)
            return httpx.Response(200)

        client = AsyncMock()
        client.get.side_effect = probe
        aggregator = HealthAggregator(
            ServiceDirectory.from_mapping(
                {"weather": "http://weather.test", "auth": "http://auth.test"}
            ),
            client,
            metrics,
            timeout_seconds=0.1,
        )

        results = await asyncio.wait_for(aggregator.check_all(), timeout=2)

        assert [result.status for result in results] == [
            HealthStatus.UNHEALTHY,
            HealthStatus.HEALTHY,
        ]
