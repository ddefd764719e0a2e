"""Upstream health aggregation.

Probes are pulled on demand by the health endpoints; nothing runs in the
background. Each probe carries its own timeout, so a slow service only ever
affects its own entry.
"""

from __future__ import annotations

import asyncio
import time
from datetime import datetime, timezone

import httpx

from edge_service_libs.logging_utils import create_service_logger

from services.edge_gateway_service.models.health_models import (
    AggregateHealth,
    HealthCheckResult,
    HealthStatus,
)
from services.edge_gateway_service.protocols import HttpClientProtocol, MetricsProtocol
from services.edge_gateway_service.routing import ServiceDirectory

logger = create_service_logger("edge_gateway.health_aggregator")


class HealthAggregator:
    def __init__(
        self,
        directory: ServiceDirectory,
        http_client: HttpClientProtocol,
        metrics: MetricsProtocol,
        *,
        health_path: str = "/health",
        timeout_seconds: float = 5.0,
        parallel: bool = True,
    ) -> None:
        self._directory = directory
        self._http_client = http_client
        self._metrics = metrics
        self._health_path = health_path
        self._timeout = timeout_seconds
        self._parallel = parallel

    def service_names(self) -> list[str]:
        return self._directory.service_names()

    async def check_one(self, service_name: str) -> HealthCheckResult:
        """Probe one service. Unknown names report unhealthy with zero latency."""
        started = time.perf_counter()
        base_url = self._directory.resolve(service_name)

        if base_url is None:
            return self._result(service_name, HealthStatus.UNHEALTHY, 0)

        url = f"{base_url.rstrip('/')}{self._health_path}"
        try:
            response = await asyncio.wait_for(
                self._http_client.get(url, timeout=self._timeout), timeout=self._timeout
            )
        except (httpx.HTTPError, httpx.InvalidURL, UnicodeError, asyncio.TimeoutError) as e:
            elapsed = int((time.perf_counter() - started) * 1000)
            logger.error(
                f"Health check failed for {service_name}",
                service=service_name,
                error=str(e) or type(e).__name__,
                response_time_ms=elapsed,
            )
            return self._result(service_name, HealthStatus.UNHEALTHY, elapsed)

        elapsed = int((time.perf_counter() - started) * 1000)
        status = HealthStatus.HEALTHY if response.status_code == 200 else HealthStatus.UNHEALTHY
        logger.info(
            f"Health check for {service_name}",
            service=service_name,
            status=status.value,
            status_code=response.status_code,
            response_time_ms=elapsed,
        )
        return self._result(service_name, status, elapsed)

    async def check_all(self) -> list[HealthCheckResult]:
        """One result per configured service, in directory order."""
        names = self.service_names()
        if self._parallel:
            return list(await asyncio.gather(*(self.check_one(name) for name in names)))

        results: list[HealthCheckResult] = []
        for name in names:
            results.append(await self.check_one(name))
        return results

    async def aggregate(self) -> AggregateHealth:
        return AggregateHealth.from_results(await self.check_all())

    def _result(self, service: str, status: HealthStatus, elapsed_ms: int) -> HealthCheckResult:
        self._metrics.health_probes_total.labels(service=service, status=status.value).inc()
        return HealthCheckResult(
            service=service,
            status=status,
            response_time_ms=elapsed_ms,
            observed_at=datetime.now(timezone.utc),
        )
