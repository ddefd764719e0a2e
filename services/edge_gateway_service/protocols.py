"""
Protocols for Edge Gateway Service.

Defines the interfaces used for dependency injection. Routers and the proxy
engine depend on these protocols, not on concrete implementations.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Protocol

import httpx
from prometheus_client import Counter, Histogram

from edge_service_libs import Result

if TYPE_CHECKING:
    from services.edge_gateway_service.models import (
        AggregateHealth,
        GatewayError,
        HealthCheckResult,
        ProxyRequest,
        ProxyResponse,
        UpstreamTarget,
    )
    from services.edge_gateway_service.models.proxy_models import UpstreamReply


class HttpClientProtocol(Protocol):
    """Protocol for the outbound HTTP client."""

    async def send(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str | bytes] | None = None,
        params: dict[str, str] | None = None,
        content: bytes | None = None,
        json: Any = None,
        timeout: float | httpx.Timeout | None = None,
    ) -> UpstreamReply:
        """Send a request and read the raw response body to completion."""
        ...

    async def get(
        self,
        url: str,
        *,
        headers: Mapping[str, str | bytes] | None = None,
        timeout: float | httpx.Timeout | None = None,
    ) -> httpx.Response:
        """Send GET request."""
        ...


class RewriteStrategyProtocol(Protocol):
    """Per-service upstream path convention."""

    name: str

    def rewrite(
        self,
        service_name: str,
        relative_path: str,
        remainder: str,
        query: Mapping[str, str],
    ) -> Result[UpstreamTarget, GatewayError]: ...


class ProxyEngineProtocol(Protocol):
    async def proxy(self, request: ProxyRequest) -> ProxyResponse:
        """Route, rewrite and forward ``request``; never raises for gateway errors."""
        ...


class HealthAggregatorProtocol(Protocol):
    async def check_one(self, service_name: str) -> HealthCheckResult: ...

    async def check_all(self) -> list[HealthCheckResult]: ...

    async def aggregate(self) -> AggregateHealth: ...

    def service_names(self) -> list[str]: ...


class MetricsProtocol(Protocol):
    """Protocol for metrics collection matching GatewayMetrics exactly."""

    @property
    def proxy_requests_total(self) -> Counter:
        """Proxy outcomes by service, method and outcome."""
        ...

    @property
    def upstream_request_duration_seconds(self) -> Histogram:
        """Upstream call latency by service."""
        ...

    @property
    def health_probes_total(self) -> Counter:
        """Health probe results by service and status."""
        ...

    @property
    def api_errors_total(self) -> Counter:
        """Gateway errors by error category."""
        ...
