from __future__ import annotations

from collections.abc import AsyncIterator

import httpx
from dishka import Provider, Scope, provide
from prometheus_client import REGISTRY, CollectorRegistry

from services.edge_gateway_service.app.metrics import GatewayMetrics
from services.edge_gateway_service.config import Settings, settings
from services.edge_gateway_service.health_aggregator import HealthAggregator
from services.edge_gateway_service.implementations.http_client import GatewayHttpClient
from services.edge_gateway_service.path_rewriter import PathRewriter, build_path_rewriter
from services.edge_gateway_service.protocols import (
    HealthAggregatorProtocol,
    HttpClientProtocol,
    MetricsProtocol,
    ProxyEngineProtocol,
)
from services.edge_gateway_service.proxy_engine import ProxyEngine
from services.edge_gateway_service.routing import (
    RouteTable,
    ServiceDirectory,
    build_route_table,
    build_service_directory,
)


class EdgeGatewayProvider(Provider):
    """APP-scoped gateway wiring.

    ``config`` and ``registry`` default to the process-wide settings and the
    global Prometheus registry; tests pass isolated ones.
    """

    scope = Scope.APP

    def __init__(
        self, config: Settings | None = None, registry: CollectorRegistry | None = None
    ) -> None:
        super().__init__()
        self._config = config
        self._registry = registry

    @provide
    def get_config(self) -> Settings:
        return self._config if self._config is not None else settings

    @provide
    async def get_httpx_client(self, config: Settings) -> AsyncIterator[httpx.AsyncClient]:
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(
                config.PROXY_TIMEOUT_SECONDS,
                connect=config.HTTP_CLIENT_CONNECT_TIMEOUT_SECONDS,
            ),
            follow_redirects=False,
        ) as httpx_client:
            yield httpx_client

    @provide
    def get_http_client(self, httpx_client: httpx.AsyncClient) -> HttpClientProtocol:
        return GatewayHttpClient(httpx_client)

    @provide
    def provide_route_table(self, config: Settings) -> RouteTable:
        return build_route_table(config)

    @provide
    def provide_service_directory(self, config: Settings) -> ServiceDirectory:
        return build_service_directory(config)

    @provide
    def provide_path_rewriter(self, config: Settings) -> PathRewriter:
        return build_path_rewriter(config)

    @provide
    def provide_registry(self) -> CollectorRegistry:
        return self._registry if self._registry is not None else REGISTRY

    @provide
    def provide_metrics(self, registry: CollectorRegistry) -> MetricsProtocol:
        return GatewayMetrics(registry=registry)

    @provide
    def provide_proxy_engine(
        self,
        config: Settings,
        route_table: RouteTable,
        directory: ServiceDirectory,
        rewriter: PathRewriter,
        http_client: HttpClientProtocol,
        metrics: MetricsProtocol,
    ) -> ProxyEngineProtocol:
        return ProxyEngine(
            route_table,
            directory,
            rewriter,
            http_client,
            metrics,
            timeout_seconds=config.PROXY_TIMEOUT_SECONDS,
            gateway_marker=config.GATEWAY_MARKER,
        )

    @provide
    def provide_health_aggregator(
        self,
        config: Settings,
        directory: ServiceDirectory,
        http_client: HttpClientProtocol,
        metrics: MetricsProtocol,
    ) -> HealthAggregatorProtocol:
        return HealthAggregator(
            directory,
            http_client,
            metrics,
            health_path=config.HEALTH_CHECK_PATH,
            timeout_seconds=config.HEALTH_CHECK_TIMEOUT_SECONDS,
            parallel=config.HEALTH_CHECK_PARALLEL,
        )
