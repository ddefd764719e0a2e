"""
Data models for Edge Gateway Service.

Immutable records for routing configuration, per-call proxy traffic, health
results and the gateway error taxonomy.
"""

from services.edge_gateway_service.models.error_models import GatewayError, GatewayErrorKind
from services.edge_gateway_service.models.health_models import (
    AggregateHealth,
    HealthCheckResult,
    HealthStatus,
)
from services.edge_gateway_service.models.proxy_models import (
    ProxyRequest,
    ProxyResponse,
    UpstreamTarget,
)
from services.edge_gateway_service.models.routing_models import Route, ServiceEndpoint

__all__ = [
    "AggregateHealth",
    "GatewayError",
    "GatewayErrorKind",
    "HealthCheckResult",
    "HealthStatus",
    "ProxyRequest",
    "ProxyResponse",
    "Route",
    "ServiceEndpoint",
    "UpstreamTarget",
]
