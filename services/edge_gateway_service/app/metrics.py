"""Metrics definitions for the Edge Gateway Service."""

from __future__ import annotations

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Histogram


class GatewayMetrics:
    """A container for all Prometheus metrics for the Edge Gateway Service."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize metrics with optional registry for test isolation."""
        if registry is None:
            registry = REGISTRY
        self.proxy_requests_total = Counter(
            "gateway_proxy_requests_total",
            "Total number of proxied requests by outcome.",
            ["service", "method", "outcome"],
            registry=registry,
        )
        self.upstream_request_duration_seconds = Histogram(
            "gateway_upstream_request_duration_seconds",
            "Duration of calls to upstream services in seconds.",
            ["service"],
            registry=registry,
        )
        self.health_probes_total = Counter(
            "gateway_health_probes_total",
            "Total number of upstream health probes by result.",
            ["service", "status"],
            registry=registry,
        )
        self.api_errors_total = Counter(
            "gateway_api_errors_total",
            "Total number of gateway errors.",
            ["error_type"],
            registry=registry,
        )
