"""Health and metrics routes for Edge Gateway Service."""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Any

from dishka import FromDishka
from dishka.integrations.fastapi import inject
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest

from edge_service_libs.logging_utils import create_service_logger

from services.edge_gateway_service.app.rate_limiter import gateway_rate_limit
from services.edge_gateway_service.protocols import HealthAggregatorProtocol

router = APIRouter(tags=["Health"])
logger = create_service_logger("edge_gateway.routers.health")

_STARTED_AT = time.monotonic()


def gateway_uptime_seconds() -> float:
    return round(time.monotonic() - _STARTED_AT, 3)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/health")
@gateway_rate_limit
@inject
async def health_check(request: Request, aggregator: FromDishka[HealthAggregatorProtocol]):
    """Aggregate status of the gateway and every configured upstream.

    The overall status lives in the body; the response itself is 200 unless
    aggregation fails outright.
    """
    try:
        aggregate = await aggregator.aggregate()
        return {
            "status": aggregate.status.value,
            "timestamp": _now_iso(),
            "services": [result.to_payload() for result in aggregate.services],
            "gateway": {"status": "healthy", "uptime_seconds": gateway_uptime_seconds()},
        }
    except Exception as e:
        logger.error(f"Health check failed: {e}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "status": "unhealthy",
                "error": "Failed to check services health",
                "timestamp": _now_iso(),
            },
        )


@router.get("/health/services/list")
@gateway_rate_limit
@inject
async def list_services(
    request: Request, aggregator: FromDishka[HealthAggregatorProtocol]
) -> dict[str, Any]:
    names = aggregator.service_names()
    return {"services": names, "count": len(names)}


@router.get("/health/{service}")
@gateway_rate_limit
@inject
async def service_health(
    request: Request, service: str, aggregator: FromDishka[HealthAggregatorProtocol]
):
    """Probe a single upstream. Unknown names come back unhealthy, never 404."""
    try:
        result = await aggregator.check_one(service)
        return result.to_payload()
    except Exception as e:
        logger.error(f"Health check failed for {service}: {e}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to check service health", "service": service},
        )


@router.get("/metrics", response_class=PlainTextResponse)
@gateway_rate_limit
@inject
async def metrics(request: Request, registry: FromDishka[CollectorRegistry]):
    """Prometheus metrics endpoint."""
    try:
        metrics_data = generate_latest(registry)
        return PlainTextResponse(content=metrics_data, media_type=CONTENT_TYPE_LATEST)
    except Exception as e:
        logger.error(f"Error generating metrics: {e}", exc_info=True)
        return PlainTextResponse(content="Error generating metrics", status_code=500)
