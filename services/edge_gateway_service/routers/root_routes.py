"""Gateway landing route."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from dishka import FromDishka
from dishka.integrations.fastapi import inject
from fastapi import APIRouter, Request

from services.edge_gateway_service.app.rate_limiter import gateway_rate_limit
from services.edge_gateway_service.routing import ServiceDirectory

GATEWAY_VERSION = "1.0.0"

router = APIRouter(tags=["Gateway"])


@router.get("/")
@gateway_rate_limit
@inject
async def gateway_info(
    request: Request, directory: FromDishka[ServiceDirectory]
) -> dict[str, Any]:
    return {
        "message": "API Gateway is running",
        "version": GATEWAY_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "services": directory.as_dict(),
    }
