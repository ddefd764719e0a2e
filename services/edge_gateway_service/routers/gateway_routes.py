"""Public proxy routes: route listing and the catch-all proxy."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from typing import Any

from dishka import FromDishka
from dishka.integrations.fastapi import inject
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, Response

from edge_service_libs.logging_utils import create_service_logger

from services.edge_gateway_service.app.rate_limiter import gateway_rate_limit
from services.edge_gateway_service.models.proxy_models import (
    HeaderValue,
    ProxyRequest,
    ProxyResponse,
)
from services.edge_gateway_service.protocols import ProxyEngineProtocol
from services.edge_gateway_service.routing import RouteTable

router = APIRouter()
logger = create_service_logger("edge_gateway.gateway_routes")

PROXY_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]

# Recomputed by the server for the relayed body
SERVER_MANAGED_RESPONSE_HEADERS = frozenset(
    {"connection", "keep-alive", "transfer-encoding", "content-length"}
)

DISCONNECT_POLL_SECONDS = 0.5


def inbound_path(request: Request) -> str:
    """Request path as the client sent it, percent-encoding intact."""
    raw_path = request.scope.get("raw_path")
    if not raw_path:
        return request.url.path
    return raw_path.decode("latin-1").split("?", 1)[0]


async def build_proxy_request(request: Request) -> ProxyRequest:
    """Capture the inbound request; repeated headers become lists."""
    headers: dict[str, HeaderValue] = {}
    for key, value in request.headers.items():
        existing = headers.get(key)
        if existing is None:
            headers[key] = value
        elif isinstance(existing, list):
            existing.append(value)
        else:
            headers[key] = [existing, value]

    return ProxyRequest(
        original_path=inbound_path(request),
        method=request.method,
        headers=headers,
        query=dict(request.query_params),
        body=await request.body(),
    )


def render_proxy_response(proxy_response: ProxyResponse) -> Response:
    body = proxy_response.body
    response: Response
    if isinstance(body, (bytes, bytearray)):
        response = Response(content=bytes(body), status_code=proxy_response.status_code)
    else:
        response = JSONResponse(content=body, status_code=proxy_response.status_code)

    for key, value in proxy_response.headers:
        lowered = key.lower()
        if lowered in SERVER_MANAGED_RESPONSE_HEADERS:
            continue
        if lowered == "content-type" and lowered in response.headers:
            continue
        response.headers.append(key, value)
    return response


async def _wait_for_disconnect(request: Request) -> None:
    while not await request.is_disconnected():
        await asyncio.sleep(DISCONNECT_POLL_SECONDS)


async def run_until_disconnected(request: Request, work: Awaitable[Any]) -> Any | None:
    """Await ``work`` unless the client goes away first; then cancel it and return None."""
    work_task = asyncio.ensure_future(work)
    watcher = asyncio.ensure_future(_wait_for_disconnect(request))
    try:
        done, _ = await asyncio.wait({work_task, watcher}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        watcher.cancel()
        if not work_task.done():
            work_task.cancel()

    if work_task in done:
        return work_task.result()
    return None


@router.get("/routes")
@gateway_rate_limit
@inject
async def list_routes(request: Request, route_table: FromDishka[RouteTable]) -> dict[str, Any]:
    """List the configured proxy routes as read-only metadata."""
    return {
        "message": "Available API Gateway routes",
        "routes": [route.describe() for route in route_table],
    }


@router.api_route(
    "/{path:path}",
    methods=PROXY_METHODS,
    summary="Upstream Proxy",
    description="Route the request to the backend service owning the path prefix",
)
@gateway_rate_limit
@inject
async def proxy_request(
    path: str,
    request: Request,
    engine: FromDishka[ProxyEngineProtocol],
) -> Response:
    proxy_req = await build_proxy_request(request)
    proxy_response = await run_until_disconnected(request, engine.proxy(proxy_req))

    if proxy_response is None:
        logger.warning(
            "Client disconnected, upstream call abandoned",
            method=request.method,
            path=request.url.path,
        )
        return Response(status_code=499)

    return render_proxy_response(proxy_response)
