"""Proxy decision engine.

``resolve`` turns a ProxyRequest into an upstream call plan or a GatewayError
without any I/O. ``proxy`` dispatches the plan and maps every outcome,
including transport failures, to a well-formed ProxyResponse.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Any

import httpx

from edge_service_libs import Result
from edge_service_libs.logging_utils import create_service_logger

from services.edge_gateway_service.header_sanitizer import sanitize_headers
from services.edge_gateway_service.models.error_models import (
    GatewayError,
    GatewayErrorKind,
    method_not_allowed,
    route_not_found,
    service_unconfigured,
    upstream_unavailable,
)
from services.edge_gateway_service.models.proxy_models import ProxyRequest, ProxyResponse
from services.edge_gateway_service.path_rewriter import PathRewriter
from services.edge_gateway_service.protocols import HttpClientProtocol, MetricsProtocol
from services.edge_gateway_service.routing import RouteTable, ServiceDirectory

logger = create_service_logger("edge_gateway.proxy_engine")

BODYLESS_METHODS = frozenset({"GET", "HEAD"})


@dataclass(frozen=True)
class UpstreamCall:
    service: str
    method: str
    url: str
    query: dict[str, str]
    headers: dict[str, str | bytes]
    content: bytes | None = None
    json: Any = None


def _encode_body(method: str, body: Any) -> tuple[bytes | None, Any]:
    """Split a request body into (raw content, structured json) for dispatch."""
    if method in BODYLESS_METHODS or body is None:
        return None, None
    if isinstance(body, (bytes, bytearray)):
        return (bytes(body) or None), None
    if isinstance(body, str):
        return (body.encode("utf-8") or None), None
    return None, body


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


class ProxyEngine:
    def __init__(
        self,
        route_table: RouteTable,
        directory: ServiceDirectory,
        rewriter: PathRewriter,
        http_client: HttpClientProtocol,
        metrics: MetricsProtocol,
        *,
        timeout_seconds: float = 10.0,
        gateway_marker: str = "api-gateway",
    ) -> None:
        self._routes = route_table
        self._directory = directory
        self._rewriter = rewriter
        self._http_client = http_client
        self._metrics = metrics
        self._timeout = timeout_seconds
        self._gateway_marker = gateway_marker

    def resolve(self, request: ProxyRequest) -> Result[UpstreamCall, GatewayError]:
        route = self._routes.find_route(request.original_path)
        if route is None:
            return Result.err(route_not_found(request.original_path))

        base_url = self._directory.resolve(route.service_name)
        if base_url is None:
            return Result.err(service_unconfigured(route.service_name))

        method = request.method.upper()
        if not route.allows(method):
            return Result.err(method_not_allowed(method, route.path_prefix, route.service_name))

        rewritten = self._rewriter.rewrite(route, request.original_path, request.query)
        if rewritten.is_err:
            return Result.err(rewritten.error)
        target = rewritten.value

        content, json_body = _encode_body(method, request.body)
        return Result.ok(
            UpstreamCall(
                service=route.service_name,
                method=method,
                url=f"{base_url.rstrip('/')}{target.path}",
                query=target.query,
                headers=sanitize_headers(request.headers, self._gateway_marker),
                content=content,
                json=json_body,
            )
        )

    async def proxy(self, request: ProxyRequest) -> ProxyResponse:
        started = time.perf_counter()
        resolution = self.resolve(request)
        if resolution.is_err:
            return self._reject(request, resolution.error, started)

        call = resolution.value
        logger.info(
            f"Proxy -> {call.service}",
            method=call.method,
            path=request.original_path,
            target_url=call.url,
        )

        try:
            with self._metrics.upstream_request_duration_seconds.labels(
                service=call.service
            ).time():
                reply = await asyncio.wait_for(
                    self._http_client.send(
                        call.method,
                        call.url,
                        headers=call.headers,
                        params=call.query,
                        content=call.content,
                        json=call.json,
                    ),
                    timeout=self._timeout,
                )
        except asyncio.TimeoutError:
            error = upstream_unavailable(
                call.service, f"Upstream {call.service} timed out after {self._timeout:g}s"
            )
            return self._fail(request, call, error, started)
        except (httpx.HTTPError, httpx.InvalidURL, UnicodeError) as e:
            status_code = e.response.status_code if isinstance(e, httpx.HTTPStatusError) else None
            error = upstream_unavailable(call.service, str(e) or type(e).__name__, status_code)
            return self._fail(request, call, error, started)

        elapsed = _elapsed_ms(started)
        if 200 <= reply.status_code < 300:
            outcome = "success"
            logger.info(
                "Proxy OK",
                service=call.service,
                method=call.method,
                path=request.original_path,
                status_code=reply.status_code,
                elapsed_ms=elapsed,
            )
        else:
            outcome = GatewayErrorKind.UPSTREAM_ERROR.value
            logger.warning(
                "Proxy upstream error",
                service=call.service,
                method=call.method,
                path=request.original_path,
                status_code=reply.status_code,
                elapsed_ms=elapsed,
            )
        self._metrics.proxy_requests_total.labels(
            service=call.service, method=call.method, outcome=outcome
        ).inc()

        return ProxyResponse(status_code=reply.status_code, headers=reply.headers, body=reply.body)

    def _reject(self, request: ProxyRequest, error: GatewayError, started: float) -> ProxyResponse:
        logger.warning(
            "Proxy rejected",
            path=request.original_path,
            method=request.method,
            service=error.service,
            error=error.error,
            detail=error.message,
            elapsed_ms=_elapsed_ms(started),
        )
        self._count_error(request, error)
        return error.to_response()

    def _fail(
        self, request: ProxyRequest, call: UpstreamCall, error: GatewayError, started: float
    ) -> ProxyResponse:
        logger.error(
            "Proxy FAIL",
            path=request.original_path,
            method=call.method,
            service=call.service,
            target_url=call.url,
            error=error.error,
            detail=error.message,
            elapsed_ms=_elapsed_ms(started),
        )
        self._count_error(request, error)
        return error.to_response()

    def _count_error(self, request: ProxyRequest, error: GatewayError) -> None:
        self._metrics.proxy_requests_total.labels(
            service=error.service or "none",
            method=request.method.upper(),
            outcome=error.kind.value,
        ).inc()
        self._metrics.api_errors_total.labels(error_type=error.error).inc()
