"""Middleware for Edge Gateway Service."""

import time
from typing import Any
from uuid import UUID, uuid4

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from edge_service_libs.logging_utils import (
    bind_request_context,
    clear_request_context,
    create_service_logger,
)

logger = create_service_logger("edge_gateway.middleware")


class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """Middleware to ensure every request has a correlation ID as UUID."""

    async def dispatch(self, request: Request, call_next):
        """Extract or generate correlation ID and store as UUID in request state."""
        x_correlation_id = request.headers.get("X-Correlation-ID")
        if x_correlation_id:
            try:
                correlation_id = UUID(x_correlation_id)
            except ValueError:
                logger.warning(
                    f"Invalid correlation ID format: {x_correlation_id}, generating new one"
                )
                correlation_id = uuid4()
        else:
            correlation_id = uuid4()

        request.state.correlation_id = correlation_id
        bind_request_context(str(correlation_id))

        try:
            response = await call_next(request)
        finally:
            clear_request_context()

        response.headers["X-Correlation-ID"] = str(correlation_id)

        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request on arrival and on completion with elapsed time."""

    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        client_ip = request.client.host if request.client else None

        logger.info(
            "Incoming request",
            method=request.method,
            path=request.url.path,
            ip=client_ip,
            user_agent=request.headers.get("user-agent"),
        )

        response = await call_next(request)

        logger.info(
            "Request completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            response_time_ms=int((time.perf_counter() - started) * 1000),
            ip=client_ip,
        )
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add baseline security headers to every response."""

    def __init__(self, app: Any, settings: Any | None = None) -> None:
        super().__init__(app)
        self.settings = settings

    def _send_hsts(self) -> bool:
        if not self.settings:
            return False
        return not bool(self.settings.is_development())

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        response.headers.setdefault("X-XSS-Protection", "0")
        if self._send_hsts():
            response.headers.setdefault(
                "Strict-Transport-Security", "max-age=15552000; includeSubDomains"
            )

        return response
