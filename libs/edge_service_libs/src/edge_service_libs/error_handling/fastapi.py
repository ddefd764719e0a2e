"""Application-boundary error handlers for FastAPI services.

Every response produced here is JSON shaped as
``{error, message, statusCode, timestamp}``. Exception detail and stack traces
go to the log only.
"""

from __future__ import annotations

from datetime import datetime, timezone
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from edge_service_libs.logging_utils import create_service_logger

logger = create_service_logger("edge_service_libs.error_handling")


def build_error_body(status_code: int, error: str, message: str) -> dict[str, str | int]:
    return {
        "error": error,
        "message": message,
        "statusCode": status_code,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


def _reason_phrase(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Error"


def register_error_handlers(app: FastAPI) -> None:
    """Register the not-found, HTTP error and catch-all handlers on ``app``."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        if exc.status_code == 404:
            message = f"Route {request.method} {request.url.path} not found"
        else:
            message = str(exc.detail)

        logger.info(
            "HTTP error response",
            path=request.url.path,
            method=request.method,
            status_code=exc.status_code,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=build_error_body(exc.status_code, _reason_phrase(exc.status_code), message),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "Unhandled error",
            path=request.url.path,
            method=request.method,
            client_ip=request.client.host if request.client else None,
            error=str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content=build_error_body(
                500, "Internal Server Error", "An unexpected error occurred"
            ),
        )
