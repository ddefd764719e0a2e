from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from dishka import AsyncContainer
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from edge_service_libs.error_handling.fastapi import (
    register_error_handlers as register_fastapi_error_handlers,
)
from edge_service_libs.logging_utils import configure_service_logging, create_service_logger
from services.edge_gateway_service.app.startup_setup import (
    create_di_container,
    setup_dependency_injection,
    shutdown_services,
)
from services.edge_gateway_service.config import Settings, settings

from ..routers import gateway_routes, root_routes
from ..routers.health_routes import router as health_router
from .middleware import (
    CorrelationIDMiddleware,
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
)
from .rate_limiter import configure_limiter

logger = create_service_logger("edge_gateway.main")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifecycle."""
    logger.info(
        "Starting Edge Gateway Service...",
        services=app.state.config.service_urls,
    )

    yield

    logger.info("Shutting down Edge Gateway Service...")
    await shutdown_services(app.state.di_container)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning(
        "Rate limit exceeded",
        path=request.url.path,
        ip=request.client.host if request.client else None,
    )
    return JSONResponse(
        status_code=429,
        content={
            "error": "rate_limited",
            "message": f"Too many requests from this IP, please try again later ({exc.detail})",
        },
    )


def create_app(
    container: AsyncContainer | None = None, config: Settings | None = None
) -> FastAPI:
    config = config if config is not None else settings

    configure_service_logging(
        config.SERVICE_NAME,
        environment=config.ENVIRONMENT.value,
        log_level=config.LOG_LEVEL,
    )

    app = FastAPI(
        title=config.SERVICE_NAME,
        version=root_routes.GATEWAY_VERSION,
        description="Edge Gateway - single entry point routing clients to backend services",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.config = config

    # Register error handlers
    register_fastapi_error_handlers(app)

    # Middleware added last runs first: CORS is innermost, correlation ID outermost.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=config.CORS_ALLOW_CREDENTIALS,
        allow_methods=config.CORS_ALLOW_METHODS,
        allow_headers=config.CORS_ALLOW_HEADERS,
    )

    # Add Rate Limiting Middleware
    app.state.limiter = configure_limiter(config)
    app.add_middleware(SlowAPIMiddleware)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    app.add_middleware(SecurityHeadersMiddleware, settings=config)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationIDMiddleware)

    # Include routers; the static routes listing must precede the catch-all proxy
    app.include_router(root_routes.router)
    app.include_router(health_router, tags=["Health"])
    app.include_router(gateway_routes.router, prefix=config.EXTERNAL_PATH_PREFIX, tags=["Gateway"])

    # Setup Dishka DI
    if container is None:
        container = create_di_container(config)
    setup_dependency_injection(app, container)

    # Store container reference for cleanup
    app.state.di_container = container

    return app


app = create_app()


def run() -> None:
    import uvicorn

    uvicorn.run(
        "services.edge_gateway_service.app.main:app",
        host=settings.HTTP_HOST,
        port=settings.HTTP_PORT,
        reload=settings.is_development(),
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
