"""Startup setup for Edge Gateway Service."""

from __future__ import annotations

from dishka import AsyncContainer, make_async_container
from dishka.integrations.fastapi import FastapiProvider, setup_dishka
from fastapi import FastAPI
from prometheus_client import CollectorRegistry

from edge_service_libs.logging_utils import create_service_logger
from services.edge_gateway_service.app.di import EdgeGatewayProvider
from services.edge_gateway_service.config import Settings

logger = create_service_logger("edge_gateway.startup")


def create_di_container(
    config: Settings | None = None, registry: CollectorRegistry | None = None
) -> AsyncContainer:
    """Create and configure the DI container."""
    try:
        logger.info("Creating DI container...")
        container = make_async_container(
            EdgeGatewayProvider(config=config, registry=registry),
            FastapiProvider(),  # Provides Request object to context
        )
        logger.info("DI container created successfully")
        return container
    except Exception as e:
        logger.critical(f"Failed to create DI container: {e}", exc_info=True)
        raise


def setup_dependency_injection(app: FastAPI, container: AsyncContainer) -> None:
    """Setup Dishka integration with FastAPI."""
    try:
        logger.info("Setting up dependency injection...")
        setup_dishka(container, app)
        logger.info("Dependency injection setup completed")
    except Exception as e:
        logger.critical(f"Failed to setup dependency injection: {e}", exc_info=True)
        raise


async def shutdown_services(container: AsyncContainer) -> None:
    """Close APP-scoped resources, including the shared upstream connection pool."""
    await container.close()
    logger.info("Edge Gateway Service shutdown completed")
