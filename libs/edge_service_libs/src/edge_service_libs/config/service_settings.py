"""Base settings shared by edge services."""

from __future__ import annotations

from enum import Enum

from pydantic import Field
from pydantic_settings import BaseSettings


class Environment(str, Enum):
    """Defines application environments."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class ServiceSettings(BaseSettings):
    """Common service settings with environment helpers.

    Subclasses declare their own ``model_config`` (env prefix, .env file) and
    service-specific fields.
    """

    SERVICE_NAME: str = "edge-service"

    ENVIRONMENT: Environment = Field(
        default=Environment.DEVELOPMENT,
        validation_alias="ENVIRONMENT",
        description="Runtime environment for the service",
    )

    def is_development(self) -> bool:
        return self.ENVIRONMENT == Environment.DEVELOPMENT

    def is_production(self) -> bool:
        return self.ENVIRONMENT == Environment.PRODUCTION

    def is_testing(self) -> bool:
        return self.ENVIRONMENT == Environment.TESTING
