"""
Configuration for Edge Gateway Service.

Uses Pydantic settings for environment-based configuration. Values are read
once at startup; the service URLs here become the immutable service directory.
"""

from __future__ import annotations

from pydantic import AliasChoices, Field
from pydantic_settings import SettingsConfigDict

from edge_service_libs.config import Environment, ServiceSettings


class Settings(ServiceSettings):
    """Configuration settings for Edge Gateway Service."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="EDGE_GATEWAY_",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Service identity
    SERVICE_NAME: str = "edge-gateway-service"

    ENVIRONMENT: Environment = Field(
        default=Environment.DEVELOPMENT,
        validation_alias="ENVIRONMENT",
        description="Runtime environment for the service",
    )

    # HTTP server configuration
    HTTP_HOST: str = Field(default="0.0.0.0", description="HTTP server host")
    HTTP_PORT: int = Field(
        default=3000,
        description="HTTP server port",
        validation_alias=AliasChoices("EDGE_GATEWAY_HTTP_PORT", "PORT"),
    )

    # Logging configuration
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level",
        validation_alias=AliasChoices("EDGE_GATEWAY_LOG_LEVEL", "LOG_LEVEL"),
    )

    # CORS configuration
    CORS_ORIGIN: str = Field(
        default="http://localhost:3005",
        description="Allowed CORS origin(s), comma separated",
        validation_alias=AliasChoices("EDGE_GATEWAY_CORS_ORIGIN", "CORS_ORIGIN"),
    )
    CORS_ALLOW_CREDENTIALS: bool = Field(
        default=True, description="Allow credentials in CORS requests"
    )
    CORS_ALLOW_METHODS: list[str] = Field(
        default=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        description="Allowed HTTP methods for CORS",
    )
    CORS_ALLOW_HEADERS: list[str] = Field(
        default=[
            "Origin",
            "X-Requested-With",
            "Content-Type",
            "Accept",
            "Authorization",
            "X-Forwarded-For",
            "X-Real-Ip",
            "X-Correlation-ID",
        ],
        description="Allowed headers for CORS requests",
    )

    # Rate limiting configuration
    RATE_LIMIT_ENABLED: bool = Field(default=True, description="Enable rate limiting")
    RATE_LIMIT_WINDOW_SECONDS: int = Field(
        default=900,
        description="Rate limit window in seconds",
        validation_alias=AliasChoices(
            "EDGE_GATEWAY_RATE_LIMIT_WINDOW_SECONDS", "RATE_LIMIT_WINDOW_SECONDS"
        ),
    )
    RATE_LIMIT_MAX_REQUESTS: int = Field(
        default=100,
        description="Requests allowed per client within one window",
        validation_alias=AliasChoices(
            "EDGE_GATEWAY_RATE_LIMIT_MAX_REQUESTS", "RATE_LIMIT_MAX_REQUESTS"
        ),
    )

    # Upstream service URLs
    WEATHER_SERVICE_URL: str = Field(
        default="http://localhost:3001",
        description="Weather service base URL",
        validation_alias=AliasChoices(
            "EDGE_GATEWAY_WEATHER_SERVICE_URL", "WEATHER_SERVICE_URL"
        ),
    )
    AUTH_SERVICE_URL: str = Field(
        default="http://localhost:3002",
        description="Auth service base URL",
        validation_alias=AliasChoices("EDGE_GATEWAY_AUTH_SERVICE_URL", "AUTH_SERVICE_URL"),
    )
    CACHE_SERVICE_URL: str = Field(
        default="http://localhost:3003",
        description="Cache service base URL",
        validation_alias=AliasChoices("EDGE_GATEWAY_CACHE_SERVICE_URL", "CACHE_SERVICE_URL"),
    )
    ALERT_SERVICE_URL: str = Field(
        default="http://localhost:3004",
        description="Alert service base URL",
        validation_alias=AliasChoices("EDGE_GATEWAY_ALERT_SERVICE_URL", "ALERT_SERVICE_URL"),
    )

    # Path rewriting
    EXTERNAL_PATH_PREFIX: str = Field(
        default="/api", description="Public prefix under which all proxied routes live"
    )
    WEATHER_PATH_PREFIX: str = Field(
        default="",
        description="Sub-path prepended to weather upstream paths (e.g. '/weather')",
        validation_alias=AliasChoices(
            "EDGE_GATEWAY_WEATHER_PATH_PREFIX", "WEATHER_PATH_PREFIX"
        ),
    )
    GATEWAY_MARKER: str = Field(
        default="api-gateway", description="Value sent upstream as x-gateway-service"
    )

    # HTTP client timeouts
    PROXY_TIMEOUT_SECONDS: float = Field(
        default=10.0, description="Total timeout for one proxied upstream call"
    )
    HTTP_CLIENT_CONNECT_TIMEOUT_SECONDS: float = Field(
        default=5.0, description="Connect timeout for upstream connections"
    )

    # Health aggregation
    HEALTH_CHECK_PATH: str = Field(default="/health", description="Upstream health endpoint")
    HEALTH_CHECK_TIMEOUT_SECONDS: float = Field(
        default=5.0, description="Total timeout for one health probe"
    )
    HEALTH_CHECK_PARALLEL: bool = Field(
        default=True,
        description="Probe upstream services concurrently",
        validation_alias=AliasChoices(
            "EDGE_GATEWAY_HEALTH_CHECK_PARALLEL", "HEALTH_CHECK_PARALLEL"
        ),
    )

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ORIGIN.split(",") if origin.strip()]

    @property
    def service_urls(self) -> dict[str, str]:
        """Upstream base URLs in the fixed directory order."""
        return {
            "weather": self.WEATHER_SERVICE_URL,
            "auth": self.AUTH_SERVICE_URL,
            "cache": self.CACHE_SERVICE_URL,
            "alert": self.ALERT_SERVICE_URL,
        }


# Global settings instance
settings = Settings()
