"""Gateway error taxonomy.

Each expected failure of the proxy pipeline is a ``GatewayError`` value that
the engine turns into a JSON ``{error, message}`` response; none of them are
raised to the caller.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

from services.edge_gateway_service.models.proxy_models import ProxyResponse

JSON_CONTENT_TYPE = ("content-type", "application/json")


class GatewayErrorKind(str, Enum):
    ROUTE_NOT_FOUND = "route_not_found"
    SERVICE_UNCONFIGURED = "service_unconfigured"
    METHOD_NOT_ALLOWED = "method_not_allowed"
    MISSING_REQUIRED_PARAMETER = "missing_required_parameter"
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"
    UPSTREAM_ERROR = "upstream_error"


class GatewayError(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: GatewayErrorKind
    error: str
    message: str
    status_code: int
    service: str | None = None

    @property
    def is_local_rejection(self) -> bool:
        """True when the request was refused before any upstream contact."""
        return self.kind not in (
            GatewayErrorKind.UPSTREAM_UNAVAILABLE,
            GatewayErrorKind.UPSTREAM_ERROR,
        )

    def to_response(self) -> ProxyResponse:
        return ProxyResponse(
            status_code=self.status_code,
            headers=[JSON_CONTENT_TYPE],
            body={"error": self.error, "message": self.message},
        )


def route_not_found(path: str) -> GatewayError:
    return GatewayError(
        kind=GatewayErrorKind.ROUTE_NOT_FOUND,
        error="route_not_found",
        message=f"No route found for path: {path}",
        status_code=404,
    )


def service_unconfigured(service: str) -> GatewayError:
    return GatewayError(
        kind=GatewayErrorKind.SERVICE_UNCONFIGURED,
        error="service_unconfigured",
        message=f"Service URL not configured for: {service}",
        status_code=503,
        service=service,
    )


def method_not_allowed(method: str, path_prefix: str, service: str) -> GatewayError:
    return GatewayError(
        kind=GatewayErrorKind.METHOD_NOT_ALLOWED,
        error="method_not_allowed",
        message=f"Method {method} not allowed for {path_prefix}",
        status_code=405,
        service=service,
    )


def missing_city(service: str) -> GatewayError:
    return GatewayError(
        kind=GatewayErrorKind.MISSING_REQUIRED_PARAMETER,
        error="missing_city",
        message="Provide ?city=NomeDaCidade",
        status_code=400,
        service=service,
    )


def upstream_unavailable(
    service: str, detail: str, status_code: int | None = None
) -> GatewayError:
    return GatewayError(
        kind=GatewayErrorKind.UPSTREAM_UNAVAILABLE,
        error="upstream_unavailable",
        message=detail,
        status_code=status_code or 500,
        service=service,
    )
