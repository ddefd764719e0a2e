"""Static routing configuration records: routes and upstream endpoints."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Route(BaseModel):
    """A URL prefix mapped to a backend service and its allowed methods."""

    model_config = ConfigDict(frozen=True)

    path_prefix: str = Field(description="Inbound path prefix, including the public prefix")
    service_name: str
    allowed_methods: frozenset[str]
    requires_auth: bool = False

    @field_validator("allowed_methods", mode="before")
    @classmethod
    def _normalize_methods(cls, value: Any) -> frozenset[str]:
        return frozenset(str(method).upper() for method in value)

    def allows(self, method: str) -> bool:
        return method.upper() in self.allowed_methods

    def describe(self) -> dict[str, Any]:
        """Public metadata shape used by the route listing endpoint."""
        return {
            "path": self.path_prefix,
            "service": self.service_name,
            "methods": sorted(self.allowed_methods),
            "requiresAuth": self.requires_auth,
        }


class ServiceEndpoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    base_url: str
