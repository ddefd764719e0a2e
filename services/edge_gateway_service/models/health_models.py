"""Health aggregation records. Computed per call, never persisted."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


class HealthCheckResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    service: str
    status: HealthStatus
    response_time_ms: int = Field(ge=0, serialization_alias="responseTime")
    observed_at: datetime = Field(serialization_alias="timestamp")

    @property
    def is_healthy(self) -> bool:
        return self.status == HealthStatus.HEALTHY

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class AggregateHealth(BaseModel):
    """Combined status: healthy iff every individual result is healthy."""

    model_config = ConfigDict(frozen=True)

    status: HealthStatus
    services: list[HealthCheckResult]

    @classmethod
    def from_results(cls, results: list[HealthCheckResult]) -> AggregateHealth:
        overall = (
            HealthStatus.HEALTHY
            if all(result.is_healthy for result in results)
            else HealthStatus.UNHEALTHY
        )
        return cls(status=overall, services=list(results))
