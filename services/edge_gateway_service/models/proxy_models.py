"""Per-call proxy records."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

HeaderValue = str | list[str]


class ProxyRequest(BaseModel):
    """An inbound request as seen by the proxy engine. Consumed once."""

    model_config = ConfigDict(frozen=True)

    original_path: str
    method: str
    headers: dict[str, HeaderValue] = Field(default_factory=dict)
    query: dict[str, str] = Field(default_factory=dict)
    body: Any = None


class ProxyResponse(BaseModel):
    """Response produced by the engine, relayed or synthesized.

    Headers are kept as ordered (name, value) pairs so repeated upstream
    headers such as ``set-cookie`` pass through intact.
    """

    model_config = ConfigDict(frozen=True)

    status_code: int
    headers: list[tuple[str, str]] = Field(default_factory=list)
    body: Any = None

    def header(self, name: str) -> str | None:
        """First value of header ``name`` (case-insensitive), if any."""
        wanted = name.lower()
        for key, value in self.headers:
            if key.lower() == wanted:
                return value
        return None


class UpstreamReply(BaseModel):
    """Fully read upstream response; ``body`` holds the raw, undecoded bytes."""

    model_config = ConfigDict(frozen=True)

    status_code: int
    headers: list[tuple[str, str]] = Field(default_factory=list)
    body: bytes = b""


class UpstreamTarget(BaseModel):
    """Rewritten upstream path plus the query parameters still to forward."""

    model_config = ConfigDict(frozen=True)

    path: str
    query: dict[str, str] = Field(default_factory=dict)
