"""Route table and service directory.

Both are built once at startup from settings and injected wherever needed.
Route order is significant: lookup returns the first route whose prefix
matches, so an earlier, shorter prefix shadows a later, longer one.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping

from services.edge_gateway_service.config import Settings
from services.edge_gateway_service.models.routing_models import Route, ServiceEndpoint


class RouteTable:
    def __init__(self, routes: Iterable[Route]) -> None:
        self._routes: tuple[Route, ...] = tuple(routes)

    @property
    def routes(self) -> tuple[Route, ...]:
        return self._routes

    def __iter__(self) -> Iterator[Route]:
        return iter(self._routes)

    def __len__(self) -> int:
        return len(self._routes)

    def find_route(self, path: str) -> Route | None:
        for route in self._routes:
            if path.startswith(route.path_prefix):
                return route
        return None


class ServiceDirectory:
    """Service name to upstream base URL. Empty URLs count as unconfigured."""

    def __init__(self, endpoints: Iterable[ServiceEndpoint]) -> None:
        self._endpoints: dict[str, ServiceEndpoint] = {}
        for endpoint in endpoints:
            if endpoint.name in self._endpoints:
                raise ValueError(f"Duplicate service endpoint: {endpoint.name}")
            self._endpoints[endpoint.name] = endpoint

    @classmethod
    def from_mapping(cls, urls: Mapping[str, str]) -> ServiceDirectory:
        return cls(ServiceEndpoint(name=name, base_url=url) for name, url in urls.items())

    def resolve(self, service_name: str) -> str | None:
        endpoint = self._endpoints.get(service_name)
        if endpoint is None or not endpoint.base_url:
            return None
        return endpoint.base_url

    def service_names(self) -> list[str]:
        return list(self._endpoints)

    def as_dict(self) -> dict[str, str]:
        return {name: endpoint.base_url for name, endpoint in self._endpoints.items()}


def build_route_table(config: Settings) -> RouteTable:
    prefix = config.EXTERNAL_PATH_PREFIX.rstrip("/")
    full_access = ["GET", "POST", "PUT", "DELETE"]
    return RouteTable(
        [
            Route(
                path_prefix=f"{prefix}/weather",
                service_name="weather",
                allowed_methods=["GET", "POST"],
            ),
            Route(
                path_prefix=f"{prefix}/auth",
                service_name="auth",
                allowed_methods=full_access,
                requires_auth=True,
            ),
            Route(
                path_prefix=f"{prefix}/cache",
                service_name="cache",
                allowed_methods=full_access,
            ),
            Route(
                path_prefix=f"{prefix}/alerts",
                service_name="alert",
                allowed_methods=full_access,
                requires_auth=True,
            ),
        ]
    )


def build_service_directory(config: Settings) -> ServiceDirectory:
    return ServiceDirectory.from_mapping(config.service_urls)
