"""Upstream path rewriting.

The public path is reduced to the part that follows the matched route's own
segment, then handed to the rewrite strategy registered for the route's
service. Services without an entry use plain passthrough.
"""

from __future__ import annotations

from collections.abc import Mapping
from urllib.parse import quote

from edge_service_libs import Result

from services.edge_gateway_service.config import Settings
from services.edge_gateway_service.models.error_models import GatewayError, missing_city
from services.edge_gateway_service.models.proxy_models import UpstreamTarget
from services.edge_gateway_service.models.routing_models import Route
from services.edge_gateway_service.protocols import RewriteStrategyProtocol

# Characters encodeURIComponent leaves alone besides alphanumerics and "-_.~"
_URI_COMPONENT_SAFE = "!*'()"


def _with_leading_slash(path: str) -> str:
    if not path:
        return "/"
    return path if path.startswith("/") else f"/{path}"


def _normalize_sub_path(sub_path: str) -> str:
    cleaned = sub_path.strip().rstrip("/")
    if cleaned and not cleaned.startswith("/"):
        cleaned = f"/{cleaned}"
    return cleaned


class PassthroughRewrite:
    """Forward whatever follows the route segment, query untouched."""

    name = "passthrough"

    def rewrite(
        self,
        service_name: str,
        relative_path: str,
        remainder: str,
        query: Mapping[str, str],
    ) -> Result[UpstreamTarget, GatewayError]:
        return Result.ok(UpstreamTarget(path=_with_leading_slash(remainder), query=dict(query)))


class CityLookupRewrite:
    """Turn ``?city=X`` (or ``?q=X``) into ``<sub_path>/current/X``.

    Without a city, a path below the route segment is forwarded whole behind
    ``sub_path``: ``/api/weather/current/Recife`` goes to
    ``<sub_path>/weather/current/Recife``. Requests carrying neither are
    rejected locally with ``missing_city``.
    """

    name = "city_lookup"
    city_params = ("city", "q")

    def __init__(self, sub_path: str = "") -> None:
        self.sub_path = _normalize_sub_path(sub_path)

    def _city(self, query: Mapping[str, str]) -> str:
        for param in self.city_params:
            if param in query:
                return query[param].strip()
        return ""

    def rewrite(
        self,
        service_name: str,
        relative_path: str,
        remainder: str,
        query: Mapping[str, str],
    ) -> Result[UpstreamTarget, GatewayError]:
        forwarded = dict(query)
        city = self._city(query)

        if city:
            for param in self.city_params:
                forwarded.pop(param, None)
            encoded = quote(city, safe=_URI_COMPONENT_SAFE)
            return Result.ok(
                UpstreamTarget(path=f"{self.sub_path}/current/{encoded}", query=forwarded)
            )

        if remainder in ("", "/"):
            return Result.err(missing_city(service_name))

        return Result.ok(UpstreamTarget(path=f"{self.sub_path}{relative_path}", query=forwarded))


class PathRewriter:
    def __init__(
        self,
        external_prefix: str = "/api",
        strategies: Mapping[str, RewriteStrategyProtocol] | None = None,
        default_strategy: RewriteStrategyProtocol | None = None,
    ) -> None:
        self.external_prefix = external_prefix.rstrip("/")
        self._strategies = dict(strategies or {})
        self._default = default_strategy or PassthroughRewrite()

    def strategy_for(self, service_name: str) -> RewriteStrategyProtocol:
        return self._strategies.get(service_name, self._default)

    def relative_path(self, path: str) -> str:
        """Strip the public prefix: ``/api/weather/x`` -> ``/weather/x``."""
        prefix = self.external_prefix
        if not prefix:
            return path or "/"
        if path == prefix:
            return "/"
        if path.startswith(f"{prefix}/"):
            return path[len(prefix) :]
        return path

    def remainder(self, route: Route, path: str) -> str:
        """Path left after the route's own segment, e.g. ``/x/y`` for ``/api/cache/x/y``."""
        relative = self.relative_path(path)
        route_segment = self.relative_path(route.path_prefix)
        if relative.startswith(route_segment):
            return relative[len(route_segment) :]
        return relative

    def rewrite(
        self, route: Route, path: str, query: Mapping[str, str]
    ) -> Result[UpstreamTarget, GatewayError]:
        strategy = self.strategy_for(route.service_name)
        return strategy.rewrite(
            route.service_name, self.relative_path(path), self.remainder(route, path), query
        )


def build_path_rewriter(config: Settings) -> PathRewriter:
    return PathRewriter(
        external_prefix=config.EXTERNAL_PATH_PREFIX,
        strategies={"weather": CityLookupRewrite(config.WEATHER_PATH_PREFIX)},
    )
