"""Tests for upstream path rewriting."""

from __future__ import annotations

import pytest

from services.edge_gateway_service.models.routing_models import Route
from services.edge_gateway_service.path_rewriter import (
    CityLookupRewrite,
    PassthroughRewrite,
    PathRewriter,
    build_path_rewriter,
)

WEATHER = Route(path_prefix="/api/weather", service_name="weather", allowed_methods=["GET"])
CACHE = Route(path_prefix="/api/cache", service_name="cache", allowed_methods=["GET"])


@pytest.fixture
def rewriter(gateway_settings) -> PathRewriter:
    return build_path_rewriter(gateway_settings)


class TestWeatherRewrite:
    def test_city_becomes_current_lookup(self, rewriter):
        result = rewriter.rewrite(WEATHER, "/api/weather", {"city": "Recife"})

        assert result.is_ok
        assert result.value.path == "/current/Recife"
        assert result.value.query == {}

    def test_q_is_accepted_when_city_absent(self, rewriter):
        result = rewriter.rewrite(WEATHER, "/api/weather", {"q": "Olinda", "units": "metric"})

        assert result.value.path == "/current/Olinda"
        assert result.value.query == {"units": "metric"}

    def test_city_takes_precedence_over_q(self, rewriter):
        result = rewriter.rewrite(WEATHER, "/api/weather", {"city": "Recife", "q": "Natal"})

        assert result.value.path == "/current/Recife"
        assert "q" not in result.value.query

    def test_city_is_percent_encoded(self, rewriter):
        result = rewriter.rewrite(WEATHER, "/api/weather", {"city": "São Paulo"})

        assert result.value.path == "/current/S%C3%A3o%20Paulo"

    def test_reserved_characters_are_encoded(self, rewriter):
        result = rewriter.rewrite(WEATHER, "/api/weather", {"city": "a/b?c"})

        assert result.value.path == "/current/a%2Fb%3Fc"

    def test_city_wins_over_sub_path(self, rewriter):
        result = rewriter.rewrite(WEATHER, "/api/weather/forecast", {"city": "Recife"})

        assert result.value.path == "/current/Recife"

    def test_missing_city_without_sub_path_is_rejected(self, rewriter):
        for path in ("/api/weather", "/api/weather/"):
            result = rewriter.rewrite(WEATHER, path, {})

            assert result.is_err
            assert result.error.error == "missing_city"
            assert result.error.status_code == 400
            assert result.error.message == "Provide ?city=NomeDaCidade"

    def test_blank_city_counts_as_missing(self, rewriter):
        result = rewriter.rewrite(WEATHER, "/api/weather", {"city": "   "})

        assert result.is_err

    def test_sub_path_without_city_is_forwarded(self, rewriter):
        result = rewriter.rewrite(WEATHER, "/api/weather/forecast/7d", {"days": "3"})

        assert result.value.path == "/weather/forecast/7d"
        assert result.value.query == {"days": "3"}

    def test_ready_made_lookup_path_keeps_route_segment(self, rewriter):
        result = rewriter.rewrite(WEATHER, "/api/weather/current/Recife", {})

        assert result.value.path == "/weather/current/Recife"

    def test_configured_sub_path_is_prepended(self, settings_factory):
        rewriter = build_path_rewriter(settings_factory(WEATHER_PATH_PREFIX="weather/"))

        with_city = rewriter.rewrite(WEATHER, "/api/weather", {"city": "Recife"})
        with_path = rewriter.rewrite(WEATHER, "/api/weather/forecast", {})

        assert with_city.value.path == "/weather/current/Recife"
        assert with_path.value.path == "/weather/weather/forecast"


class TestPassthroughRewrite:
    def test_route_segment_is_stripped(self, rewriter):
        result = rewriter.rewrite(CACHE, "/api/cache/keys/abc", {"ttl": "5"})

        assert result.value.path == "/keys/abc"
        assert result.value.query == {"ttl": "5"}

    def test_bare_route_maps_to_root(self, rewriter):
        assert rewriter.rewrite(CACHE, "/api/cache", {}).value.path == "/"

    def test_unregistered_service_uses_passthrough(self, rewriter):
        assert isinstance(rewriter.strategy_for("cache"), PassthroughRewrite)
        assert isinstance(rewriter.strategy_for("weather"), CityLookupRewrite)


class TestPrefixHandling:
    def test_relative_path_strips_public_prefix(self):
        rewriter = PathRewriter(external_prefix="/api/")

        assert rewriter.relative_path("/api/weather/x") == "/weather/x"
        assert rewriter.relative_path("/api") == "/"
        assert rewriter.relative_path("/apix/weather") == "/apix/weather"

    def test_empty_public_prefix(self):
        rewriter = PathRewriter(external_prefix="")
        route = Route(path_prefix="/cache", service_name="cache", allowed_methods=["GET"])

        assert rewriter.remainder(route, "/cache/a") == "/a"
