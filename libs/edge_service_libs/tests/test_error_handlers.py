"""Tests for the FastAPI application-boundary error handlers."""

from __future__ import annotations

import pytest
from fastapi import FastAPI, HTTPException
from httpx import ASGITransport, AsyncClient

from edge_service_libs.error_handling import build_error_body, register_error_handlers


@pytest.fixture
def app() -> FastAPI:
    app = FastAPI()
    register_error_handlers(app)

    @app.get("/boom")
    async def boom() -> None:
        raise RuntimeError("secret internal detail at /srv/app.py")

    @app.get("/teapot")
    async def teapot() -> None:
        raise HTTPException(status_code=418, detail="short and stout")

    @app.get("/only-get")
    async def only_get() -> dict[str, bool]:
        return {"ok": True}

    return app


@pytest.fixture
async def client(app: FastAPI):
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def test_error_body_shape() -> None:
    body = build_error_body(404, "Not Found", "nope")

    assert body["error"] == "Not Found"
    assert body["message"] == "nope"
    assert body["statusCode"] == 404
    assert isinstance(body["timestamp"], str)


@pytest.mark.asyncio
async def test_unmatched_route_reports_method_and_path(client: AsyncClient) -> None:
    response = await client.delete("/missing/thing")

    assert response.status_code == 404
    data = response.json()
    assert data["error"] == "Not Found"
    assert data["message"] == "Route DELETE /missing/thing not found"
    assert data["statusCode"] == 404


@pytest.mark.asyncio
async def test_http_exception_keeps_detail(client: AsyncClient) -> None:
    response = await client.get("/teapot")

    assert response.status_code == 418
    assert response.json()["message"] == "short and stout"


@pytest.mark.asyncio
async def test_method_mismatch_is_405(client: AsyncClient) -> None:
    response = await client.post("/only-get")

    assert response.status_code == 405
    assert response.json()["error"] == "Method Not Allowed"


@pytest.mark.asyncio
async def test_unexpected_exception_hides_internals(client: AsyncClient) -> None:
    response = await client.get("/boom")

    assert response.status_code == 500
    data = response.json()
    assert data["error"] == "Internal Server Error"
    assert data["message"] == "An unexpected error occurred"
    assert "secret" not in response.text
