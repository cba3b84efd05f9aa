"""Unit tests for mapping errors to JSON responses."""

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from bizboard.core.errors import ConflictError, NotFoundError
from bizboard.server.exception_handlers import setup_exception_handlers


@pytest.fixture
def app() -> FastAPI:
    app = FastAPI()
    setup_exception_handlers(app)

    @app.get("/missing")
    async def missing():
        raise NotFoundError("הספק לא נמצא")

    @app.get("/conflict")
    async def conflict():
        raise ConflictError()

    @app.get("/boom")
    async def boom():
        raise RuntimeError("unexpected")

    return app


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://localhost") as client:
        yield client


class TestDomainErrors:
    async def test_status_and_message(self, client):
        response = await client.get("/missing")

        assert response.status_code == 404
        assert response.json() == {"detail": "הספק לא נמצא", "error_type": "NotFoundError"}

    async def test_default_message(self, client):
        response = await client.get("/conflict")

        assert response.status_code == 409
        assert response.json()["detail"] == "הרשומה כבר קיימת"


class TestUnexpectedErrors:
    async def test_generic_500(self, client):
        response = await client.get("/boom")

        assert response.status_code == 500
        body = response.json()
        assert body["detail"] == "שגיאה בשרת"
        assert body["error_type"] == "RuntimeError"
        assert body["error_id"]
