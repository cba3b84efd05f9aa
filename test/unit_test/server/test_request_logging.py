"""Unit tests for the request logging middleware."""

from unittest.mock import patch

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from bizboard.server.middleware import RequestLoggingMiddleware


@pytest.fixture
def app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(RequestLoggingMiddleware)

    @app.get("/ping")
    async def ping():
        return {"ok": True}

    return app


async def test_process_time_header_and_log(app):
    with patch("bizboard.server.middleware.request_logging.log_api_request") as mock_log:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
            response = await client.get("/ping")

    assert response.status_code == 200
    assert float(response.headers["X-Process-Time"]) >= 0
    mock_log.assert_called_once()
    kwargs = mock_log.call_args.kwargs
    assert (kwargs["method"], kwargs["path"], kwargs["status_code"]) == ("GET", "/ping", 200)


async def test_slow_request_warns(app):
    with patch("bizboard.server.middleware.request_logging.SLOW_REQUEST_MS", -1):
        with patch("bizboard.server.middleware.request_logging.logger") as mock_logger:
            async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
                await client.get("/ping")

    mock_logger.warning.assert_called_once()
