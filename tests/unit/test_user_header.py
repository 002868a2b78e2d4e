"""Unit tests for UserHeaderMiddleware."""

from unittest.mock import patch

import pytest
from fastapi import FastAPI, Request
from httpx import ASGITransport, AsyncClient

from src.api.middleware.auth import UserHeaderMiddleware


def _create_test_app() -> FastAPI:
    """Create a minimal FastAPI app with UserHeaderMiddleware."""
    app = FastAPI()
    app.add_middleware(UserHeaderMiddleware)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.get("/api/v1/health")
    async def health_v1():
        return {"status": "ok"}

    @app.get("/api/v1/recordings")
    async def recordings(request: Request):
        return {"user_id": request.state.user_id}

    return app


@pytest.fixture
def client():
    transport = ASGITransport(app=_create_test_app())
    return AsyncClient(transport=transport, base_url="http://test")


def _settings(mock_settings, dev_user_id: str = "") -> None:
    mock_settings.return_value.auth_user_header = "X-User-Id"
    mock_settings.return_value.dev_user_id = dev_user_id


class TestUserHeaderMiddleware:
    @patch("src.api.middleware.auth.get_settings")
    async def test_header_sets_user(self, mock_settings, client):
        _settings(mock_settings)
        resp = await client.get("/api/v1/recordings", headers={"X-User-Id": "alice"})
        assert resp.status_code == 200
        assert resp.json() == {"user_id": "alice"}

    @patch("src.api.middleware.auth.get_settings")
    async def test_missing_header_is_rejected(self, mock_settings, client):
        _settings(mock_settings)
        resp = await client.get("/api/v1/recordings")
        assert resp.status_code == 401
        assert resp.json()["code"] == "AUTH_REQUIRED"

    @patch("src.api.middleware.auth.get_settings")
    async def test_blank_header_is_rejected(self, mock_settings, client):
        _settings(mock_settings)
        resp = await client.get("/api/v1/recordings", headers={"X-User-Id": "  "})
        assert resp.status_code == 401

    @patch("src.api.middleware.auth.get_settings")
    async def test_dev_user_fallback(self, mock_settings, client):
        _settings(mock_settings, dev_user_id="dev")
        resp = await client.get("/api/v1/recordings")
        assert resp.status_code == 200
        assert resp.json() == {"user_id": "dev"}

    @patch("src.api.middleware.auth.get_settings")
    async def test_health_skips_check(self, mock_settings, client):
        _settings(mock_settings)
        assert (await client.get("/health")).status_code == 200
        assert (await client.get("/api/v1/health")).status_code == 200
