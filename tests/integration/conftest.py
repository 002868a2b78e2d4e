"""Integration test fixtures for BakBak.

Provides an async HTTP client whose route dependencies are bound to the
in-memory SQLite store and the mocked external services from the root
conftest.
"""

import pytest
from httpx import ASGITransport, AsyncClient

from src.api import deps
from src.api.app import create_app

USER_ID = "user-1"


@pytest.fixture
def app(store, controller, mock_object_store):
    """Create a fresh FastAPI application wired to the test doubles."""
    app = create_app()
    app.dependency_overrides[deps.get_store] = lambda: store
    app.dependency_overrides[deps.get_controller] = lambda: controller
    app.dependency_overrides[deps.get_object_store] = lambda: mock_object_store
    return app


@pytest.fixture
async def async_client(app):
    """AsyncClient that sends requests as ``USER_ID``."""
    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        headers={"X-User-Id": USER_ID},
    ) as c:
        yield c
