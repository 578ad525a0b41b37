# tests/fixtures/app.py

"""
🧩 App Fixture:
- Builds the production app via `create_app()`
- Points `get_async_db` at the per-test database
- Exposes a raw HTTP client and a factory for `cinelist.client.api.ApiClient`
"""

from typing import AsyncGenerator, Callable, List

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from cinelist.client.api import ApiClient
from cinelist.db.session import get_async_db
from cinelist.main import create_app
from tests.fixtures.db import get_override_get_db

API = "/api/v1"


@pytest.fixture()
async def app(session_factory) -> FastAPI:
    app = create_app()
    app.dependency_overrides[get_async_db] = get_override_get_db(session_factory)
    return app


@pytest.fixture()
async def async_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """🌐 HTTP client for sending requests to the test app."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture()
async def api_factory(app: FastAPI) -> AsyncGenerator[Callable[..., ApiClient], None]:
    """Independent `ApiClient`s (one per simulated device) bound to the test app."""
    clients: List[ApiClient] = []

    def _make(token: str | None = None) -> ApiClient:
        client = ApiClient(f"http://test{API}", token=token, transport=ASGITransport(app=app))
        clients.append(client)
        return client

    yield _make
    for client in clients:
        await client.aclose()
