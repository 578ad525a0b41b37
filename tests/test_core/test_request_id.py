import uuid

import pytest
from httpx import AsyncClient


@pytest.mark.anyio
async def test_fresh_request_id_is_generated(async_client: AsyncClient):
    resp = await async_client.get("/healthz")
    assert uuid.UUID(resp.headers["x-request-id"]).version == 4


@pytest.mark.anyio
async def test_client_request_id_is_echoed(async_client: AsyncClient):
    rid = str(uuid.uuid4())
    resp = await async_client.get("/healthz", headers={"X-Request-ID": rid})
    assert resp.headers["x-request-id"] == rid


@pytest.mark.anyio
async def test_malformed_request_id_is_replaced(async_client: AsyncClient):
    resp = await async_client.get("/healthz", headers={"X-Request-ID": "not-a-uuid"})
    assert resp.headers["x-request-id"] != "not-a-uuid"
    uuid.UUID(resp.headers["x-request-id"])
