import pytest
from httpx import AsyncClient

from cinelist.core.security import create_session_token
from tests.fixtures.app import API


# ─────────────────────────────────────────────────────────────
# /auth/anonymous + /auth/session
# ─────────────────────────────────────────────────────────────
@pytest.mark.anyio
async def test_anonymous_session_round_trip(async_client: AsyncClient):
    resp = await async_client.post(f"{API}/auth/anonymous")
    assert resp.status_code == 201, resp.text
    body = resp.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["is_anonymous"] is True
    assert body["user"]["email"] is None
    assert resp.headers["cache-control"] == "no-store"

    resp = await async_client.get(
        f"{API}/auth/session", headers={"Authorization": f"Bearer {body['access_token']}"}
    )
    assert resp.status_code == 200
    assert resp.json()["id"] == body["user"]["id"]


@pytest.mark.anyio
async def test_session_without_token_is_problem_json(async_client: AsyncClient):
    resp = await async_client.get(f"{API}/auth/session")
    assert resp.status_code == 401
    assert resp.headers["content-type"].startswith("application/problem+json")
    assert resp.json()["title"] == "AuthError"


@pytest.mark.anyio
async def test_session_with_garbage_token(async_client: AsyncClient):
    resp = await async_client.get(f"{API}/auth/session", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401


@pytest.mark.anyio
async def test_token_for_unknown_user_is_rejected(async_client: AsyncClient):
    from uuid import uuid4

    token = create_session_token(uuid4(), is_anonymous=True)
    resp = await async_client.get(f"{API}/auth/session", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401


@pytest.mark.anyio
async def test_update_display_name(async_client: AsyncClient, anonymous_user):
    me = await anonymous_user()
    resp = await async_client.patch(f"{API}/auth/me", json={"display_name": "  Ana  "}, headers=me.headers)
    assert resp.status_code == 200, resp.text
    assert resp.json()["display_name"] == "Ana"


@pytest.mark.anyio
async def test_blank_display_name_rejected(async_client: AsyncClient, anonymous_user):
    me = await anonymous_user()
    resp = await async_client.patch(f"{API}/auth/me", json={"display_name": "   "}, headers=me.headers)
    assert resp.status_code == 422


@pytest.mark.anyio
async def test_logout_acknowledges(async_client: AsyncClient, anonymous_user):
    me = await anonymous_user()
    resp = await async_client.post(f"{API}/auth/logout", headers=me.headers)
    assert resp.status_code == 200
    assert resp.json() == {"ok": True}


@pytest.mark.anyio
async def test_health_probes(async_client: AsyncClient):
    assert (await async_client.get("/healthz")).json() == {"ok": True}
    resp = await async_client.get("/readyz")
    assert resp.status_code == 200
    assert "checks" in resp.json()
