from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable, Dict
from uuid import UUID

import pytest
from httpx import AsyncClient

from tests.fixtures.app import API


@dataclass
class SessionUser:
    id: UUID
    token: str
    is_anonymous: bool

    @property
    def headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


def _from_session(body: dict) -> SessionUser:
    return SessionUser(
        id=UUID(body["user"]["id"]),
        token=body["access_token"],
        is_anonymous=body["user"]["is_anonymous"],
    )


# ──────────────────────────────────────────────────────────────
# 👻 Anonymous sessions
# ──────────────────────────────────────────────────────────────
@pytest.fixture
def anonymous_user(async_client: AsyncClient) -> Callable[[], Awaitable[SessionUser]]:
    async def _create() -> SessionUser:
        resp = await async_client.post(f"{API}/auth/anonymous")
        assert resp.status_code == 201, resp.text
        return _from_session(resp.json())
    return _create


# ──────────────────────────────────────────────────────────────
# ✉️ Email users (magic-link round trip)
# ──────────────────────────────────────────────────────────────
@pytest.fixture
def email_user(async_client: AsyncClient, outbox) -> Callable[[str], Awaitable[SessionUser]]:
    async def _sign_in(email: str) -> SessionUser:
        resp = await async_client.post(f"{API}/auth/magic-link", json={"email": email})
        assert resp.status_code == 202, resp.text
        resp = await async_client.post(f"{API}/auth/verify", json={"token": outbox.last_token(email)})
        assert resp.status_code == 200, resp.text
        return _from_session(resp.json())
    return _sign_in
