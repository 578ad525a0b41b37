# ╔══════════════════════════════════════════════════════════════════════════╗
# ║ Cinelist · Auth API (anonymous sessions & magic links)                    ║
# ╠──────────────────────────────────────────────────────────────────────────╣
# ║ Endpoints:                                                                ║
# ║  - POST   /auth/anonymous     → New anonymous user + session token        ║
# ║  - GET    /auth/session       → Profile of the bearer-token user          ║
# ║  - POST   /auth/magic-link    → Email a single-use sign-in link           ║
# ║  - POST   /auth/verify        → Exchange link token for a session         ║
# ║  - PATCH  /auth/me            → Update display name                       ║
# ║  - POST   /auth/logout        → Stateless acknowledgement                 ║
# ╠──────────────────────────────────────────────────────────────────────────╣
# ║ Notes                                                                     ║
# ║  - Session tokens are short JWTs; logout is client-side token disposal.   ║
# ║  - Magic-link requests are rate limited per email (Redis, fail-open).     ║
# ║  - Responses carrying tokens or profiles are `Cache-Control: no-store`.   ║
# ╚══════════════════════════════════════════════════════════════════════════╝
"""Session lifecycle endpoints consumed by `cinelist.client.identity`."""

import logging

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from cinelist.api.http_utils import json_no_store, log_user_action
from cinelist.core.security import get_current_user
from cinelist.db.models.user import User
from cinelist.db.session import get_async_db
from cinelist.schemas.auth import (
    LogoutOut,
    MagicLinkRequest,
    MagicLinkSent,
    Profile,
    ProfileUpdate,
    SessionOut,
    VerifyRequest,
)
from cinelist.services.auth import session_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/anonymous", response_model=SessionOut, status_code=status.HTTP_201_CREATED)
async def create_anonymous(db: AsyncSession = Depends(get_async_db)):
    _, session = await session_service.create_anonymous_session(db)
    return json_no_store(session, status_code=status.HTTP_201_CREATED)


@router.get("/session", response_model=Profile)
async def read_session(user: User = Depends(get_current_user)):
    return json_no_store(Profile.model_validate(user))


@router.post("/magic-link", response_model=MagicLinkSent, status_code=status.HTTP_202_ACCEPTED)
async def request_magic_link(payload: MagicLinkRequest, db: AsyncSession = Depends(get_async_db)):
    await session_service.request_magic_link(db, str(payload.email))
    return json_no_store(MagicLinkSent(), status_code=status.HTTP_202_ACCEPTED)


@router.post("/verify", response_model=SessionOut)
async def verify_magic_link(payload: VerifyRequest, request: Request, db: AsyncSession = Depends(get_async_db)):
    user, session = await session_service.verify_magic_link(db, payload.token)
    log_user_action(request, user.id, "verify_magic_link")
    return json_no_store(session)


@router.patch("/me", response_model=Profile)
async def update_me(
    payload: ProfileUpdate,
    request: Request,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    user = await session_service.update_display_name(db, user, payload.display_name)
    log_user_action(request, user.id, "update_display_name")
    return json_no_store(Profile.model_validate(user))


@router.post("/logout", response_model=LogoutOut)
async def logout(request: Request, user: User = Depends(get_current_user)):
    log_user_action(request, user.id, "logout")
    return json_no_store(LogoutOut())
