# cinelist/core/security.py
from __future__ import annotations

"""
Cinelist — Session tokens & current-user dependency
===================================================
- Session tokens are HS* JWTs (python-jose) with `sub`, `anon`, `jti`, `iat`, `exp`.
- Magic-link tokens are random and stored only as HMAC-SHA256 digests.
- `get_current_user` authenticates the bearer token and loads the `User` row.
"""

import hashlib
import hmac
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from uuid import UUID, uuid4

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cinelist.core.config import settings
from cinelist.core.exceptions import AuthError
from cinelist.db.models.user import User
from cinelist.db.session import get_async_db

logger = logging.getLogger("auth")

security = HTTPBearer(auto_error=False)


# ───────────────────────────────────────────────
# 🔐 Session tokens
# ───────────────────────────────────────────────
def create_session_token(user_id: UUID | str, *, is_anonymous: bool) -> str:
    """Mint a session JWT for `user_id`."""
    now = datetime.now(timezone.utc)
    payload: Dict[str, Any] = {
        "sub": str(user_id),
        "anon": bool(is_anonymous),
        "jti": uuid4().hex,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(days=settings.SESSION_TOKEN_EXPIRE_DAYS)).timestamp()),
    }
    return jwt.encode(payload, settings.JWT_SECRET_KEY.get_secret_value(), algorithm=settings.JWT_ALGORITHM)


def decode_session_token(token: str) -> Dict[str, Any]:
    """Verify signature and expiry; raise `AuthError` on any problem."""
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY.get_secret_value(),
            algorithms=[settings.JWT_ALGORITHM],
        )
    except ExpiredSignatureError as e:
        raise AuthError("Session expired") from e
    except JWTError as e:
        raise AuthError("Invalid session token") from e
    if not payload.get("sub") or not payload.get("jti"):
        raise AuthError("Invalid session token")
    return payload


def get_user_id_from_payload(payload: Dict[str, Any]) -> UUID:
    try:
        return UUID(str(payload["sub"]))
    except (KeyError, ValueError) as e:
        raise AuthError("Invalid session token") from e


# ───────────────────────────────────────────────
# ✉️ Magic-link tokens
# ───────────────────────────────────────────────
def generate_magic_token() -> str:
    return secrets.token_urlsafe(32)


def magic_token_digest(token: str) -> str:
    """HMAC-SHA256 hex digest with a purpose prefix; plaintext tokens are never stored."""
    if not token:
        raise ValueError("token is required")
    key = settings.JWT_SECRET_KEY.get_secret_value().encode("utf-8")
    return hmac.new(key, f"magic_link:{token}".encode("utf-8"), hashlib.sha256).hexdigest()


# ───────────────────────────────────────────────
# 👤 Current user dependency
# ───────────────────────────────────────────────
async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_async_db),
) -> User:
    """Authenticate the bearer session token and load the user row."""
    if credentials is None or not credentials.credentials:
        raise AuthError("Not authenticated", headers={"WWW-Authenticate": "Bearer"})

    payload = decode_session_token(credentials.credentials)
    user_id = get_user_id_from_payload(payload)

    user = (await db.execute(select(User).where(User.id == user_id))).scalars().first()
    if user is None:
        raise AuthError("Unknown session user")

    request.state.user_id = user.id
    logger.debug("[Auth] Authenticated user_id=%s anonymous=%s", user.id, user.is_anonymous)
    return user


__all__ = [
    "create_session_token",
    "decode_session_token",
    "get_user_id_from_payload",
    "generate_magic_token",
    "magic_token_digest",
    "get_current_user",
]
