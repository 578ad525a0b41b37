# cinelist/services/auth/session_service.py
from __future__ import annotations

"""
Session Service — anonymous sessions & email magic links
========================================================

Overview
--------
1) **Anonymous session** (`create_anonymous_session`)
   - Creates a credential-less `User` and returns a session JWT for it.

2) **Request a magic link** (`request_magic_link`)
   - Per-email rate limit via Redis (fail-open when Redis is absent).
   - Fresh random token each time; **only an HMAC digest** is stored.
   - The link is mailed (or logged in dev when SMTP is not configured).

3) **Verify a magic link** (`verify_magic_link`)
   - Single use (`consumed_at`) and TTL-bounded (`MAGIC_LINK_TTL_MINUTES`).
   - Finds or creates the authenticated user for the email and returns a
     session JWT. Data owned by a prior anonymous identity is NOT moved here;
     clients trigger `migrate_user_data` on their next session check.

Display names are not derived here. Clients backfill them once through
`update_display_name` (see `cinelist.client.identity`).
"""

import hashlib
import hmac
import logging
from datetime import datetime, timedelta, timezone
from typing import Tuple
from urllib.parse import urlencode

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cinelist.core.config import settings
from cinelist.core.exceptions import AuthError
from cinelist.core.security import create_session_token, generate_magic_token, magic_token_digest
from cinelist.db.models.user import MagicLink, User
from cinelist.schemas.auth import Profile, SessionOut
from cinelist.utils.email_utils import send_magic_link_email
from cinelist.utils.redis_utils import enforce_rate_limit

logger = logging.getLogger("cinelist.auth.session")


# ─────────────────────────────────────────────────────────────
# 🔧 Utilities
# ─────────────────────────────────────────────────────────────

def _norm_email(email: str) -> str:
    """Return a normalized email: trimmed + lower-cased."""
    return (email or "").strip().lower()


def _as_aware(dt: datetime) -> datetime:
    # SQLite hands back naive datetimes
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def session_response(user: User) -> SessionOut:
    token = create_session_token(user.id, is_anonymous=bool(user.is_anonymous))
    return SessionOut(access_token=token, user=Profile.model_validate(user))


def magic_link_url(token: str) -> str:
    return f"{settings.public_base_url_str}/auth/callback?{urlencode({'token': token})}"


# ─────────────────────────────────────────────────────────────
# 👻 Anonymous sessions
# ─────────────────────────────────────────────────────────────

async def create_anonymous_session(db: AsyncSession) -> Tuple[User, SessionOut]:
    user = User(is_anonymous=True)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info("Anonymous session created user_id=%s", user.id)
    return user, session_response(user)


# ─────────────────────────────────────────────────────────────
# ✉️ Magic links
# ─────────────────────────────────────────────────────────────

async def request_magic_link(db: AsyncSession, email: str) -> None:
    """
    Issue a single-use sign-in link for `email`.

    Raises
    ------
    RateLimitedError
        More than one request for the same email inside the resend window.
    AuthError
        The email could not be sent.
    """
    norm = _norm_email(email)
    if "@" not in norm:
        raise AuthError("Invalid email address", status_code=422)

    await enforce_rate_limit(
        key_suffix=f"magic-link:{hashlib.sha256(norm.encode()).hexdigest()}",
        seconds=settings.MAGIC_LINK_RESEND_SECONDS,
        max_calls=1,
    )

    token = generate_magic_token()
    db.add(MagicLink(email=norm, token_digest=magic_token_digest(token)))
    await db.commit()

    await send_magic_link_email(norm, magic_link_url(token))
    logger.info("Magic link issued for email_sha=%s", hashlib.sha256(norm.encode()).hexdigest()[:12])


async def verify_magic_link(db: AsyncSession, token: str) -> Tuple[User, SessionOut]:
    """Consume a magic-link token and return the authenticated user's session."""
    digest = magic_token_digest(token)
    link = (
        await db.execute(select(MagicLink).where(MagicLink.token_digest == digest))
    ).scalar_one_or_none()

    if link is None or not hmac.compare_digest(link.token_digest, digest):
        raise AuthError("Invalid or expired sign-in link")
    if link.consumed_at is not None:
        raise AuthError("This sign-in link was already used")

    now = datetime.now(timezone.utc)
    if _as_aware(link.created_at) + timedelta(minutes=settings.MAGIC_LINK_TTL_MINUTES) < now:
        raise AuthError("Invalid or expired sign-in link")

    link.consumed_at = now
    user = (await db.execute(select(User).where(User.email == link.email))).scalar_one_or_none()
    if user is None:
        user = User(email=link.email, is_anonymous=False, email_verified_at=now)
        db.add(user)
    elif user.email_verified_at is None:
        user.email_verified_at = now
    await db.commit()
    await db.refresh(user)

    logger.info("Magic link verified user_id=%s", user.id)
    return user, session_response(user)


# ─────────────────────────────────────────────────────────────
# 👤 Profile
# ─────────────────────────────────────────────────────────────

async def update_display_name(db: AsyncSession, user: User, display_name: str) -> User:
    user.display_name = display_name.strip()
    await db.commit()
    await db.refresh(user)
    return user


__all__ = [
    "create_anonymous_session",
    "request_magic_link",
    "verify_magic_link",
    "update_display_name",
    "session_response",
    "magic_link_url",
]
