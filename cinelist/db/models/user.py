from __future__ import annotations

"""
👤 Cinelist — User & MagicLink (identity)
=========================================

`User` is the session principal. Anonymous users are created without any
credentials; email users are created (or found) when a magic link is verified.

Design highlights
-----------------
• **Anonymous-first**: `email` is nullable; `is_anonymous` marks system users.
• **Case-insensitive email** normalized on write (lower-cased) and unique.
• **Magic links** store only an HMAC digest of the token; single use via
  `consumed_at`, TTL enforced by the service from `created_at`.
"""

from uuid import uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Index,
    String,
    Uuid,
    func,
    text,
)

from cinelist.db.base_class import Base, utcnow


class User(Base):
    """Session principal (anonymous or email-verified)."""

    __tablename__ = "users"

    # ── Identity ──────────────────────────────────────────────────────────────
    id = Column(Uuid, primary_key=True, default=uuid4)
    email = Column(String(320), nullable=True, unique=True)
    is_anonymous = Column(Boolean, nullable=False, default=True, server_default=text("true"))

    # ── Profile ───────────────────────────────────────────────────────────────
    display_name = Column(String(120), nullable=True)
    email_verified_at = Column(DateTime(timezone=True), nullable=True)

    # ── Timestamps ────────────────────────────────────────────────────────────
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint("is_anonymous OR email IS NOT NULL", name="authenticated_has_email"),
    )


class MagicLink(Base):
    """One issued email sign-in link (digest only)."""

    __tablename__ = "magic_links"

    id = Column(Uuid, primary_key=True, default=uuid4)
    email = Column(String(320), nullable=False)
    token_digest = Column(String(64), nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    consumed_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_magic_links_email_created", "email", "created_at"),
    )


__all__ = ["User", "MagicLink"]
