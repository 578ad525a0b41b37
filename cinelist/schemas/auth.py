from __future__ import annotations

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, constr


class Profile(BaseModel):
    """Active session principal as seen by clients."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: Optional[str] = None
    display_name: Optional[str] = None
    is_anonymous: bool = True


class SessionOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: Profile


class MagicLinkRequest(BaseModel):
    email: EmailStr


class MagicLinkSent(BaseModel):
    sent: bool = True
    message: str = "If the address is valid, a sign-in link is on its way."


class VerifyRequest(BaseModel):
    token: constr(strip_whitespace=True, min_length=16, max_length=256)


class ProfileUpdate(BaseModel):
    display_name: constr(strip_whitespace=True, min_length=1, max_length=120)


class LogoutOut(BaseModel):
    ok: bool = Field(True)


def derive_display_name(email: Optional[str]) -> str:
    """Local part of the email, never empty."""
    local = (email or "").split("@", 1)[0].strip()
    return local or "user"


__all__ = [
    "derive_display_name",
    "Profile",
    "SessionOut",
    "MagicLinkRequest",
    "MagicLinkSent",
    "VerifyRequest",
    "ProfileUpdate",
    "LogoutOut",
]
