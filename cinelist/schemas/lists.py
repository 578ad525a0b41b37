from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, constr, field_validator

from cinelist.schemas.enums import InviteRole, ListRole, MediaType


# ──────────────────────────────────────────────────────────────
# Lists
# ──────────────────────────────────────────────────────────────
class ListCreate(BaseModel):
    name: constr(strip_whitespace=True, min_length=1, max_length=200)


class ListRename(BaseModel):
    name: constr(strip_whitespace=True, min_length=1, max_length=200)


class ListOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    owner_id: UUID
    created_at: datetime
    updated_at: datetime


class ListWithRole(ListOut):
    """A list annotated with the caller's membership role."""
    role: ListRole


class ListName(BaseModel):
    id: UUID
    name: str


# ──────────────────────────────────────────────────────────────
# Members & items
# ──────────────────────────────────────────────────────────────
class MemberOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    list_id: UUID
    user_id: UUID
    role: ListRole
    member_name: Optional[str] = None
    created_at: datetime


class ItemCreate(BaseModel):
    content_id: int = Field(..., gt=0)
    content_type: MediaType


class ItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    list_id: UUID
    content_id: int
    content_type: MediaType
    added_by: Optional[UUID] = None
    created_at: datetime


class ListDetails(BaseModel):
    list: ListOut
    items: List[ItemOut]
    members: List[MemberOut]
    role: ListRole = Field(..., description="Caller's effective role")


# ──────────────────────────────────────────────────────────────
# Join / sharing
# ──────────────────────────────────────────────────────────────
class JoinRequest(BaseModel):
    member_name: constr(strip_whitespace=True, min_length=1, max_length=120)
    role: InviteRole = InviteRole.VIEWER

    @field_validator("role", mode="before")
    @classmethod
    def _coerce_role(cls, v):
        return InviteRole.parse(v)


class JoinResult(BaseModel):
    list_id: UUID
    role: ListRole
    joined: bool = Field(..., description="False when the caller already had a membership")


class ShareUrl(BaseModel):
    url: str
    role: InviteRole


class ContainingLists(BaseModel):
    """`list_id → item_id` for lists (visible to the caller) holding the content."""
    lists: Dict[UUID, UUID] = Field(default_factory=dict)


# ──────────────────────────────────────────────────────────────
# RPC
# ──────────────────────────────────────────────────────────────
class ListNameRequest(BaseModel):
    list_id: UUID


class MigrateRequest(BaseModel):
    old_user_id: Optional[UUID] = None
    new_user_id: Optional[UUID] = None


class MigrationResult(BaseModel):
    migrated: bool
    counts: Dict[str, int] = Field(default_factory=dict)


__all__ = [
    "ListCreate",
    "ListRename",
    "ListOut",
    "ListWithRole",
    "ListName",
    "MemberOut",
    "ItemCreate",
    "ItemOut",
    "ListDetails",
    "JoinRequest",
    "JoinResult",
    "ShareUrl",
    "ContainingLists",
    "ListNameRequest",
    "MigrateRequest",
    "MigrationResult",
]
