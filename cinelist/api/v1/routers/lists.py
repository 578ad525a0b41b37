# ╔══════════════════════════════════════════════════════════════════════════╗
# ║ Cinelist · Lists API (shared lists, members, items)                       ║
# ╠──────────────────────────────────────────────────────────────────────────╣
# ║ Endpoints (session required):                                             ║
# ║  - POST   /lists                          → Create list (+ owner member)  ║
# ║  - GET    /lists                          → Caller's lists with role      ║
# ║  - GET    /lists/containing               → list_id → item_id for content ║
# ║  - GET    /lists/{id}                     → Details, items, members, role ║
# ║  - PATCH  /lists/{id}                     → Rename (owner)                ║
# ║  - DELETE /lists/{id}                     → Delete (owner)                ║
# ║  - POST   /lists/{id}/items               → Add item (owner/editor)       ║
# ║  - DELETE /lists/items/{item_id}          → Remove item (owner/editor)    ║
# ║  - POST   /lists/{id}/join                → Join with invite role         ║
# ║  - GET    /lists/{id}/share?role=…        → Invite URL (members)          ║
# ║  - DELETE /lists/{id}/members/{user_id}   → Remove member (owner)         ║
# ╠──────────────────────────────────────────────────────────────────────────╣
# ║ Access policy lives in `cinelist.services.list_service`; non-members get  ║
# ║ 403 NotAMemberError, insufficient roles 403 PermissionDenied.             ║
# ╚══════════════════════════════════════════════════════════════════════════╝
"""Shared list endpoints consumed by `cinelist.client.api.ApiClient`."""

import logging
from typing import List as TList
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from cinelist.api.http_utils import json_no_store, log_user_action
from cinelist.core.security import get_current_user
from cinelist.db.models.user import User
from cinelist.db.session import get_async_db
from cinelist.schemas.enums import ListRole, MediaType
from cinelist.schemas.lists import (
    ContainingLists,
    ItemCreate,
    ItemOut,
    JoinRequest,
    JoinResult,
    ListCreate,
    ListDetails,
    ListOut,
    ListRename,
    ListWithRole,
    ShareUrl,
)
from cinelist.services import list_service
from cinelist.services.sharing import build_invite_url, parse_invite_role

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/lists", tags=["Lists"])


# ─────────────────────────────────────────────────────────────
# 📋 Lists
# ─────────────────────────────────────────────────────────────

@router.post("", response_model=ListOut, status_code=status.HTTP_201_CREATED)
async def create_list(
    payload: ListCreate,
    request: Request,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    lst = await list_service.create_list(db, user, payload.name)
    log_user_action(request, user.id, "create_list", list_id=lst.id)
    return json_no_store(ListOut.model_validate(lst), status_code=status.HTTP_201_CREATED)


@router.get("", response_model=TList[ListWithRole])
async def list_lists(user: User = Depends(get_current_user), db: AsyncSession = Depends(get_async_db)):
    rows = await list_service.list_lists(db, user)
    return json_no_store(
        [ListWithRole(**ListOut.model_validate(lst).model_dump(), role=role).model_dump(mode="json") for lst, role in rows]
    )


@router.get("/containing", response_model=ContainingLists)
async def lists_containing(
    content_id: int = Query(..., gt=0),
    content_type: MediaType = Query(...),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    found = await list_service.get_lists_containing_content(db, user, content_id, content_type)
    return json_no_store(ContainingLists(lists=found))


@router.get("/{list_id}", response_model=ListDetails)
async def get_list(list_id: UUID, user: User = Depends(get_current_user), db: AsyncSession = Depends(get_async_db)):
    return json_no_store(await list_service.get_list_details(db, user, list_id))


@router.patch("/{list_id}", response_model=ListOut)
async def rename_list(
    list_id: UUID,
    payload: ListRename,
    request: Request,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    lst = await list_service.rename_list(db, user, list_id, payload.name)
    log_user_action(request, user.id, "rename_list", list_id=list_id)
    return json_no_store(ListOut.model_validate(lst))


@router.delete("/{list_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_list(
    list_id: UUID,
    request: Request,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    await list_service.delete_list(db, user, list_id)
    log_user_action(request, user.id, "delete_list", list_id=list_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ─────────────────────────────────────────────────────────────
# 🎞️ Items
# ─────────────────────────────────────────────────────────────

@router.post("/{list_id}/items", response_model=ItemOut, status_code=status.HTTP_201_CREATED)
async def add_item(
    list_id: UUID,
    payload: ItemCreate,
    request: Request,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    item = await list_service.add_item(db, user, list_id, payload.content_id, payload.content_type)
    log_user_action(request, user.id, "add_item", list_id=list_id, content_id=payload.content_id)
    return json_no_store(ItemOut.model_validate(item), status_code=status.HTTP_201_CREATED)


@router.delete("/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_item(
    item_id: UUID,
    request: Request,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    await list_service.remove_item(db, user, item_id)
    log_user_action(request, user.id, "remove_item", item_id=item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ─────────────────────────────────────────────────────────────
# 👥 Membership & sharing
# ─────────────────────────────────────────────────────────────

@router.post("/{list_id}/join", response_model=JoinResult)
async def join_list(
    list_id: UUID,
    payload: JoinRequest,
    request: Request,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    member, joined = await list_service.join_list(db, user, list_id, payload.member_name, payload.role)
    log_user_action(request, user.id, "join_list", list_id=list_id, joined=joined)
    return json_no_store(JoinResult(list_id=list_id, role=ListRole(member.role), joined=joined))


@router.get("/{list_id}/share", response_model=ShareUrl)
async def share_url(
    list_id: UUID,
    role: str = Query("viewer"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    await list_service.get_role(db, user, list_id)
    invite_role = parse_invite_role(role)
    return json_no_store(ShareUrl(url=build_invite_url(list_id, invite_role), role=invite_role))


@router.delete("/{list_id}/members/{member_user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_member(
    list_id: UUID,
    member_user_id: UUID,
    request: Request,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    await list_service.remove_member(db, user, list_id, member_user_id)
    log_user_action(request, user.id, "remove_member", list_id=list_id, member=member_user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
