# cinelist/services/list_service.py
from __future__ import annotations

"""
List & Membership Service
=========================

Server-side operations over `lists`, `list_members` and `list_items`.

Access policy (enforced here, not by callers)
---------------------------------------------
- Any member reads the list, its items and its members.
- `owner` renames/deletes the list and removes memberships.
- `owner`/`editor` add and remove items.
- Non-members get `NotAMemberError`; reads never default to a role.

`get_list_name` is the only read that does not require a membership: it backs
the join-page preview and returns nothing but the name.
"""

import logging
from typing import Callable, Dict, List as TList, Optional, Tuple
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cinelist.core.exceptions import NotAMemberError, NotFoundError, PermissionDenied, RemoteWriteError
from cinelist.db.models.list import List, ListItem, ListMember
from cinelist.db.models.user import User
from cinelist.schemas.enums import InviteRole, ListRole, MediaType
from cinelist.schemas.lists import ItemOut, ListDetails, ListOut, MemberOut

logger = logging.getLogger("cinelist.lists")


# ─────────────────────────────────────────────────────────────
# 🔧 Helpers
# ─────────────────────────────────────────────────────────────

async def _commit(db: AsyncSession, what: str) -> None:
    """Commit or raise `RemoteWriteError` after rolling back."""
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("List write failed (%s)", what)
        raise RemoteWriteError(f"Could not {what}") from e


async def _get_list(db: AsyncSession, list_id: UUID) -> List:
    lst = await db.get(List, list_id)
    if lst is None:
        raise NotFoundError("List not found")
    return lst


async def get_membership(db: AsyncSession, list_id: UUID, user_id: UUID) -> Optional[ListMember]:
    return await db.get(ListMember, (list_id, user_id))


async def _require_role(
    db: AsyncSession,
    list_id: UUID,
    user: User,
    *,
    action: str,
    allowed: Callable[[ListRole], bool] = lambda _role: True,
) -> Tuple[List, ListMember]:
    """Fail closed: missing list → 404, no membership → 403, insufficient role → 403."""
    lst = await _get_list(db, list_id)
    member = await get_membership(db, list_id, user.id)
    if member is None:
        raise NotAMemberError()
    role = ListRole(member.role)
    if not allowed(role):
        raise PermissionDenied(action=action, role=role.value)
    return lst, member


# ─────────────────────────────────────────────────────────────
# 📋 Lists
# ─────────────────────────────────────────────────────────────

async def create_list(db: AsyncSession, user: User, name: str) -> List:
    """Create the list and its owner membership in one transaction."""
    lst = List(name=name.strip(), owner_id=user.id)
    db.add(lst)
    await db.flush()
    db.add(ListMember(list_id=lst.id, user_id=user.id, role=ListRole.OWNER))
    await _commit(db, "create list")
    logger.info("List created list_id=%s owner=%s", lst.id, user.id)

    # Best-effort label backfill; the list already exists either way.
    if user.display_name:
        try:
            member = await get_membership(db, lst.id, user.id)
            if member is not None and not member.member_name:
                member.member_name = user.display_name
                await db.commit()
        except SQLAlchemyError:
            await db.rollback()
            logger.warning("Owner member_name backfill failed list_id=%s", lst.id, exc_info=True)

    await db.refresh(lst)
    return lst


async def list_lists(db: AsyncSession, user: User) -> TList[Tuple[List, ListRole]]:
    """All lists where the caller holds any membership, with the caller's role."""
    rows = (
        await db.execute(
            select(List, ListMember.role)
            .join(ListMember, ListMember.list_id == List.id)
            .where(ListMember.user_id == user.id)
            .order_by(List.created_at, List.id)
        )
    ).all()
    return [(lst, ListRole(role)) for lst, role in rows]


async def get_role(db: AsyncSession, user: User, list_id: UUID) -> ListRole:
    """Caller's effective role; raises instead of defaulting when there is no membership."""
    _, member = await _require_role(db, list_id, user, action="read")
    return ListRole(member.role)


async def get_list_details(db: AsyncSession, user: User, list_id: UUID) -> ListDetails:
    lst, member = await _require_role(db, list_id, user, action="read")
    members = (
        await db.execute(
            select(ListMember).where(ListMember.list_id == list_id).order_by(ListMember.created_at)
        )
    ).scalars().all()
    items = (
        await db.execute(
            select(ListItem).where(ListItem.list_id == list_id).order_by(ListItem.created_at, ListItem.id)
        )
    ).scalars().all()
    return ListDetails(
        list=ListOut.model_validate(lst),
        items=[ItemOut.model_validate(i) for i in items],
        members=[MemberOut.model_validate(m) for m in members],
        role=ListRole(member.role),
    )


async def rename_list(db: AsyncSession, user: User, list_id: UUID, name: str) -> List:
    lst, _ = await _require_role(db, list_id, user, action="rename_list", allowed=lambda r: r.can_manage_list)
    lst.name = name.strip()
    await _commit(db, "rename list")
    await db.refresh(lst)
    return lst


async def delete_list(db: AsyncSession, user: User, list_id: UUID) -> None:
    """Owner-only; memberships and items go with the list."""
    lst, _ = await _require_role(db, list_id, user, action="delete_list", allowed=lambda r: r.can_manage_list)
    await db.delete(lst)
    await _commit(db, "delete list")
    logger.info("List deleted list_id=%s by=%s", list_id, user.id)


# ─────────────────────────────────────────────────────────────
# 🎞️ Items
# ─────────────────────────────────────────────────────────────

async def add_item(
    db: AsyncSession, user: User, list_id: UUID, content_id: int, content_type: MediaType
) -> ListItem:
    """Insert an item; duplicates of `(content_id, content_type)` are not rejected."""
    await _require_role(db, list_id, user, action="add_item", allowed=lambda r: r.can_edit_items)
    item = ListItem(list_id=list_id, content_id=content_id, content_type=content_type, added_by=user.id)
    db.add(item)
    await _commit(db, "add item")
    await db.refresh(item)
    return item


async def remove_item(db: AsyncSession, user: User, item_id: UUID) -> None:
    item = await db.get(ListItem, item_id)
    if item is None:
        raise NotFoundError("List item not found")
    await _require_role(db, item.list_id, user, action="remove_item", allowed=lambda r: r.can_edit_items)
    await db.delete(item)
    await _commit(db, "remove item")


async def get_lists_containing_content(
    db: AsyncSession, user: User, content_id: int, content_type: MediaType
) -> Dict[UUID, UUID]:
    """`list_id → item_id` over the caller's lists; earliest item wins on duplicates."""
    rows = (
        await db.execute(
            select(ListItem.list_id, ListItem.id)
            .join(ListMember, ListMember.list_id == ListItem.list_id)
            .where(
                ListMember.user_id == user.id,
                ListItem.content_id == content_id,
                ListItem.content_type == content_type,
            )
            .order_by(ListItem.created_at, ListItem.id)
        )
    ).all()
    found: Dict[UUID, UUID] = {}
    for list_id, item_id in rows:
        found.setdefault(list_id, item_id)
    return found


# ─────────────────────────────────────────────────────────────
# 👥 Membership
# ─────────────────────────────────────────────────────────────

async def get_list_name(db: AsyncSession, list_id: UUID) -> str:
    """Pre-membership preview: the name and nothing else."""
    name = (await db.execute(select(List.name).where(List.id == list_id))).scalar_one_or_none()
    if name is None:
        raise NotFoundError("List not found")
    return name


async def join_list(
    db: AsyncSession, user: User, list_id: UUID, member_name: str, role: InviteRole
) -> Tuple[ListMember, bool]:
    """
    Idempotent join. An existing membership is returned untouched (the first
    role wins); otherwise a membership with the invite's role is inserted.
    Returns `(membership, joined)`.
    """
    await _get_list(db, list_id)
    existing = await get_membership(db, list_id, user.id)
    if existing is not None:
        return existing, False

    member = ListMember(
        list_id=list_id,
        user_id=user.id,
        role=ListRole(InviteRole.parse(role).value),
        member_name=member_name.strip(),
    )
    db.add(member)
    try:
        await db.commit()
    except IntegrityError:
        # Concurrent join for the same (list, user) landed first.
        await db.rollback()
        existing = await get_membership(db, list_id, user.id)
        if existing is None:
            raise RemoteWriteError("Could not join list")
        return existing, False
    except SQLAlchemyError as e:
        await db.rollback()
        raise RemoteWriteError("Could not join list") from e

    logger.info("Joined list_id=%s user=%s role=%s", list_id, user.id, member.role)
    await db.refresh(member)
    return member, True


async def remove_member(db: AsyncSession, user: User, list_id: UUID, member_user_id: UUID) -> None:
    """Owner-only. The owner membership itself is never removed."""
    await _require_role(db, list_id, user, action="remove_member", allowed=lambda r: r.can_manage_list)
    target = await get_membership(db, list_id, member_user_id)
    if target is None:
        raise NotFoundError("Member not found")
    if ListRole(target.role) is ListRole.OWNER:
        raise PermissionDenied(action="remove_owner", role=ListRole.OWNER.value)
    await db.delete(target)
    await _commit(db, "remove member")


__all__ = [
    "create_list",
    "list_lists",
    "get_list_details",
    "get_role",
    "rename_list",
    "delete_list",
    "add_item",
    "remove_item",
    "get_lists_containing_content",
    "get_list_name",
    "join_list",
    "remove_member",
    "get_membership",
]
