# cinelist/services/migration_service.py
from __future__ import annotations

"""
Migration Service — anonymous → authenticated ownership transfer
================================================================

`migrate_user_data(db, caller, old_user_id, new_user_id)` moves everything the
old (anonymous) identity owns to the new identity inside ONE transaction:

    watchlists, watched_movies, watched_episodes,
    list_members, lists.owner_id, list_items.added_by

Rows that would collide with rows the new identity already has are dropped
(the new identity's row is kept). When the dropped row is an `owner`
membership, the surviving membership is promoted to `owner`, so every list
still has exactly one owner.

Any failure rolls the whole transaction back and raises `MigrationError`;
no partially-moved state is ever committed.
"""

import logging
from typing import Awaitable, Callable, Dict, List as TList, Optional, Tuple
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.orm import aliased
from sqlalchemy.ext.asyncio import AsyncSession

from cinelist.core.exceptions import AppException, MigrationError
from cinelist.db.models.list import List, ListItem, ListMember
from cinelist.db.models.user import User
from cinelist.db.models.watchlist import WatchedEpisode, WatchedMovie, WatchlistEntry
from cinelist.schemas.enums import ListRole

logger = logging.getLogger("cinelist.migration")

Step = Callable[[AsyncSession, UUID, UUID], Awaitable[int]]


# ─────────────────────────────────────────────────────────────
# 🔁 Per-table steps (each returns the number of rows moved)
# ─────────────────────────────────────────────────────────────

async def _move_presence_rows(db: AsyncSession, model, key_cols: Tuple[str, ...], old: UUID, new: UUID) -> int:
    theirs = aliased(model)
    collision = (
        select(theirs.user_id)
        .where(theirs.user_id == new, *[getattr(theirs, c) == getattr(model, c) for c in key_cols])
        .correlate(model)
        .exists()
    )
    await db.execute(
        delete(model)
        .where(model.user_id == old, collision)
        .execution_options(synchronize_session=False)
    )
    result = await db.execute(
        update(model)
        .where(model.user_id == old)
        .values(user_id=new)
        .execution_options(synchronize_session=False)
    )
    return int(result.rowcount or 0)


async def _move_watchlist(db: AsyncSession, old: UUID, new: UUID) -> int:
    return await _move_presence_rows(db, WatchlistEntry, ("tmdb_id", "media_type"), old, new)


async def _move_watched_movies(db: AsyncSession, old: UUID, new: UUID) -> int:
    return await _move_presence_rows(db, WatchedMovie, ("tmdb_id",), old, new)


async def _move_watched_episodes(db: AsyncSession, old: UUID, new: UUID) -> int:
    return await _move_presence_rows(db, WatchedEpisode, ("tmdb_episode_id",), old, new)


async def _move_memberships(db: AsyncSession, old: UUID, new: UUID) -> int:
    olds = (await db.execute(select(ListMember).where(ListMember.user_id == old))).scalars().all()
    moved = 0
    promote: TList[UUID] = []
    for membership in olds:
        mine = await db.get(ListMember, (membership.list_id, new))
        if mine is None:
            moved += 1
            continue
        if ListRole(membership.role) is ListRole.OWNER:
            promote.append(membership.list_id)
        await db.delete(membership)
    await db.flush()

    # Owner rows are gone before the promotion so one-owner-per-list holds throughout.
    for list_id in promote:
        await db.execute(
            update(ListMember)
            .where(ListMember.list_id == list_id, ListMember.user_id == new)
            .values(role=ListRole.OWNER)
            .execution_options(synchronize_session=False)
        )
    await db.execute(
        update(ListMember)
        .where(ListMember.user_id == old)
        .values(user_id=new)
        .execution_options(synchronize_session=False)
    )
    return moved


async def _move_owned_lists(db: AsyncSession, old: UUID, new: UUID) -> int:
    result = await db.execute(
        update(List).where(List.owner_id == old).values(owner_id=new).execution_options(synchronize_session=False)
    )
    return int(result.rowcount or 0)


async def _move_item_authorship(db: AsyncSession, old: UUID, new: UUID) -> int:
    result = await db.execute(
        update(ListItem)
        .where(ListItem.added_by == old)
        .values(added_by=new)
        .execution_options(synchronize_session=False)
    )
    return int(result.rowcount or 0)


# Memberships move before list ownership so the owner row already points at `new`.
STEPS: TList[Tuple[str, Step]] = [
    ("watchlist", _move_watchlist),
    ("watched_movies", _move_watched_movies),
    ("watched_episodes", _move_watched_episodes),
    ("memberships", _move_memberships),
    ("lists", _move_owned_lists),
    ("list_items", _move_item_authorship),
]


# ─────────────────────────────────────────────────────────────
# 🚚 Entry point
# ─────────────────────────────────────────────────────────────

async def migrate_user_data(
    db: AsyncSession,
    caller: User,
    old_user_id: Optional[UUID],
    new_user_id: Optional[UUID],
) -> Optional[Dict[str, int]]:
    """
    Atomically reassign `old_user_id`'s rows to `new_user_id`.

    Returns per-table counts, or None when there is nothing to do (empty or
    equal ids, or an unknown old identity).

    Raises
    ------
    MigrationError
        403 when the caller is not `new_user_id` or the old identity is not
        anonymous; 500 when the transfer failed and was rolled back.
    """
    if not old_user_id or not new_user_id or old_user_id == new_user_id:
        return None
    if caller.id != new_user_id:
        raise MigrationError("Data can only be migrated into the caller's account", status_code=403)

    old_user = await db.get(User, old_user_id)
    if old_user is None:
        logger.info("Migration skipped: unknown old user %s", old_user_id)
        return None
    if not old_user.is_anonymous:
        raise MigrationError("Only anonymous identities can be migrated", status_code=403)

    # Commit whatever the request already did so the transfer is its own transaction.
    if db.in_transaction():
        await db.commit()

    counts: Dict[str, int] = {}
    try:
        async with db.begin():
            for name, step in STEPS:
                counts[name] = await step(db, old_user_id, new_user_id)
    except AppException:
        raise
    except Exception as e:
        logger.exception("Migration failed old=%s new=%s (rolled back)", old_user_id, new_user_id)
        raise MigrationError() from e

    db.expire_all()
    logger.info("Migrated user data old=%s new=%s counts=%s", old_user_id, new_user_id, counts)
    return counts


__all__ = ["migrate_user_data", "STEPS"]
