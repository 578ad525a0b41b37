# cinelist/client/list_detail.py
from __future__ import annotations

"""
# Cinelist — List detail view logic

Loads a list (items, members, caller role) and resolves every item's display
details from the content provider concurrently.

Each `load()` takes a new generation number; a batch that finishes after a
newer load started (or after `close()`) is dropped instead of applied. Item
lookups that fail are kept with `content=None` so one bad id never blanks the
view. Mutations are read-after-write: they call the API, then reload.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional
from uuid import UUID

from cinelist.client.api import ApiClient
from cinelist.core.exceptions import AppException, PermissionDenied
from cinelist.schemas.content import ContentDetails
from cinelist.schemas.enums import InviteRole, ListRole, MediaType
from cinelist.schemas.lists import ItemOut, ListDetails
from cinelist.services.sharing import build_invite_url

logger = logging.getLogger(__name__)

__all__ = ["ResolvedItem", "ListSnapshot", "ListDetailView"]


@dataclass(frozen=True)
class ResolvedItem:
    item: ItemOut
    content: Optional[ContentDetails] = None


@dataclass(frozen=True)
class ListSnapshot:
    details: ListDetails
    items: List[ResolvedItem]
    generation: int

    @property
    def role(self) -> ListRole:
        return self.details.role


class ListDetailView:
    def __init__(self, api: ApiClient, content, list_id: UUID) -> None:
        self.api = api
        self.content = content
        self.list_id = list_id
        self.generation = 0
        self.snapshot: Optional[ListSnapshot] = None

    @property
    def role(self) -> Optional[ListRole]:
        return self.snapshot.role if self.snapshot else None

    @property
    def can_edit(self) -> bool:
        return bool(self.role and self.role.can_edit_items)

    @property
    def can_manage(self) -> bool:
        return bool(self.role and self.role.can_manage_list)

    def close(self) -> None:
        """Invalidate in-flight loads (the view went away)."""
        self.generation += 1

    async def _lookup(self, item: ItemOut) -> ResolvedItem:
        try:
            details = await self.content.get_details(item.content_id, item.content_type)
        except AppException as exc:
            logger.warning("Lookup for %s/%s failed: %s", item.content_type.value, item.content_id, exc.message)
            return ResolvedItem(item)
        return ResolvedItem(item, details)

    async def load(self) -> Optional[ListSnapshot]:
        """Fetch and resolve the list; returns None when the batch went stale."""
        self.generation += 1
        generation = self.generation
        details = await self.api.get_list_details(self.list_id)
        items = await asyncio.gather(*(self._lookup(item) for item in details.items))
        if generation != self.generation:
            logger.debug("Dropping stale list batch %s (current %s)", generation, self.generation)
            return None
        self.snapshot = ListSnapshot(details=details, items=list(items), generation=generation)
        return self.snapshot

    # ─────────────────────────────────────────────────────────────
    # Mutations
    # ─────────────────────────────────────────────────────────────
    def _require(self, allowed: bool, action: str) -> None:
        if self.snapshot is not None and not allowed:
            raise PermissionDenied(action=action, role=self.role.value if self.role else None)

    async def add_item(self, content_id: int, content_type: MediaType | str) -> Optional[ListSnapshot]:
        self._require(self.can_edit, "add_item")
        await self.api.add_item(self.list_id, content_id, content_type)
        return await self.load()

    async def remove_item(self, item_id: UUID) -> Optional[ListSnapshot]:
        self._require(self.can_edit, "remove_item")
        await self.api.remove_item(item_id)
        return await self.load()

    async def rename(self, name: str) -> Optional[ListSnapshot]:
        self._require(self.can_manage, "rename_list")
        await self.api.rename_list(self.list_id, name)
        return await self.load()

    async def delete(self) -> None:
        self._require(self.can_manage, "delete_list")
        await self.api.delete_list(self.list_id)
        self.close()
        self.snapshot = None

    async def remove_member(self, user_id: UUID) -> Optional[ListSnapshot]:
        self._require(self.can_manage, "remove_member")
        await self.api.remove_member(self.list_id, user_id)
        return await self.load()

    def share_url(self, role: InviteRole | str, *, base_url: Optional[str] = None) -> str:
        return build_invite_url(self.list_id, role, base_url=base_url)
