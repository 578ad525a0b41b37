# cinelist/client/store/cache.py
from __future__ import annotations

"""
# Cinelist — Local Reconciling Cache

Persisted mirror of the personal watchlist/watched state.

Mutations are optimistic: the reducer's next state is applied and persisted
synchronously, then each implied remote write is scheduled as an asyncio task.
The task's result (`EffectResult`) is the only place a failure shows up; it is
logged, never rolled back. The next `sync_with_remote()` pull overwrites local
state with whatever the server holds.

`sync_with_remote()` is push (dedup-on-insert) then pull-and-replace. At most
one run is in flight; concurrent callers await the same run.

Persisted shape under `settings.CLIENT_CACHE_KEY`:
    {"owner_id": "<uuid>|null", "my_list": [...], "watched_ids": [...]}
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional, Set
from uuid import UUID

from cinelist.client.api import ApiClient
from cinelist.client.storage import LocalStorage
from cinelist.client.store.state import (
    Action,
    Add,
    CacheState,
    Effect,
    EffectKind,
    MarkUnwatched,
    MarkWatched,
    Remove,
    Replace,
    reduce,
)
from cinelist.core.config import settings
from cinelist.core.exceptions import AppException
from cinelist.schemas.content import ContentItem, ContentRef

logger = logging.getLogger(__name__)

__all__ = ["EffectResult", "LocalReconcilingCache"]


@dataclass(frozen=True)
class EffectResult:
    effect: Effect
    ok: bool
    error: Optional[Exception] = None


class LocalReconcilingCache:
    def __init__(self, api: ApiClient, storage: LocalStorage, *, key: Optional[str] = None) -> None:
        self.api = api
        self.storage = storage
        self.key = key or settings.CLIENT_CACHE_KEY
        raw = storage.get(self.key) or {}
        self._state = CacheState.from_dict(raw)
        owner = raw.get("owner_id") if isinstance(raw, dict) else None
        self.owner_id: Optional[UUID] = UUID(owner) if owner else None
        self._pending: Set[asyncio.Task] = set()
        self._sync_task: Optional[asyncio.Task] = None

    # ─────────────────────────────────────────────────────────────
    # State & persistence
    # ─────────────────────────────────────────────────────────────
    @property
    def state(self) -> CacheState:
        return self._state

    @property
    def my_list(self) -> List[ContentItem]:
        return list(self._state.my_list)

    @property
    def watched_ids(self) -> List[int]:
        return list(self._state.watched_ids)

    def _persist(self) -> None:
        payload = self._state.to_dict()
        payload["owner_id"] = str(self.owner_id) if self.owner_id else None
        self.storage.set(self.key, payload)

    def bind(self, user_id: UUID, *, carry_over: bool = False) -> None:
        """Scope the cache to `user_id`.

        State persisted for a different identity is discarded unless
        `carry_over` is set (the anonymous → authenticated hand-off).
        """
        if self.owner_id is not None and self.owner_id != user_id and not carry_over:
            logger.info("Discarding cached state of %s for %s", self.owner_id, user_id)
            self._state = CacheState()
        self.owner_id = user_id
        self._persist()

    def dispatch(self, action: Action) -> List[asyncio.Task]:
        self._state, effects = reduce(self._state, action)
        self._persist()
        return [self._schedule(effect) for effect in effects]

    # ─────────────────────────────────────────────────────────────
    # Effects
    # ─────────────────────────────────────────────────────────────
    def _schedule(self, effect: Effect) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(self._run_effect(effect))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _run_effect(self, effect: Effect) -> EffectResult:
        try:
            if effect.kind is EffectKind.WATCHLIST_INSERT:
                await self.api.add_to_watchlist(effect.content_id, effect.media_type)
            elif effect.kind is EffectKind.WATCHLIST_DELETE:
                await self.api.remove_from_watchlist(effect.content_id, effect.media_type)
            elif effect.kind is EffectKind.WATCHED_INSERT:
                await self.api.mark_watched(effect.content_id, effect.media_type)
            else:
                await self.api.mark_unwatched(effect.content_id)
        except AppException as exc:
            logger.warning("Remote %s for %s failed: %s", effect.kind.value, effect.content_id, exc.message)
            return EffectResult(effect, ok=False, error=exc)
        return EffectResult(effect, ok=True)

    async def drain(self) -> List[EffectResult]:
        """Wait for every scheduled remote write."""
        if not self._pending:
            return []
        return list(await asyncio.gather(*list(self._pending)))

    # ─────────────────────────────────────────────────────────────
    # Mutations (optimistic) & predicates
    # ─────────────────────────────────────────────────────────────
    def add_to_list(self, item: ContentItem) -> List[asyncio.Task]:
        return self.dispatch(Add(item))

    def remove_from_list(self, content_id: int) -> List[asyncio.Task]:
        return self.dispatch(Remove(content_id))

    def mark_as_watched(self, content_id: int) -> List[asyncio.Task]:
        return self.dispatch(MarkWatched(content_id))

    def mark_as_unwatched(self, content_id: int) -> List[asyncio.Task]:
        return self.dispatch(MarkUnwatched(content_id))

    def is_in_list(self, content_id: int) -> bool:
        return self._state.is_in_list(content_id)

    def is_watched(self, content_id: int) -> bool:
        return self._state.is_watched(content_id)

    # ─────────────────────────────────────────────────────────────
    # Reconciliation
    # ─────────────────────────────────────────────────────────────
    async def sync_with_remote(self) -> CacheState:
        task = self._sync_task
        if task is None or task.done():
            task = asyncio.get_running_loop().create_task(self._sync_once())
            self._sync_task = task
        return await asyncio.shield(task)

    async def _sync_once(self) -> CacheState:
        await self.drain()
        snapshot = self._state

        try:
            await self.api.sync_user_content(
                watchlist=[ContentRef(id=i.id, media_type=i.media_type) for i in snapshot.my_list],
                watched=[ContentRef(id=i, media_type=snapshot.media_type_of(i)) for i in snapshot.watched_ids],
            )
        except AppException as exc:
            logger.warning("Watchlist push failed (local-only rows will be lost on pull): %s", exc.message)

        try:
            remote = await self.api.get_user_content()
        except AppException as exc:
            logger.warning("Watchlist pull failed; keeping local state: %s", exc.message)
            return self._state

        # Keep display metadata we already have for rows the server confirms.
        known = {(i.id, i.media_type): i for i in self._state.my_list}
        my_list = tuple(
            known.get((ref.id, ref.media_type)) or ContentItem(id=ref.id, media_type=ref.media_type)
            for ref in remote.watchlist
        )
        self.dispatch(Replace(my_list=my_list, watched_ids=tuple(remote.watched_ids)))
        return self._state
