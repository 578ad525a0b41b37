# cinelist/client/store/state.py
from __future__ import annotations

"""
Pure state transitions for the personal watchlist cache.

`reduce(state, action)` returns the next state plus the remote writes that the
transition implies. Nothing here touches storage or the network; the effect
layer in `cinelist.client.store.cache` applies the results.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple, Union

from cinelist.schemas.content import ContentItem
from cinelist.schemas.enums import MediaType

__all__ = [
    "CacheState",
    "Add",
    "Remove",
    "MarkWatched",
    "MarkUnwatched",
    "Replace",
    "Action",
    "EffectKind",
    "Effect",
    "reduce",
]


@dataclass(frozen=True)
class CacheState:
    my_list: Tuple[ContentItem, ...] = ()
    watched_ids: Tuple[int, ...] = ()

    def is_in_list(self, content_id: int) -> bool:
        return any(item.id == content_id for item in self.my_list)

    def is_watched(self, content_id: int) -> bool:
        return content_id in self.watched_ids

    def find(self, content_id: int) -> Optional[ContentItem]:
        return next((item for item in self.my_list if item.id == content_id), None)

    def media_type_of(self, content_id: int) -> MediaType:
        item = self.find(content_id)
        return item.media_type if item is not None else MediaType.MOVIE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "my_list": [item.model_dump(mode="json") for item in self.my_list],
            "watched_ids": list(self.watched_ids),
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "CacheState":
        data = data or {}
        return cls(
            my_list=tuple(ContentItem.model_validate(row) for row in data.get("my_list") or ()),
            watched_ids=tuple(int(i) for i in data.get("watched_ids") or ()),
        )


# ─────────────────────────────────────────────────────────────
# Actions
# ─────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class Add:
    item: ContentItem


@dataclass(frozen=True)
class Remove:
    content_id: int


@dataclass(frozen=True)
class MarkWatched:
    content_id: int


@dataclass(frozen=True)
class MarkUnwatched:
    content_id: int


@dataclass(frozen=True)
class Replace:
    my_list: Tuple[ContentItem, ...] = ()
    watched_ids: Tuple[int, ...] = ()


Action = Union[Add, Remove, MarkWatched, MarkUnwatched, Replace]


# ─────────────────────────────────────────────────────────────
# Effects
# ─────────────────────────────────────────────────────────────
class EffectKind(str, Enum):
    WATCHLIST_INSERT = "watchlist_insert"
    WATCHLIST_DELETE = "watchlist_delete"
    WATCHED_INSERT = "watched_insert"
    WATCHED_DELETE = "watched_delete"


@dataclass(frozen=True)
class Effect:
    kind: EffectKind
    content_id: int
    media_type: MediaType = MediaType.MOVIE


def _dedup_ids(ids: Iterable[int]) -> Tuple[int, ...]:
    return tuple(dict.fromkeys(int(i) for i in ids))


def _dedup_items(items: Iterable[ContentItem]) -> Tuple[ContentItem, ...]:
    first: Dict[int, ContentItem] = {}
    for item in items:
        first.setdefault(item.id, item)
    return tuple(first.values())


def reduce(state: CacheState, action: Action) -> Tuple[CacheState, Tuple[Effect, ...]]:
    if isinstance(action, Add):
        # Dedup by id only; a movie and a show sharing an id collide.
        if state.is_in_list(action.item.id):
            return state, ()
        new = CacheState(my_list=state.my_list + (action.item,), watched_ids=state.watched_ids)
        return new, (Effect(EffectKind.WATCHLIST_INSERT, action.item.id, action.item.media_type),)

    if isinstance(action, Remove):
        item = state.find(action.content_id)
        if item is None:
            return state, ()
        new = CacheState(
            my_list=tuple(i for i in state.my_list if i.id != action.content_id),
            watched_ids=state.watched_ids,
        )
        return new, (Effect(EffectKind.WATCHLIST_DELETE, item.id, item.media_type),)

    if isinstance(action, MarkWatched):
        if state.is_watched(action.content_id):
            return state, ()
        new = CacheState(my_list=state.my_list, watched_ids=state.watched_ids + (action.content_id,))
        return new, (Effect(EffectKind.WATCHED_INSERT, action.content_id, state.media_type_of(action.content_id)),)

    if isinstance(action, MarkUnwatched):
        if not state.is_watched(action.content_id):
            return state, ()
        new = CacheState(
            my_list=state.my_list,
            watched_ids=tuple(i for i in state.watched_ids if i != action.content_id),
        )
        return new, (Effect(EffectKind.WATCHED_DELETE, action.content_id, state.media_type_of(action.content_id)),)

    if isinstance(action, Replace):
        # Remote may hold one id under both media types; the first row wins.
        return CacheState(my_list=_dedup_items(action.my_list), watched_ids=_dedup_ids(action.watched_ids)), ()

    raise TypeError(f"unknown action: {action!r}")
