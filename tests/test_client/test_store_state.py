import pytest

from cinelist.client.store.state import (
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
from cinelist.schemas.content import ContentItem
from cinelist.schemas.enums import MediaType

MATRIX = ContentItem(id=603, media_type="movie", title="The Matrix")
GOT = ContentItem(id=1399, media_type="tv", name="Game of Thrones")


def test_add_then_remove_restores_membership():
    state, effects = reduce(CacheState(), Add(MATRIX))
    assert state.is_in_list(603)
    assert effects == (Effect(EffectKind.WATCHLIST_INSERT, 603, MediaType.MOVIE),)

    state, effects = reduce(state, Remove(603))
    assert not state.is_in_list(603)
    assert effects == (Effect(EffectKind.WATCHLIST_DELETE, 603, MediaType.MOVIE),)


def test_add_dedups_by_id():
    state, _ = reduce(CacheState(), Add(MATRIX))
    same_id_show = ContentItem(id=603, media_type="tv", name="Not The Matrix")
    again, effects = reduce(state, Add(same_id_show))
    assert again is state
    assert effects == ()


def test_noops_emit_no_effects():
    state = CacheState()
    assert reduce(state, Remove(603)) == (state, ())
    assert reduce(state, MarkUnwatched(603)) == (state, ())

    watched, _ = reduce(state, MarkWatched(603))
    assert reduce(watched, MarkWatched(603)) == (watched, ())


def test_watched_effect_uses_list_media_type():
    state, _ = reduce(CacheState(), Add(GOT))
    state, effects = reduce(state, MarkWatched(1399))
    assert effects == (Effect(EffectKind.WATCHED_INSERT, 1399, MediaType.TV),)

    # Unknown ids default to movie.
    _, effects = reduce(state, MarkWatched(550))
    assert effects[0].media_type is MediaType.MOVIE

    state, effects = reduce(state, MarkUnwatched(1399))
    assert not state.is_watched(1399)
    assert effects == (Effect(EffectKind.WATCHED_DELETE, 1399, MediaType.TV),)


def test_membership_independent_of_watched():
    state, _ = reduce(CacheState(), MarkWatched(603))
    assert state.is_watched(603)
    assert not state.is_in_list(603)

    state, _ = reduce(state, Add(MATRIX))
    state, _ = reduce(state, Remove(603))
    assert state.is_watched(603)


def test_replace_swaps_state_and_dedups_watched():
    state, _ = reduce(CacheState(), Add(MATRIX))
    state, effects = reduce(state, Replace(my_list=(GOT,), watched_ids=(5, 5, 7)))
    assert effects == ()
    assert [i.id for i in state.my_list] == [1399]
    assert state.watched_ids == (5, 7)


def test_replace_keeps_one_entry_per_id():
    as_show = ContentItem(id=603, media_type="tv")
    state, _ = reduce(CacheState(), Replace(my_list=(MATRIX, GOT, as_show)))
    assert [(i.id, i.media_type) for i in state.my_list] == [(603, MediaType.MOVIE), (1399, MediaType.TV)]


def test_unknown_action_raises():
    with pytest.raises(TypeError):
        reduce(CacheState(), object())


def test_dict_round_trip_keeps_metadata():
    state, _ = reduce(CacheState(), Add(GOT))
    state, _ = reduce(state, MarkWatched(13))
    restored = CacheState.from_dict(state.to_dict())
    assert restored == state
    assert restored.find(1399).display_title == "Game of Thrones"
    assert CacheState.from_dict(None) == CacheState()
