import pytest
from httpx import AsyncClient

from cinelist.core.exceptions import NotFoundError
from cinelist.db.models.watchlist import WatchedMovie
from cinelist.schemas.content import ContentRef, EpisodeRef
from cinelist.schemas.enums import MediaType
from tests.fixtures.app import API


def _episodes(show_id: int, season: int, count: int, start_id: int):
    return [
        EpisodeRef(tmdb_episode_id=start_id + n, tmdb_show_id=show_id, season_number=season, episode_number=n + 1)
        for n in range(count)
    ]


# ─────────────────────────────────────────────────────────────
# Watchlist & watched
# ─────────────────────────────────────────────────────────────
@pytest.mark.anyio
async def test_watchlist_toggles_are_idempotent(anonymous_user, api_factory):
    me = await anonymous_user()
    api = api_factory(me.token)

    assert await api.add_to_watchlist(603, "movie") is True
    assert await api.add_to_watchlist(603, "movie") is False
    assert await api.add_to_watchlist(603, "tv") is True

    content = await api.get_user_content()
    assert [(r.id, r.media_type) for r in content.watchlist] == [(603, MediaType.MOVIE), (603, MediaType.TV)]

    assert await api.remove_from_watchlist(603, "tv") is True
    assert await api.remove_from_watchlist(603, "tv") is False
    assert [r.id for r in (await api.get_user_content()).watchlist] == [603]


@pytest.mark.anyio
async def test_watched_defaults_to_movie(async_client: AsyncClient, anonymous_user, count_rows):
    me = await anonymous_user()
    resp = await async_client.post(f"{API}/me/watched/550", headers=me.headers)
    assert resp.status_code == 200, resp.text
    assert resp.json() == {"ok": True, "changed": True}

    resp = await async_client.post(f"{API}/me/watched/1399", json={"media_type": "tv"}, headers=me.headers)
    assert resp.json()["changed"] is True

    assert await count_rows(WatchedMovie, WatchedMovie.media_type == MediaType.MOVIE) == 1
    assert await count_rows(WatchedMovie, WatchedMovie.media_type == MediaType.TV) == 1

    resp = await async_client.delete(f"{API}/me/watched/550", headers=me.headers)
    assert resp.json()["changed"] is True
    resp = await async_client.get(f"{API}/me/content", headers=me.headers)
    assert resp.json()["watched_ids"] == [1399]


@pytest.mark.anyio
async def test_content_is_per_user(anonymous_user, api_factory):
    me, other = await anonymous_user(), await anonymous_user()
    await api_factory(me.token).add_to_watchlist(603, "movie")
    content = await api_factory(other.token).get_user_content()
    assert content.watchlist == []
    assert content.watched_ids == []


@pytest.mark.anyio
async def test_sync_inserts_only_missing_rows(anonymous_user, api_factory):
    me = await anonymous_user()
    api = api_factory(me.token)
    await api.add_to_watchlist(603, "movie")
    await api.mark_watched(550)

    result = await api.sync_user_content(
        watchlist=[ContentRef(id=603), ContentRef(id=1399, media_type="tv"), ContentRef(id=1399, media_type="tv")],
        watched=[ContentRef(id=550), ContentRef(id=13)],
    )
    assert (result.inserted_watchlist, result.inserted_watched) == (1, 1)

    content = await api.get_user_content()
    assert {(r.id, r.media_type) for r in content.watchlist} == {(603, MediaType.MOVIE), (1399, MediaType.TV)}
    assert sorted(content.watched_ids) == [13, 550]


# ─────────────────────────────────────────────────────────────
# Episodes, seasons & progress
# ─────────────────────────────────────────────────────────────
@pytest.mark.anyio
async def test_episode_marks(anonymous_user, api_factory):
    me = await anonymous_user()
    api = api_factory(me.token)
    (ep,) = _episodes(1399, 1, 1, 63056)

    assert await api.mark_episode_watched(ep) is True
    assert await api.mark_episode_watched(ep) is False
    assert [e.tmdb_episode_id for e in await api.get_watched_episodes(1399)] == [63056]

    assert await api.mark_episode_unwatched(63056) is True
    assert await api.get_watched_episodes(1399) == []


@pytest.mark.anyio
async def test_season_marks_only_touch_that_season(anonymous_user, api_factory):
    me = await anonymous_user()
    api = api_factory(me.token)
    season1 = _episodes(1399, 1, 3, 100)
    season2 = _episodes(1399, 2, 2, 200)

    await api.mark_episode_watched(season1[0])
    assert await api.mark_season_watched(1399, 1, season1 + season2) == 2
    await api.mark_season_watched(1399, 2, season2)

    assert len(await api.get_watched_episodes(1399)) == 5
    assert await api.mark_season_unwatched(1399, 1) == 3
    assert [e.season_number for e in await api.get_watched_episodes(1399)] == [2, 2]


@pytest.mark.anyio
async def test_progress_uses_series_cache(anonymous_user, api_factory):
    me = await anonymous_user()
    api = api_factory(me.token)
    await api.mark_season_watched(1399, 1, _episodes(1399, 1, 3, 100))

    progress = await api.get_series_progress(1399)
    assert progress.watched_episodes == 3
    assert progress.percentage is None
    assert progress.fully_watched is False

    await api.put_series_cache(1399, total_episodes=4, number_of_seasons=2)
    progress = await api.get_series_progress(1399)
    assert progress.total_episodes == 4
    assert progress.percentage == 75.0
    assert [(s.season_number, s.watched) for s in progress.seasons] == [(1, 3)]

    await api.mark_season_watched(1399, 2, _episodes(1399, 2, 1, 200))
    assert (await api.get_series_progress(1399)).fully_watched is True


@pytest.mark.anyio
async def test_series_cache_upsert_and_miss(anonymous_user, api_factory):
    me = await anonymous_user()
    api = api_factory(me.token)

    with pytest.raises(NotFoundError):
        await api.get_series_cache(1399)

    await api.put_series_cache(1399, total_episodes=10, number_of_seasons=1)
    updated = await api.put_series_cache(1399, total_episodes=20, number_of_seasons=2)
    assert (updated.total_episodes, updated.number_of_seasons) == (20, 2)
    assert (await api.get_series_cache(1399)).total_episodes == 20
