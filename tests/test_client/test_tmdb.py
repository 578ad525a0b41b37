import httpx
import pytest

from cinelist.client.tmdb import PLACEHOLDER_IMAGE, TMDBClient
from cinelist.core.exceptions import AppException, NotFoundError
from cinelist.schemas.enums import MediaType


def _client(handler) -> TMDBClient:
    return TMDBClient("tmdb-token", base_url="https://tmdb.test/3", language="en-US", transport=httpx.MockTransport(handler))


@pytest.mark.anyio
async def test_details_request_shape_and_stamp():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"id": 1399, "name": "Game of Thrones", "number_of_seasons": 8})

    tmdb = _client(handler)
    details = await tmdb.get_details(1399, "tv")
    await tmdb.aclose()

    assert details.media_type is MediaType.TV
    assert details.display_title == "Game of Thrones"
    assert details.number_of_seasons == 8

    (request,) = seen
    assert request.url.path == "/3/tv/1399"
    assert request.url.params["append_to_response"] == "credits,videos,watch/providers"
    assert request.url.params["language"] == "en-US"
    assert request.headers["authorization"] == "Bearer tmdb-token"


@pytest.mark.anyio
async def test_search_drops_people():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["query"] == "matrix"
        return httpx.Response(200, json={"results": [
            {"id": 603, "media_type": "movie", "title": "The Matrix"},
            {"id": 6384, "media_type": "person", "name": "Keanu Reeves"},
            {"id": 1, "media_type": "tv", "name": "Matrix"},
        ]})

    tmdb = _client(handler)
    results = await tmdb.search("matrix")
    assert [(r.id, r.media_type) for r in results] == [(603, MediaType.MOVIE), (1, MediaType.TV)]


@pytest.mark.anyio
async def test_discover_stamps_media_type_and_drops_empty_filters():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/3/discover/tv"
        assert request.url.params["with_genres"] == "18"
        assert "with_cast" not in request.url.params
        return httpx.Response(200, json={"results": [{"id": 1399, "name": "Game of Thrones"}]})

    results = await _client(handler).discover("tv", {"with_genres": "18", "with_cast": None})
    assert results[0].media_type is MediaType.TV


@pytest.mark.anyio
async def test_trending_window_validated():
    tmdb = _client(lambda request: httpx.Response(200, json={"results": []}))
    assert await tmdb.get_trending("day") == []
    with pytest.raises(ValueError):
        await tmdb.get_trending("month")


@pytest.mark.anyio
async def test_search_person():
    tmdb = _client(lambda request: httpx.Response(200, json={"results": [{"id": 6384}, {"id": 1}]}))
    assert await tmdb.search_person("Keanu") == 6384

    empty = _client(lambda request: httpx.Response(200, json={"results": []}))
    assert await empty.search_person("Nobody") is None


@pytest.mark.anyio
async def test_errors_map_to_app_exceptions():
    with pytest.raises(NotFoundError):
        await _client(lambda request: httpx.Response(404, json={})).get_details(1, "movie")

    with pytest.raises(AppException) as exc:
        await _client(lambda request: httpx.Response(500, json={})).get_details(1, "movie")
    assert exc.value.status_code == 502

    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(AppException) as exc:
        await _client(refuse).get_season_details(1399, 1)
    assert exc.value.status_code == 502


def test_image_url():
    tmdb = TMDBClient("t", base_url="https://tmdb.test/3")
    assert tmdb.image_url(None) == PLACEHOLDER_IMAGE
    assert tmdb.image_url("/abc.jpg", "w185") == "https://image.tmdb.org/t/p/w185/abc.jpg"
