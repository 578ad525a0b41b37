import base64
import json

import pytest

from cinelist.client.shared_watchlist import (
    decode_shared_watchlist,
    encode_shared_watchlist,
    resolve_shared_watchlist,
    shared_data_from_url,
)
from cinelist.core.exceptions import DecodeError
from cinelist.schemas.content import ContentItem, ContentRef
from cinelist.schemas.enums import MediaType


def _b64(payload) -> str:
    return base64.b64encode(json.dumps(payload).encode()).decode()


def test_encode_produces_decodable_link():
    url = encode_shared_watchlist(
        [ContentItem(id=603, title="The Matrix"), ContentItem(id=1399, media_type="tv")],
        base_url="https://cinelist.app/",
    )
    assert url.startswith("https://cinelist.app/shared?data=")
    refs = decode_shared_watchlist(shared_data_from_url(url))
    assert [(r.id, r.media_type) for r in refs] == [(603, MediaType.MOVIE), (1399, MediaType.TV)]


def test_payload_carries_only_id_and_type():
    url = encode_shared_watchlist([ContentItem(id=603, title="The Matrix")])
    raw = json.loads(base64.b64decode(shared_data_from_url(url)))
    assert raw == [{"id": 603, "type": "movie"}]


@pytest.mark.parametrize(
    "data",
    [
        "",
        "%%%not-base64%%%",
        base64.b64encode(b"not json").decode(),
        _b64({"id": 603, "type": "movie"}),
        _b64([{"id": 603}]),
        _b64([{"id": 603, "type": "person"}]),
        _b64(["603"]),
    ],
)
def test_malformed_payloads_raise_decode_error(data):
    with pytest.raises(DecodeError):
        decode_shared_watchlist(data)


def test_link_without_data():
    with pytest.raises(DecodeError):
        shared_data_from_url("https://cinelist.app/shared")


@pytest.mark.anyio
async def test_resolve_skips_failed_lookups(fake_content):
    fake_content.missing.add(13)
    refs = [ContentRef(id=603), ContentRef(id=13), ContentRef(id=1399, media_type="tv")]
    resolved = await resolve_shared_watchlist(fake_content, refs)
    assert [d.id for d in resolved] == [603, 1399]
    assert len(fake_content.calls) == 3
