from uuid import uuid4

import pytest

from cinelist.schemas.enums import InviteRole
from cinelist.services.sharing import build_invite_url, parse_invite_role, parse_invite_url


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("editor", InviteRole.EDITOR),
        (InviteRole.EDITOR, InviteRole.EDITOR),
        (InviteRole.VIEWER, InviteRole.VIEWER),
        (" EDITOR ", InviteRole.EDITOR),
        ("viewer", InviteRole.VIEWER),
        ("owner", InviteRole.VIEWER),
        ("admin", InviteRole.VIEWER),
        (None, InviteRole.VIEWER),
        ("", InviteRole.VIEWER),
    ],
)
def test_parse_invite_role(raw, expected):
    assert parse_invite_role(raw) is expected


def test_invite_url_is_deterministic_and_parses_back():
    list_id = uuid4()
    url = build_invite_url(list_id, "editor", base_url="https://cinelist.app/")
    assert url == f"https://cinelist.app/lists/{list_id}/join?role=editor"
    assert build_invite_url(list_id, "editor", base_url="https://cinelist.app/") == url
    assert parse_invite_url(url) == (list_id, InviteRole.EDITOR)


def test_invite_url_without_role_parses_as_viewer():
    list_id = uuid4()
    assert parse_invite_url(f"https://cinelist.app/lists/{list_id}/join") == (list_id, InviteRole.VIEWER)


@pytest.mark.parametrize("url", ["https://cinelist.app/lists", "https://cinelist.app/shared?data=x"])
def test_non_invite_urls_rejected(url):
    with pytest.raises(ValueError):
        parse_invite_url(url)


def test_invite_url_from_enum_role_keeps_role():
    list_id = uuid4()
    url = build_invite_url(list_id, InviteRole.EDITOR, base_url="https://cinelist.app")
    assert url.endswith("?role=editor")
    assert InviteRole.parse(InviteRole.EDITOR) is InviteRole.EDITOR
