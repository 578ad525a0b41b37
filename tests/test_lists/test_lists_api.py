import pytest
from httpx import AsyncClient

from cinelist.core.exceptions import NotAMemberError, NotFoundError, PermissionDenied
from cinelist.db.models.list import List, ListItem, ListMember
from cinelist.schemas.enums import ListRole, MediaType
from cinelist.services.sharing import parse_invite_url
from tests.fixtures.app import API


# ─────────────────────────────────────────────────────────────
# Create / read
# ─────────────────────────────────────────────────────────────
@pytest.mark.anyio
async def test_create_list_makes_caller_owner(anonymous_user, api_factory, count_rows):
    me = await anonymous_user()
    api = api_factory(me.token)

    lst = await api.create_list("  Weekend Picks ")
    assert lst.name == "Weekend Picks"
    assert lst.owner_id == me.id

    details = await api.get_list_details(lst.id)
    assert details.role is ListRole.OWNER
    assert [(m.user_id, m.role) for m in details.members] == [(me.id, ListRole.OWNER)]
    assert await count_rows(ListMember, ListMember.list_id == lst.id, ListMember.role == ListRole.OWNER) == 1

    listed = await api.list_lists()
    assert [(row.id, row.role) for row in listed] == [(lst.id, ListRole.OWNER)]


@pytest.mark.anyio
async def test_blank_list_name_rejected(async_client: AsyncClient, anonymous_user):
    me = await anonymous_user()
    resp = await async_client.post(f"{API}/lists", json={"name": "   "}, headers=me.headers)
    assert resp.status_code == 422


@pytest.mark.anyio
async def test_details_fail_closed_for_non_members(async_client: AsyncClient, anonymous_user, api_factory):
    owner, stranger = await anonymous_user(), await anonymous_user()
    lst = await api_factory(owner.token).create_list("Private")

    resp = await async_client.get(f"{API}/lists/{lst.id}", headers=stranger.headers)
    assert resp.status_code == 403
    assert resp.json()["title"] == "NotAMemberError"

    with pytest.raises(NotAMemberError):
        await api_factory(stranger.token).get_list_details(lst.id)


@pytest.mark.anyio
async def test_unknown_list_is_404(anonymous_user, api_factory):
    from uuid import uuid4

    me = await anonymous_user()
    with pytest.raises(NotFoundError):
        await api_factory(me.token).get_list_details(uuid4())


# ─────────────────────────────────────────────────────────────
# Scenario: build a list, find it by content, remove the item
# ─────────────────────────────────────────────────────────────
@pytest.mark.anyio
async def test_weekend_picks_round_trip(anonymous_user, api_factory):
    me = await anonymous_user()
    api = api_factory(me.token)

    lst = await api.create_list("Weekend Picks")
    item = await api.add_item(lst.id, 603, "movie")
    assert item.added_by == me.id
    assert item.content_type is MediaType.MOVIE

    assert await api.get_lists_containing_content(603, MediaType.MOVIE) == {lst.id: item.id}
    assert await api.get_lists_containing_content(603, MediaType.TV) == {}

    await api.remove_item(item.id)
    assert await api.get_lists_containing_content(603, MediaType.MOVIE) == {}
    assert (await api.get_list_details(lst.id)).items == []


@pytest.mark.anyio
async def test_containing_returns_earliest_duplicate_and_only_own_lists(anonymous_user, api_factory):
    me, other = await anonymous_user(), await anonymous_user()
    api, other_api = api_factory(me.token), api_factory(other.token)

    mine = await api.create_list("Mine")
    first = await api.add_item(mine.id, 27205, MediaType.MOVIE)
    await api.add_item(mine.id, 27205, MediaType.MOVIE)

    theirs = await other_api.create_list("Theirs")
    await other_api.add_item(theirs.id, 27205, MediaType.MOVIE)

    assert await api.get_lists_containing_content(27205, "movie") == {mine.id: first.id}
    assert len((await api.get_list_details(mine.id)).items) == 2


# ─────────────────────────────────────────────────────────────
# Joining & invite links
# ─────────────────────────────────────────────────────────────
@pytest.mark.anyio
async def test_share_urls_differ_only_in_role(anonymous_user, api_factory):
    owner = await anonymous_user()
    api = api_factory(owner.token)
    lst = await api.create_list("Movie Night")

    editor_url = (await api.get_share_url(lst.id, "editor")).url
    viewer_url = (await api.get_share_url(lst.id, "viewer")).url
    assert editor_url.replace("role=editor", "role=viewer") == viewer_url
    assert editor_url.startswith(f"https://cinelist.app/lists/{lst.id}/join")

    for url, expected in ((editor_url, ListRole.EDITOR), (viewer_url, ListRole.VIEWER)):
        guest = await anonymous_user()
        list_id, role = parse_invite_url(url)
        result = await api_factory(guest.token).join_list(list_id, "Guest", role)
        assert result.joined is True
        assert result.role is expected


@pytest.mark.anyio
async def test_join_is_idempotent_and_first_role_wins(anonymous_user, api_factory, count_rows):
    owner, guest = await anonymous_user(), await anonymous_user()
    lst = await api_factory(owner.token).create_list("Movie Night")
    guest_api = api_factory(guest.token)

    first = await guest_api.join_list(lst.id, "Bia", "viewer")
    second = await guest_api.join_list(lst.id, "Bia again", "editor")
    assert (first.joined, first.role) == (True, ListRole.VIEWER)
    assert (second.joined, second.role) == (False, ListRole.VIEWER)
    assert await count_rows(ListMember, ListMember.list_id == lst.id, ListMember.user_id == guest.id) == 1


@pytest.mark.anyio
async def test_editor_link_grants_editor(async_client: AsyncClient, anonymous_user, api_factory):
    owner, guest = await anonymous_user(), await anonymous_user()
    lst = await api_factory(owner.token).create_list("Movie Night")

    resp = await async_client.post(
        f"{API}/lists/{lst.id}/join", json={"member_name": "Caio", "role": "editor"}, headers=guest.headers
    )
    assert resp.status_code == 200, resp.text
    assert (resp.json()["joined"], resp.json()["role"]) == (True, "editor")


@pytest.mark.anyio
async def test_owner_role_cannot_be_granted_by_link(async_client: AsyncClient, anonymous_user, api_factory):
    owner, guest = await anonymous_user(), await anonymous_user()
    lst = await api_factory(owner.token).create_list("Movie Night")

    for role in ("owner", "admin"):
        resp = await async_client.post(
            f"{API}/lists/{lst.id}/join", json={"member_name": "Caio", "role": role}, headers=guest.headers
        )
        assert resp.status_code == 200, resp.text
        assert resp.json()["role"] == "viewer"

    share = await async_client.get(f"{API}/lists/{lst.id}/share?role=owner", headers=owner.headers)
    assert share.json()["role"] == "viewer"


@pytest.mark.anyio
async def test_owner_joining_own_list_keeps_owner(anonymous_user, api_factory):
    owner = await anonymous_user()
    api = api_factory(owner.token)
    lst = await api.create_list("Mine")
    result = await api.join_list(lst.id, "Me", "viewer")
    assert (result.joined, result.role) == (False, ListRole.OWNER)


@pytest.mark.anyio
async def test_list_name_preview_needs_no_membership(anonymous_user, api_factory):
    from uuid import uuid4

    owner, guest = await anonymous_user(), await anonymous_user()
    lst = await api_factory(owner.token).create_list("Sci-Fi Marathon")
    guest_api = api_factory(guest.token)

    assert await guest_api.get_list_name(lst.id) == "Sci-Fi Marathon"
    with pytest.raises(NotFoundError):
        await guest_api.get_list_name(uuid4())


# ─────────────────────────────────────────────────────────────
# Role enforcement
# ─────────────────────────────────────────────────────────────
@pytest.mark.anyio
async def test_viewer_cannot_edit(async_client: AsyncClient, anonymous_user, api_factory):
    owner, viewer = await anonymous_user(), await anonymous_user()
    owner_api = api_factory(owner.token)
    lst = await owner_api.create_list("Movie Night")
    item = await owner_api.add_item(lst.id, 603, "movie")

    viewer_api = api_factory(viewer.token)
    await viewer_api.join_list(lst.id, "Viewer", "viewer")

    resp = await async_client.post(
        f"{API}/lists/{lst.id}/items", json={"content_id": 1, "content_type": "movie"}, headers=viewer.headers
    )
    assert resp.status_code == 403
    body = resp.json()
    assert body["title"] == "PermissionDenied"

    with pytest.raises(PermissionDenied) as exc:
        await viewer_api.remove_item(item.id)
    assert exc.value.details == {"action": "remove_item", "role": "viewer"}

    with pytest.raises(PermissionDenied):
        await viewer_api.rename_list(lst.id, "Mine now")


@pytest.mark.anyio
async def test_editor_edits_items_but_cannot_manage(anonymous_user, api_factory):
    owner, editor = await anonymous_user(), await anonymous_user()
    lst = await api_factory(owner.token).create_list("Movie Night")
    editor_api = api_factory(editor.token)
    await editor_api.join_list(lst.id, "Editor", "editor")

    item = await editor_api.add_item(lst.id, 1399, "tv")
    await editor_api.remove_item(item.id)

    with pytest.raises(PermissionDenied):
        await editor_api.delete_list(lst.id)
    with pytest.raises(PermissionDenied):
        await editor_api.remove_member(lst.id, owner.id)


@pytest.mark.anyio
async def test_owner_renames_and_removes_members(anonymous_user, api_factory, count_rows):
    owner, guest = await anonymous_user(), await anonymous_user()
    owner_api = api_factory(owner.token)
    lst = await owner_api.create_list("Old")
    await api_factory(guest.token).join_list(lst.id, "Guest", "editor")

    renamed = await owner_api.rename_list(lst.id, "New")
    assert renamed.name == "New"

    await owner_api.remove_member(lst.id, guest.id)
    assert await count_rows(ListMember, ListMember.list_id == lst.id) == 1

    with pytest.raises(PermissionDenied):
        await owner_api.remove_member(lst.id, owner.id)
    with pytest.raises(NotFoundError):
        await owner_api.remove_member(lst.id, guest.id)


@pytest.mark.anyio
async def test_delete_cascades(anonymous_user, api_factory, count_rows):
    owner, guest = await anonymous_user(), await anonymous_user()
    owner_api = api_factory(owner.token)
    lst = await owner_api.create_list("Doomed")
    await owner_api.add_item(lst.id, 603, "movie")
    await api_factory(guest.token).join_list(lst.id, "Guest", "viewer")

    await owner_api.delete_list(lst.id)

    assert await count_rows(List, List.id == lst.id) == 0
    assert await count_rows(ListItem, ListItem.list_id == lst.id) == 0
    assert await count_rows(ListMember, ListMember.list_id == lst.id) == 0
    with pytest.raises(NotFoundError):
        await owner_api.get_list_details(lst.id)
