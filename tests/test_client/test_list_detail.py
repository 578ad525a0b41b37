import asyncio

import pytest

from cinelist.client.list_detail import ListDetailView
from cinelist.core.exceptions import PermissionDenied
from cinelist.schemas.enums import ListRole


@pytest.fixture
async def owner_api(anonymous_user, api_factory):
    owner = await anonymous_user()
    return api_factory(owner.token)


@pytest.mark.anyio
async def test_load_resolves_items_and_tolerates_failures(owner_api, fake_content):
    lst = await owner_api.create_list("Weekend Picks")
    await owner_api.add_item(lst.id, 603, "movie")
    await owner_api.add_item(lst.id, 13, "movie")
    fake_content.missing.add(13)

    view = ListDetailView(owner_api, fake_content, lst.id)
    snapshot = await view.load()

    assert snapshot.role is ListRole.OWNER
    assert view.can_edit and view.can_manage
    assert [(r.item.content_id, r.content is not None) for r in snapshot.items] == [(603, True), (13, False)]
    assert snapshot.items[0].content.display_title == "Title 603"


@pytest.mark.anyio
async def test_stale_batch_is_dropped(owner_api, fake_content):
    lst = await owner_api.create_list("Weekend Picks")
    await owner_api.add_item(lst.id, 603, "movie")

    gate = asyncio.Event()
    original = fake_content.get_details

    async def _slow(content_id, media_type):
        await gate.wait()
        return await original(content_id, media_type)

    fake_content.get_details = _slow
    view = ListDetailView(owner_api, fake_content, lst.id)

    pending = asyncio.ensure_future(view.load())
    await asyncio.sleep(0.05)
    view.close()
    gate.set()

    assert await pending is None
    assert view.snapshot is None


@pytest.mark.anyio
async def test_mutations_reload(owner_api, fake_content):
    lst = await owner_api.create_list("Old")
    view = ListDetailView(owner_api, fake_content, lst.id)
    await view.load()

    snapshot = await view.add_item(603, "movie")
    assert [r.item.content_id for r in snapshot.items] == [603]

    snapshot = await view.rename("New")
    assert snapshot.details.list.name == "New"

    snapshot = await view.remove_item(snapshot.items[0].item.id)
    assert snapshot.items == []

    assert view.share_url("editor", base_url="https://cinelist.app").endswith(f"/lists/{lst.id}/join?role=editor")

    await view.delete()
    assert view.snapshot is None


@pytest.mark.anyio
async def test_viewer_is_blocked_client_side(owner_api, anonymous_user, api_factory, fake_content):
    lst = await owner_api.create_list("Movie Night")
    viewer = await anonymous_user()
    viewer_api = api_factory(viewer.token)
    await viewer_api.join_list(lst.id, "Viewer", "viewer")

    view = ListDetailView(viewer_api, fake_content, lst.id)
    await view.load()
    assert view.role is ListRole.VIEWER
    assert not view.can_edit

    with pytest.raises(PermissionDenied):
        await view.add_item(603, "movie")
    with pytest.raises(PermissionDenied):
        await view.delete()
