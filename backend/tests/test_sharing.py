"""Tests for the sharing/permission layer."""

import pytest

from sharebox.errors import AlreadyShared, InvalidRequest, InvalidTarget, NotFound, PermissionDenied
from sharebox.services import sharing
from sharebox.services.record_store import RecordStore


@pytest.fixture
def tree():
    return {"name": "docs", "path": "/", "kind": "directory", "children": []}


class TestShare:
    @pytest.mark.asyncio
    async def test_share_appends_grantee(self, store: RecordStore, owner):
        record = await sharing.create_file(store, owner, name="a.txt", size=3)
        record = await sharing.share(store, record.id, owner, "friend@example.com")
        assert record.shared_with == ["friend@example.com"]

    @pytest.mark.asyncio
    async def test_share_twice_keeps_single_entry(self, store: RecordStore, owner):
        record = await sharing.create_file(store, owner, name="a.txt")
        await sharing.share(store, record.id, owner, "friend@example.com")

        with pytest.raises(AlreadyShared):
            await sharing.share(store, record.id, owner, "friend@example.com")

        stored = await sharing.get_owned(store, record.id, owner)
        assert stored.shared_with.count("friend@example.com") == 1

    @pytest.mark.asyncio
    async def test_share_order_preserved(self, store: RecordStore, owner):
        record = await sharing.create_file(store, owner, name="a.txt")
        for email in ("b@example.com", "a@example.com", "c@example.com"):
            record = await sharing.share(store, record.id, owner, email)
        assert record.shared_with == ["b@example.com", "a@example.com", "c@example.com"]

    @pytest.mark.asyncio
    async def test_share_empty_email(self, store: RecordStore, owner):
        record = await sharing.create_file(store, owner, name="a.txt")
        with pytest.raises(InvalidRequest):
            await sharing.share(store, record.id, owner, "   ")

    @pytest.mark.asyncio
    async def test_share_requires_owner(self, store: RecordStore, owner, guest):
        record = await sharing.create_file(store, owner, name="a.txt")
        with pytest.raises(PermissionDenied):
            await sharing.share(store, record.id, guest, "x@example.com")

    @pytest.mark.asyncio
    async def test_share_missing_file(self, store: RecordStore, owner):
        with pytest.raises(NotFound):
            await sharing.share(store, "nope", owner, "x@example.com")

    @pytest.mark.asyncio
    async def test_shared_record_becomes_visible(self, store: RecordStore, owner, guest):
        record = await sharing.create_file(store, owner, name="a.txt")
        with pytest.raises(PermissionDenied):
            await sharing.get_visible(store, record.id, guest)

        await sharing.share(store, record.id, owner, guest.email)
        assert (await sharing.get_visible(store, record.id, guest)).id == record.id
        assert [r.id for r in await sharing.list_shared_with(store, guest)] == [record.id]


class TestToggleDownload:
    @pytest.mark.asyncio
    async def test_toggle_flips(self, store: RecordStore, owner):
        record = await sharing.create_file(store, owner, name="a.txt")
        assert record.allow_download is False
        record = await sharing.toggle_download(store, record.id, owner)
        assert record.allow_download is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize("initial", [True, False])
    async def test_toggle_twice_round_trips(self, store: RecordStore, owner, initial):
        record = await sharing.create_file(store, owner, name="a.txt", allow_download=initial)
        await sharing.toggle_download(store, record.id, owner)
        record = await sharing.toggle_download(store, record.id, owner)
        assert record.allow_download is initial

    @pytest.mark.asyncio
    async def test_toggle_on_folder_rejected(self, store: RecordStore, owner, tree):
        folder = await sharing.create_folder(store, owner, name="docs", structure=tree)
        with pytest.raises(InvalidTarget):
            await sharing.toggle_download(store, folder.id, owner)


class TestFolders:
    @pytest.mark.asyncio
    async def test_create_folder_starts_connected(self, store: RecordStore, owner, tree):
        folder = await sharing.create_folder(
            store, owner, name="docs", folder_id="folder_1000", structure=tree
        )
        assert folder.id == "folder_1000"
        assert folder.is_folder is True
        assert folder.is_connected is True
        assert folder.connected_by == owner.id
        assert folder.last_connected is not None

    @pytest.mark.asyncio
    async def test_duplicate_folder_id_rejected(self, store: RecordStore, owner, tree):
        await sharing.create_folder(store, owner, name="docs", folder_id="folder_1000")
        with pytest.raises(InvalidRequest):
            await sharing.create_folder(store, owner, name="docs", folder_id="folder_1000")

    @pytest.mark.asyncio
    async def test_update_structure_only_on_folders(self, store: RecordStore, owner, tree):
        record = await sharing.create_file(store, owner, name="a.txt")
        with pytest.raises(InvalidTarget):
            await sharing.update_structure(store, record.id, owner, tree)

    @pytest.mark.asyncio
    async def test_update_structure_replaces_snapshot(self, store: RecordStore, owner, tree):
        folder = await sharing.create_folder(store, owner, name="docs", structure=tree)
        new_tree = dict(tree, children=[{"name": "x.txt", "path": "x.txt", "kind": "file"}])
        folder = await sharing.update_structure(store, folder.id, owner, new_tree)
        assert folder.structure["children"][0]["name"] == "x.txt"
