"""Tests for file and folder routes over HTTP."""

import pytest
from httpx import AsyncClient

from sharebox.schemas.files import FolderOut

from conftest import auth_headers

TREE = {
    "name": "docs",
    "path": "/",
    "kind": "directory",
    "children": [{"name": "a.txt", "path": "a.txt", "kind": "file"}],
}


async def _create_folder(client: AsyncClient, user, folder_id: str = "folder_1000") -> dict:
    resp = await client.post(
        "/api/folders",
        json={"id": folder_id, "name": "docs", "structure": TREE},
        headers=auth_headers(user),
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


async def _create_file(client: AsyncClient, user) -> dict:
    resp = await client.post(
        "/api/files",
        json={"name": "a.txt", "size": 3, "mime_type": "text/plain", "url": "/uploads/a.txt"},
        headers=auth_headers(user),
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.mark.asyncio
async def test_create_folder_returns_folder_variant(client: AsyncClient, owner):
    data = await _create_folder(client, owner)
    assert data["kind"] == "folder"
    assert data["id"] == "folder_1000"
    assert data["is_connected"] is True
    assert data["connected_by"] == owner.id
    assert data["structure"]["children"][0]["name"] == "a.txt"
    assert "allow_download" not in data


@pytest.mark.asyncio
async def test_create_file_returns_file_variant(client: AsyncClient, owner):
    data = await _create_file(client, owner)
    assert data["kind"] == "file"
    assert data["allow_download"] is False
    assert "last_connected" not in data
    assert "structure" not in data


@pytest.mark.asyncio
async def test_requires_auth(client: AsyncClient):
    resp = await client.get("/api/files")
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_get_file_forbidden_for_stranger(client: AsyncClient, owner, guest):
    folder = await _create_folder(client, owner)
    resp = await client.get(f"/api/files/{folder['id']}", headers=auth_headers(guest))
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_get_missing_file(client: AsyncClient, owner):
    resp = await client.get("/api/files/nope", headers=auth_headers(owner))
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_share_then_guest_sees_record(client: AsyncClient, owner, guest):
    folder = await _create_folder(client, owner)

    resp = await client.post(
        f"/api/files/{folder['id']}/share",
        json={"email": guest.email},
        headers=auth_headers(owner),
    )
    assert resp.status_code == 200
    assert resp.json()["shared_with"] == [guest.email]

    shared = await client.get("/api/files/shared", headers=auth_headers(guest))
    assert [r["id"] for r in shared.json()] == [folder["id"]]

    view = await client.get(f"/api/files/{folder['id']}", headers=auth_headers(guest))
    assert view.status_code == 200


@pytest.mark.asyncio
async def test_share_twice_conflicts(client: AsyncClient, owner, guest):
    record = await _create_file(client, owner)
    url = f"/api/files/{record['id']}/share"
    await client.post(url, json={"email": guest.email}, headers=auth_headers(owner))
    resp = await client.post(url, json={"email": guest.email}, headers=auth_headers(owner))
    assert resp.status_code == 409
    assert resp.headers["X-Sharebox-Error"] == "AlreadyShared"


@pytest.mark.asyncio
async def test_toggle_download_round_trip(client: AsyncClient, owner):
    record = await _create_file(client, owner)
    url = f"/api/files/{record['id']}/toggle-download"
    first = await client.post(url, headers=auth_headers(owner))
    second = await client.post(url, headers=auth_headers(owner))
    assert first.json()["allow_download"] is True
    assert second.json()["allow_download"] is False


@pytest.mark.asyncio
async def test_toggle_download_on_folder(client: AsyncClient, owner):
    folder = await _create_folder(client, owner)
    resp = await client.post(f"/api/files/{folder['id']}/toggle-download", headers=auth_headers(owner))
    assert resp.status_code == 400
    assert resp.headers["X-Sharebox-Error"] == "InvalidTarget"


@pytest.mark.asyncio
async def test_connect_refreshes_timestamp(client: AsyncClient, owner):
    folder = await _create_folder(client, owner)
    resp = await client.post(
        f"/api/files/{folder['id']}/connect",
        json={"user_id": owner.id},
        headers=auth_headers(owner),
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["connected_by"] == owner.id
    assert FolderOut(**data).last_connected > FolderOut(**folder).last_connected


@pytest.mark.asyncio
async def test_connect_missing_user_id(client: AsyncClient, owner):
    folder = await _create_folder(client, owner)
    resp = await client.post(
        f"/api/files/{folder['id']}/connect", json={}, headers=auth_headers(owner)
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_connect_unknown_folder(client: AsyncClient, owner):
    resp = await client.post(
        "/api/files/folder_404/connect", json={"user_id": owner.id}, headers=auth_headers(owner)
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_update_structure_owner_only(client: AsyncClient, owner, guest):
    folder = await _create_folder(client, owner)
    new_tree = dict(TREE, children=[])
    url = f"/api/folders/{folder['id']}/structure"

    denied = await client.put(url, json={"structure": new_tree}, headers=auth_headers(guest))
    assert denied.status_code == 403

    ok = await client.put(url, json={"structure": new_tree}, headers=auth_headers(owner))
    assert ok.status_code == 200
    assert ok.json()["structure"]["children"] == []


@pytest.mark.asyncio
async def test_rename_and_delete(client: AsyncClient, owner):
    record = await _create_file(client, owner)
    renamed = await client.put(
        f"/api/files/{record['id']}", json={"name": "b.txt"}, headers=auth_headers(owner)
    )
    assert renamed.json()["name"] == "b.txt"

    deleted = await client.delete(f"/api/files/{record['id']}", headers=auth_headers(owner))
    assert deleted.json() == {"success": True}

    listing = await client.get("/api/files", headers=auth_headers(owner))
    assert listing.json() == []


@pytest.mark.asyncio
async def test_grantee_cannot_assert_for_owner(client: AsyncClient, owner, guest):
    folder = await _create_folder(client, owner)
    resp = await client.post(
        f"/api/files/{folder['id']}/share", json={"email": guest.email}, headers=auth_headers(owner)
    )
    assert resp.status_code == 200

    resp = await client.post(
        f"/api/files/{folder['id']}/connect",
        json={"user_id": owner.id},
        headers=auth_headers(guest),
    )
    assert resp.status_code == 403

    resp = await client.get(f"/api/files/{folder['id']}", headers=auth_headers(guest))
    assert resp.json()["last_connected"] == folder["last_connected"]


@pytest.mark.asyncio
async def test_owner_cannot_assert_for_someone_else(client: AsyncClient, owner, guest):
    folder = await _create_folder(client, owner)
    resp = await client.post(
        f"/api/files/{folder['id']}/connect",
        json={"user_id": guest.id},
        headers=auth_headers(owner),
    )
    assert resp.status_code == 403
    assert resp.headers["X-Sharebox-Error"] == "PermissionDenied"
