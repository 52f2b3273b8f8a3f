"""File record routes: listing, sharing, download permission, connection."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from sharebox.api.deps import get_current_user, get_store, raise_http
from sharebox.errors import PermissionDenied, ShareboxError
from sharebox.models.user import User
from sharebox.schemas.files import (
    ConnectRequest,
    FileCreate,
    FileRecordOut,
    RenameRequest,
    ShareRequest,
    ToggleDownloadResponse,
    to_schema,
)
from sharebox.services import sharing
from sharebox.services.connection_service import assert_connected
from sharebox.services.record_store import RecordStore

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=list[FileRecordOut])
async def list_files(
    store: RecordStore = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    """Files and folders owned by the current user."""
    return [to_schema(r) for r in await sharing.list_owned(store, current_user)]


@router.get("/shared", response_model=list[FileRecordOut])
async def list_shared(
    store: RecordStore = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    """Files and folders other users have shared with the current user."""
    return [to_schema(r) for r in await sharing.list_shared_with(store, current_user)]


@router.post("", response_model=FileRecordOut, status_code=201)
async def create_file(
    body: FileCreate,
    store: RecordStore = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    """Register file metadata. The bytes live wherever ``url`` points."""
    try:
        record = await sharing.create_file(store, current_user, **body.model_dump())
    except ShareboxError as exc:
        raise_http(exc)
    return to_schema(record)


@router.get("/{file_id}", response_model=FileRecordOut)
async def get_file(
    file_id: str,
    store: RecordStore = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    try:
        record = await sharing.get_visible(store, file_id, current_user)
    except ShareboxError as exc:
        raise_http(exc)
    return to_schema(record)


@router.put("/{file_id}", response_model=FileRecordOut)
async def rename_file(
    file_id: str,
    body: RenameRequest,
    store: RecordStore = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    try:
        record = await sharing.rename(store, file_id, current_user, body.name)
    except ShareboxError as exc:
        raise_http(exc)
    return to_schema(record)


@router.delete("/{file_id}")
async def delete_file(
    file_id: str,
    store: RecordStore = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    try:
        await sharing.delete(store, file_id, current_user)
    except ShareboxError as exc:
        raise_http(exc)
    return {"success": True}


@router.post("/{file_id}/connect", response_model=FileRecordOut)
async def connect_folder(
    file_id: str,
    body: ConnectRequest,
    store: RecordStore = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    """Owner's session reports that it holds a live handle for this folder."""
    try:
        await sharing.get_owned(store, file_id, current_user)
        if body.user_id and body.user_id != current_user.id:
            raise PermissionDenied("Connection can only be asserted for yourself")
        record = await assert_connected(store, file_id, body.user_id)
    except ShareboxError as exc:
        raise_http(exc)
    return to_schema(record)


@router.post("/{file_id}/share", response_model=FileRecordOut)
async def share_file(
    file_id: str,
    body: ShareRequest,
    store: RecordStore = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    """Grant access by email. Responds 409 if the grantee already has access."""
    try:
        record = await sharing.share(store, file_id, current_user, body.email)
    except ShareboxError as exc:
        raise_http(exc)
    return to_schema(record)


@router.post("/{file_id}/toggle-download", response_model=ToggleDownloadResponse)
async def toggle_download(
    file_id: str,
    store: RecordStore = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    try:
        record = await sharing.toggle_download(store, file_id, current_user)
    except ShareboxError as exc:
        raise_http(exc)
    return ToggleDownloadResponse(id=record.id, allow_download=record.allow_download)
