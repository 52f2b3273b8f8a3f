"""File records and the sharing/permission layer."""

from __future__ import annotations

import logging
import uuid
from typing import Any, Sequence

from sharebox.errors import AlreadyShared, InvalidRequest, InvalidTarget, PermissionDenied
from sharebox.models.file_record import FileRecord
from sharebox.models.user import User
from sharebox.services.record_store import RecordStore
from sharebox.utils.clock import to_naive_utc, utcnow

logger = logging.getLogger(__name__)


def can_view(record: FileRecord, user: User) -> bool:
    return record.owner_id == user.id or user.email in (record.shared_with or [])


async def get_visible(store: RecordStore, file_id: str, user: User) -> FileRecord:
    """Fetch a record the user owns or has been granted."""
    record = await store.get_by_id(FileRecord, file_id)
    if not can_view(record, user):
        raise PermissionDenied("You don't have permission to view this file")
    return record


async def get_owned(store: RecordStore, file_id: str, user: User) -> FileRecord:
    record = await store.get_by_id(FileRecord, file_id)
    if record.owner_id != user.id:
        raise PermissionDenied("Only the owner can change this file")
    return record


async def list_owned(store: RecordStore, user: User) -> Sequence[FileRecord]:
    return await store.find(FileRecord, FileRecord.owner_id == user.id)


async def list_shared_with(store: RecordStore, user: User) -> list[FileRecord]:
    # shared_with is a JSON list; filter in Python rather than per-dialect JSON ops
    records = await store.get_all(FileRecord)
    return [r for r in records if user.email in (r.shared_with or [])]


async def create_file(store: RecordStore, owner: User, **fields: Any) -> FileRecord:
    if not fields.get("name"):
        raise InvalidRequest("File name is required")
    record = FileRecord(
        id=str(uuid.uuid4()),
        owner_id=owner.id,
        owner_email=owner.email,
        shared_with=[],
        is_folder=False,
        created_at=to_naive_utc(utcnow()),
        **fields,
    )
    await store.append(record)
    logger.info("Registered file %s (%s)", record.id, record.name)
    return record


async def create_folder(
    store: RecordStore,
    owner: User,
    name: str,
    folder_id: str | None = None,
    path: str = "/",
    structure: dict | None = None,
) -> FileRecord:
    """Register a shared folder. The owner's tab holds the handle, so it starts connected."""
    if not name:
        raise InvalidRequest("Folder name is required")
    folder_id = folder_id or f"folder_{int(utcnow().timestamp() * 1000)}"
    existing = await store.find_one(FileRecord, FileRecord.id == folder_id)
    if existing is not None:
        raise InvalidRequest(f"Record {folder_id} already exists")

    now = to_naive_utc(utcnow())
    record = FileRecord(
        id=folder_id,
        owner_id=owner.id,
        owner_email=owner.email,
        name=name,
        size=0,
        mime_type="folder",
        path=path,
        shared_with=[],
        allow_download=False,
        is_folder=True,
        structure=structure,
        is_connected=True,
        connected_by=owner.id,
        last_connected=now,
        created_at=now,
    )
    await store.append(record)
    logger.info("Registered folder %s (%s)", record.id, record.name)
    return record


async def update_structure(
    store: RecordStore, folder_id: str, owner: User, structure: dict
) -> FileRecord:
    record = await get_owned(store, folder_id, owner)
    if not record.is_folder:
        raise InvalidTarget("Only folders carry a structure snapshot")
    record.structure = structure
    return await store.replace(record)


async def rename(store: RecordStore, file_id: str, owner: User, name: str) -> FileRecord:
    if not name:
        raise InvalidRequest("Name is required")
    record = await get_owned(store, file_id, owner)
    record.name = name
    return await store.replace(record)


async def delete(store: RecordStore, file_id: str, owner: User) -> None:
    await get_owned(store, file_id, owner)
    await store.delete(FileRecord, file_id)


async def share(store: RecordStore, file_id: str, owner: User, grantee_email: str) -> FileRecord:
    """Grant a user access by email. Permissions are additive; there is no unshare."""
    email = (grantee_email or "").strip()
    if not email:
        raise InvalidRequest("Grantee email is required")
    record = await get_owned(store, file_id, owner)

    current = list(record.shared_with or [])
    if email in current:
        raise AlreadyShared(f"Already shared with {email}")

    # Assign a new list so the JSON column is flagged dirty
    record.shared_with = current + [email]
    record = await store.replace(record)
    logger.info("Shared %s with %s", file_id, email)
    return record


async def toggle_download(store: RecordStore, file_id: str, owner: User) -> FileRecord:
    record = await get_owned(store, file_id, owner)
    if record.is_folder:
        raise InvalidTarget("Download permission applies to files only")
    record.allow_download = not record.allow_download
    return await store.replace(record)

