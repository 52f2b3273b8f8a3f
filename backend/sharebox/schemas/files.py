"""File and folder record schemas.

Files and folders share one table but travel as a tagged union: the
folder-only connection fields exist only on ``FolderOut``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter, field_validator

from sharebox.models.file_record import FileRecord
from sharebox.schemas.tree import DirectoryTreeNode
from sharebox.utils.clock import as_utc


class _RecordBase(BaseModel):
    id: str
    owner_id: str
    owner_email: str
    name: str
    size: int = 0
    shared_with: list[str] = []
    created_at: datetime | None = None

    @field_validator("created_at")
    @classmethod
    def _utc_created(cls, value: datetime | None) -> datetime | None:
        return as_utc(value) if value is not None else None


class FileOut(_RecordBase):
    """An uploaded file."""
    kind: Literal["file"] = "file"
    mime_type: str | None = None
    url: str | None = None
    allow_download: bool = False


class FolderOut(_RecordBase):
    """A shared local folder: metadata and last snapshot only."""
    kind: Literal["folder"] = "folder"
    path: str = "/"
    structure: DirectoryTreeNode | None = None
    is_connected: bool = False
    connected_by: str | None = None
    last_connected: datetime | None = None

    @field_validator("last_connected")
    @classmethod
    def _utc_last_connected(cls, value: datetime | None) -> datetime | None:
        return as_utc(value) if value is not None else None


FileRecordOut = Annotated[Union[FileOut, FolderOut], Field(discriminator="kind")]

record_adapter: TypeAdapter[FileOut | FolderOut] = TypeAdapter(FileRecordOut)
record_list_adapter: TypeAdapter[list[FileOut | FolderOut]] = TypeAdapter(list[FileRecordOut])


def to_schema(record: FileRecord) -> FileOut | FolderOut:
    """Convert an ORM row into its tagged API variant."""
    common = {
        "id": record.id,
        "owner_id": record.owner_id,
        "owner_email": record.owner_email,
        "name": record.name,
        "size": record.size or 0,
        "shared_with": list(record.shared_with or []),
        "created_at": record.created_at,
    }
    if record.is_folder:
        return FolderOut(
            **common,
            path=record.path or "/",
            structure=record.structure,
            is_connected=bool(record.is_connected),
            connected_by=record.connected_by,
            last_connected=record.last_connected,
        )
    return FileOut(
        **common,
        mime_type=record.mime_type,
        url=record.url,
        allow_download=bool(record.allow_download),
    )


class FileCreate(BaseModel):
    """Register an already-stored file by its metadata."""
    name: str
    size: int = 0
    mime_type: str | None = None
    url: str | None = None
    allow_download: bool = False


class FolderCreate(BaseModel):
    """Register a shared folder with its first snapshot."""
    id: str | None = None
    name: str
    path: str = "/"
    structure: DirectoryTreeNode | None = None


class StructureUpdate(BaseModel):
    structure: DirectoryTreeNode


class RenameRequest(BaseModel):
    name: str


class ConnectRequest(BaseModel):
    user_id: str | None = None


class ShareRequest(BaseModel):
    email: str = ""


class ToggleDownloadResponse(BaseModel):
    id: str
    allow_download: bool
