"""Folder routes: register a shared local folder and refresh its snapshot."""

from fastapi import APIRouter, Depends

from sharebox.api.deps import get_current_user, get_store, raise_http
from sharebox.errors import ShareboxError
from sharebox.models.user import User
from sharebox.schemas.files import FolderCreate, FolderOut, StructureUpdate, to_schema
from sharebox.services import sharing
from sharebox.services.record_store import RecordStore

router = APIRouter()


@router.post("", response_model=FolderOut, status_code=201)
async def create_folder(
    body: FolderCreate,
    store: RecordStore = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    """Register folder metadata; no contents are uploaded."""
    structure = body.structure.model_dump(mode="json") if body.structure else None
    try:
        record = await sharing.create_folder(
            store,
            current_user,
            name=body.name,
            folder_id=body.id,
            path=body.path,
            structure=structure,
        )
    except ShareboxError as exc:
        raise_http(exc)
    return to_schema(record)


@router.put("/{folder_id}/structure", response_model=FolderOut)
async def update_structure(
    folder_id: str,
    body: StructureUpdate,
    store: RecordStore = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    """Replace the snapshot after the owner reconnects and rescans."""
    try:
        record = await sharing.update_structure(
            store, folder_id, current_user, body.structure.model_dump(mode="json")
        )
    except ShareboxError as exc:
        raise_http(exc)
    return to_schema(record)
