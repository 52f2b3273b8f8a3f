"""One client session: the Python stand-in for a browser tab.

A session owns its handle cache (lost when the session ends), shares a
ledger with other sessions of the same profile, and drives the share,
reconnect, open and watch flows against the server. The owner can also browse
and read the live folder through the cached handle.
"""

from __future__ import annotations

import logging
import mimetypes
import time
from dataclasses import dataclass
from typing import Callable, NoReturn, Optional

from sharebox.client.api import ShareboxClient
from sharebox.client.capability import DirectoryCapability, DirectoryPicker, Entry
from sharebox.client.handle_cache import HandleCache
from sharebox.client.ledger import FolderLedger
from sharebox.client.liveness import (
    ConnectionStatus,
    FolderView,
    check_connection,
    resolve_folder_view,
)
from sharebox.client.poller import ConnectionKeepalive, ConnectionPoller, StatusCallback, start_polling
from sharebox.client.scanner import scan_directory
from sharebox.errors import (
    InvalidRequest,
    InvalidTarget,
    NotFound,
    PermissionDenied,
    ShareboxError,
    UserCancelled,
)
from sharebox.schemas.files import FileOut, FolderOut

logger = logging.getLogger(__name__)


@dataclass
class OpenedRecord:
    record: FileOut | FolderOut
    view: FolderView | None = None  # folders only


@dataclass
class FolderItem:
    """One entry of a live folder listing."""
    name: str
    path: str
    kind: str  # "file" or "directory"
    mime_type: str | None = None  # files only


@dataclass
class FileContents:
    name: str
    path: str
    mime_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


def guess_mime_type(name: str) -> str:
    mime_type, _ = mimetypes.guess_type(name)
    return mime_type or "application/octet-stream"


def _join(parent: str, name: str) -> str:
    parent = parent.strip("/")
    return f"{parent}/{name}" if parent else name


def new_folder_id() -> str:
    return f"folder_{int(time.time() * 1000)}"


class FolderSession:
    def __init__(
        self,
        client: ShareboxClient,
        picker: DirectoryPicker,
        ledger: FolderLedger | None = None,
        cache: HandleCache | None = None,
    ):
        self.client = client
        self.picker = picker
        self.ledger = ledger or FolderLedger()
        self.cache = cache or HandleCache()
        self._pollers: list[ConnectionPoller] = []
        self._keepalives: dict[str, ConnectionKeepalive] = {}

    @property
    def user_id(self) -> str:
        if self.client.user is None:
            raise PermissionDenied("Not logged in")
        return self.client.user.id

    async def share_folder(self, keep_alive: bool = True) -> FolderOut | None:
        """Pick a local folder and publish its snapshot. ``None`` if cancelled."""
        folder_id = new_folder_id()
        handle = await self._pick(folder_id)
        if handle is None:
            return None

        self.ledger.register(folder_id, handle.name, self.user_id)
        self.cache.put(folder_id, handle)

        structure = await scan_directory(handle)
        record = await self.client.create_folder(handle.name, structure, folder_id=folder_id)
        logger.info("Folder %r shared as %s", handle.name, record.id)
        if keep_alive:
            self.keepalive(record)
        return record

    async def reconnect(self, record: FolderOut, keep_alive: bool = True) -> FolderOut | None:
        """Grant access again to the same folder, rescan and assert connection.

        Returns ``None`` when the user dismisses the picker.
        """
        if not isinstance(record, FolderOut):
            raise InvalidTarget(f"{record.id} is not a folder")
        if record.owner_id != self.user_id:
            raise PermissionDenied("Only the owner can reconnect a folder")

        handle = await self._pick(record.id)
        if handle is None:
            return None

        self.cache.put(record.id, handle)
        structure = await scan_directory(handle)
        await self.client.update_structure(record.id, structure)
        updated = await self.client.mark_connected(record.id, self.user_id)
        self.ledger.register(record.id, handle.name, self.user_id)
        logger.info("Folder %s reconnected", record.id)
        if keep_alive:
            self.keepalive(updated)
        return updated

    async def open(self, file_id: str) -> OpenedRecord:
        """Load a record and, for folders, decide status and next steps."""
        if not file_id:
            raise InvalidRequest("File id is required")
        record = await self.client.get_file(file_id)
        if not isinstance(record, FolderOut):
            return OpenedRecord(record=record)

        if record.owner_id != self.user_id:
            # Guests remember folders they have opened so they keep watching them
            self.ledger.register(record.id, record.name, record.owner_id)
        view = await resolve_folder_view(record, self.user_id, self.cache, self.ledger)
        return OpenedRecord(record=record, view=view)

    async def status(self, record: FileOut | FolderOut) -> ConnectionStatus:
        return await check_connection(record, record.owner_id == self.user_id, self.cache)

    def watch(
        self,
        record: FileOut | FolderOut,
        on_change: Optional[StatusCallback] = None,
        interval: float | None = None,
    ) -> ConnectionPoller | None:
        """Start a guest poller; ``None`` for the owner's own folders."""
        poller = start_polling(
            record,
            self.user_id,
            self.client.get_file,
            self.cache,
            interval=interval,
            on_change=on_change,
        )
        if poller is not None:
            self._pollers.append(poller)
        return poller

    def keepalive(
        self,
        record: FolderOut,
        interval: float | None = None,
        on_lost: Optional[Callable[[str], None]] = None,
    ) -> ConnectionKeepalive:
        """Keep advertising the owner's live handle to guests."""
        if record.owner_id != self.user_id:
            raise PermissionDenied("Only the owner can keep a folder connected")
        existing = self._keepalives.get(record.id)
        if existing is not None and existing.running:
            return existing

        keepalive = ConnectionKeepalive(
            record.id,
            self.user_id,
            self.cache,
            self.client.mark_connected,
            interval=interval,
            on_lost=on_lost,
        )
        keepalive.start()
        self._keepalives[record.id] = keepalive
        return keepalive

    async def list_contents(self, record: FolderOut, path: str = "/") -> list[FolderItem]:
        """List the live folder at ``path`` through this session's handle.

        Owner only. A handle that fails while listing is evicted and the
        call raises ``PermissionDenied``; the caller should reconnect.
        """
        handle = self._live_handle(record)
        try:
            directory = await self._walk(handle, path)
            if directory.kind != "directory":
                raise InvalidTarget(f"{path} is not a directory")
            items = []
            async for entry in directory.enumerate():
                items.append(
                    FolderItem(
                        name=entry.name,
                        path=_join(path, entry.name),
                        kind=entry.kind,
                        mime_type=guess_mime_type(entry.name) if entry.kind == "file" else None,
                    )
                )
        except ShareboxError:
            raise
        except Exception as e:
            self._lose_handle(record.id, e)
        return items

    async def read_file(self, record: FolderOut, path: str) -> FileContents:
        """Read one file of the live folder. Owner only, same failure rules as listing."""
        handle = self._live_handle(record)
        try:
            entry = await self._walk(handle, path)
            if entry.kind != "file":
                raise InvalidTarget(f"{path} is not a file")
            data = await entry.read_bytes()
        except ShareboxError:
            raise
        except Exception as e:
            self._lose_handle(record.id, e)
        return FileContents(
            name=entry.name,
            path=path.strip("/"),
            mime_type=guess_mime_type(entry.name),
            data=data,
        )

    async def close(self) -> None:
        """End the session: stop every loop and drop all handles."""
        for poller in self._pollers:
            await poller.stop()
        for keepalive in self._keepalives.values():
            await keepalive.stop()
        self._pollers.clear()
        self._keepalives.clear()
        self.cache.clear()

    async def _pick(self, folder_id: str) -> DirectoryCapability | None:
        try:
            return await self.picker.request_directory_access(folder_id)
        except UserCancelled:
            logger.debug("Directory picker dismissed for %s", folder_id)
            return None

    def _live_handle(self, record: FolderOut) -> DirectoryCapability:
        if not isinstance(record, FolderOut):
            raise InvalidTarget(f"{record.id} is not a folder")
        if record.owner_id != self.user_id:
            raise PermissionDenied("Only the owner can browse a live folder")
        handle = self.cache.get(record.id)
        if handle is None:
            raise PermissionDenied(f"No access to folder {record.id} in this session")
        return handle

    def _lose_handle(self, folder_id: str, error: Exception) -> NoReturn:
        self.cache.evict(folder_id)
        raise PermissionDenied(f"Folder {folder_id} is no longer accessible: {error}") from error

    @staticmethod
    async def _walk(handle: DirectoryCapability, path: str) -> Entry:
        current: Entry = handle
        for part in [p for p in path.split("/") if p]:
            if current.kind != "directory":
                raise NotFound(f"{path} not found")
            found = None
            async for entry in current.enumerate():
                if entry.name == part:
                    found = entry
                    break
            if found is None:
                raise NotFound(f"{path} not found")
            current = found
        return current
