"""Directory capabilities: opaque handles that can enumerate a folder.

A capability is session-scoped and never serialized. The local
implementation wraps a filesystem path; any enumeration error means the
grant is gone.
"""

from __future__ import annotations

import asyncio
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import AsyncIterator, Callable, Literal, Optional, Union

from sharebox.errors import PermissionDenied, UserCancelled

logger = logging.getLogger(__name__)


class FileEntry(ABC):
    kind: Literal["file"] = "file"

    @property
    @abstractmethod
    def name(self) -> str: ...

    @abstractmethod
    async def read_bytes(self) -> bytes: ...


class DirectoryCapability(ABC):
    kind: Literal["directory"] = "directory"

    @property
    @abstractmethod
    def name(self) -> str: ...

    @abstractmethod
    def enumerate(self) -> AsyncIterator[Entry]:
        """Yield child entries lazily, in whatever order the host provides."""

    async def is_accessible(self) -> bool:
        """Health check: try to read one entry. Any failure means revoked."""
        try:
            async for _ in self.enumerate():
                break
        except Exception as e:
            logger.info("Directory handle %r is no longer accessible: %s", self.name, e)
            return False
        return True


Entry = Union[FileEntry, DirectoryCapability]


class LocalFile(FileEntry):
    def __init__(self, path: Path):
        self._path = path

    @property
    def name(self) -> str:
        return self._path.name

    async def read_bytes(self) -> bytes:
        return await asyncio.to_thread(self._path.read_bytes)


class LocalDirectory(DirectoryCapability):
    """Capability over a directory on the local filesystem."""

    def __init__(self, path: str | Path):
        self._path = Path(path)

    @property
    def name(self) -> str:
        return self._path.name or str(self._path)

    @property
    def path(self) -> Path:
        return self._path

    async def enumerate(self) -> AsyncIterator[Entry]:
        for entry in await asyncio.to_thread(self._list):
            yield entry

    def _list(self) -> list[Entry]:
        entries: list[Entry] = []
        with os.scandir(self._path) as it:
            for dirent in it:
                child = Path(dirent.path)
                if dirent.is_dir(follow_symlinks=False):
                    entries.append(LocalDirectory(child))
                elif dirent.is_file(follow_symlinks=False):
                    entries.append(LocalFile(child))
        return entries

    def __repr__(self) -> str:
        return f"<LocalDirectory({self._path})>"


class DirectoryPicker(ABC):
    """Stand-in for the host's directory chooser."""

    @abstractmethod
    async def request_directory_access(self, folder_id: str | None = None) -> DirectoryCapability:
        """Return a capability, or raise ``UserCancelled`` / ``PermissionDenied``."""


class LocalDirectoryPicker(DirectoryPicker):
    """Picks local directories through a chooser callable.

    The chooser receives the directory last picked for the same folder id
    (or ``None``) and returns a path, or ``None`` when the user backs out.
    """

    def __init__(self, choose: Callable[[Optional[Path]], Optional[str | Path]]):
        self._choose = choose
        self._last_by_id: dict[str, Path] = {}

    async def request_directory_access(self, folder_id: str | None = None) -> LocalDirectory:
        suggested = self._last_by_id.get(folder_id) if folder_id else None
        chosen = self._choose(suggested)
        if chosen is None:
            raise UserCancelled("Directory selection cancelled")

        path = Path(chosen).expanduser().resolve()
        if not path.is_dir():
            raise PermissionDenied(f"{path} is not an accessible directory")
        if not os.access(path, os.R_OK | os.X_OK):
            raise PermissionDenied(f"Permission to read {path} was denied")

        if folder_id:
            self._last_by_id[folder_id] = path
        return LocalDirectory(path)
