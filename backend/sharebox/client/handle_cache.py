"""Session-local cache of live directory capabilities.

One instance per client session ("tab"). Nothing here is persisted; a new
session starts empty and must ask for access again.
"""

from __future__ import annotations

import logging

from sharebox.client.capability import DirectoryCapability

logger = logging.getLogger(__name__)


class HandleCache:
    def __init__(self) -> None:
        self._handles: dict[str, DirectoryCapability] = {}

    def put(self, folder_id: str, handle: DirectoryCapability) -> None:
        self._handles[folder_id] = handle
        logger.debug("Cached handle for folder %s", folder_id)

    def get(self, folder_id: str) -> DirectoryCapability | None:
        return self._handles.get(folder_id)

    def has(self, folder_id: str) -> bool:
        return folder_id in self._handles

    def evict(self, folder_id: str) -> None:
        if self._handles.pop(folder_id, None) is not None:
            logger.info("Evicted handle for folder %s", folder_id)

    def clear(self) -> None:
        self._handles.clear()

    def __len__(self) -> int:
        return len(self._handles)

    def __contains__(self, folder_id: object) -> bool:
        return folder_id in self._handles
