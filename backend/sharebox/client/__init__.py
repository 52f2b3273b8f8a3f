"""Client session: handle cache, folder ledger, scanner and liveness protocol."""

from sharebox.client.api import ShareboxClient
from sharebox.client.capability import (
    DirectoryCapability,
    DirectoryPicker,
    FileEntry,
    LocalDirectory,
    LocalDirectoryPicker,
)
from sharebox.client.handle_cache import HandleCache
from sharebox.client.ledger import FolderLedger, FolderReference
from sharebox.client.liveness import (
    FRESHNESS_WINDOW,
    ConnectionStatus,
    FolderView,
    check_connection,
    is_remote_live,
    resolve_folder_view,
)
from sharebox.client.poller import ConnectionKeepalive, ConnectionPoller, start_polling
from sharebox.client.scanner import scan_directory
from sharebox.client.session import FileContents, FolderItem, FolderSession

__all__ = [
    "FRESHNESS_WINDOW",
    "ConnectionKeepalive",
    "ConnectionPoller",
    "ConnectionStatus",
    "DirectoryCapability",
    "DirectoryPicker",
    "FileEntry",
    "FolderLedger",
    "FolderReference",
    "FileContents",
    "FolderItem",
    "FolderSession",
    "FolderView",
    "HandleCache",
    "LocalDirectory",
    "LocalDirectoryPicker",
    "ShareboxClient",
    "check_connection",
    "is_remote_live",
    "resolve_folder_view",
    "scan_directory",
    "start_polling",
]
