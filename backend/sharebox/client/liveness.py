"""Connection Liveness Protocol.

A folder is live while its owner's session holds a working handle. Other
sessions only see the replicated ``connected_by`` / ``last_connected``
fields, and trust them for a fixed freshness window. The ``is_connected``
flag is advisory and never consulted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from sharebox.client.handle_cache import HandleCache
from sharebox.client.ledger import FolderLedger
from sharebox.config import settings
from sharebox.schemas.files import FileOut, FolderOut
from sharebox.utils.clock import as_utc, utcnow

logger = logging.getLogger(__name__)

FRESHNESS_WINDOW = timedelta(seconds=settings.freshness_window_seconds)


class ConnectionStatus(str, Enum):
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    UNKNOWN = "unknown"  # folder was never scanned


def is_remote_live(
    record: FolderOut,
    now: datetime | None = None,
    window: timedelta = FRESHNESS_WINDOW,
) -> bool:
    """True iff the owner asserted the connection within ``window``."""
    if record.connected_by is None or record.connected_by != record.owner_id:
        return False
    if record.last_connected is None:
        return False
    age = as_utc(now or utcnow()) - as_utc(record.last_connected)
    return age <= window


async def check_connection(
    record: FileOut | FolderOut,
    viewer_is_owner: bool,
    cache: HandleCache,
    now: datetime | None = None,
    window: timedelta = FRESHNESS_WINDOW,
) -> ConnectionStatus:
    """Decide whether the folder's owner can currently serve it.

    Reads only the session's cache and the record; never writes to the
    server. A cached handle that fails its health check is evicted so it is
    never served stale.
    """
    if not isinstance(record, FolderOut) or record.structure is None:
        return ConnectionStatus.UNKNOWN

    if viewer_is_owner:
        handle = cache.get(record.id)
        if handle is not None:
            if await handle.is_accessible():
                return ConnectionStatus.CONNECTED
            cache.evict(record.id)
            return ConnectionStatus.DISCONNECTED

    if is_remote_live(record, now=now, window=window):
        return ConnectionStatus.CONNECTED
    return ConnectionStatus.DISCONNECTED


@dataclass
class FolderView:
    """What a session should show and do for one folder."""
    status: ConnectionStatus
    is_owner: bool
    needs_access: bool = False  # owner has no live handle in this session
    needs_reconnect: bool = False  # ... and granted access before (ledger)
    should_poll: bool = False


async def resolve_folder_view(
    record: FolderOut,
    viewer_id: str,
    cache: HandleCache,
    ledger: FolderLedger,
    now: datetime | None = None,
) -> FolderView:
    """Combine cache, ledger and record into the view decision.

    Owners without a live handle must grant access; the ledger decides
    whether that is a reconnect or a first-time share. Guests poll only for
    folders their ledger knows about.
    """
    is_owner = record.owner_id == viewer_id
    status = await check_connection(record, is_owner, cache, now=now)

    if is_owner:
        needs_access = not cache.has(record.id)
        return FolderView(
            status=status,
            is_owner=True,
            needs_access=needs_access,
            needs_reconnect=needs_access and ledger.has(record.id),
        )

    return FolderView(status=status, is_owner=False, should_poll=ledger.has(record.id))
