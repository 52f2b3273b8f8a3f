"""Server side of folder liveness: record that an owner's session holds a live handle."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from sharebox.errors import InvalidRequest, InvalidTarget
from sharebox.models.file_record import FileRecord
from sharebox.services.record_store import RecordStore
from sharebox.utils.clock import as_utc, to_naive_utc, utcnow

logger = logging.getLogger(__name__)

_TICK = timedelta(microseconds=1)


async def assert_connected(
    store: RecordStore,
    folder_id: str | None,
    user_id: str | None,
    now: datetime | None = None,
) -> FileRecord:
    """Mark a folder connected by ``user_id`` as of now.

    Idempotent apart from the timestamp, which always moves strictly forward
    for a given record. Concurrent sessions simply overwrite each other.
    """
    if not folder_id or not user_id:
        raise InvalidRequest("Missing folder ID or user ID")

    record = await store.get_by_id(FileRecord, folder_id)
    if not record.is_folder:
        raise InvalidTarget(f"{folder_id} is not a folder")

    stamp = as_utc(now or utcnow())
    if record.last_connected is not None:
        previous = as_utc(record.last_connected)
        if stamp <= previous:
            stamp = previous + _TICK

    record.is_connected = True
    record.connected_by = user_id
    record.last_connected = to_naive_utc(stamp)
    record = await store.replace(record)

    if user_id != record.owner_id:
        logger.warning("Folder %s asserted connected by non-owner %s", folder_id, user_id)
    logger.debug("Folder %s connected by %s at %s", folder_id, user_id, stamp.isoformat())
    return record


async def clear_stale_flags(
    db: AsyncSession,
    window: timedelta,
    now: datetime | None = None,
) -> int:
    """Reset the advisory ``is_connected`` flag on folders past the freshness window.

    Only the flag is touched; ``last_connected`` and ``connected_by`` stay as
    they are, so liveness answers do not change.
    """
    cutoff = to_naive_utc((now or utcnow()) - window)
    result = await db.execute(
        update(FileRecord)
        .where(
            FileRecord.is_folder.is_(True),
            FileRecord.is_connected.is_(True),
            FileRecord.last_connected < cutoff,
        )
        .values(is_connected=False)
    )
    await db.commit()
    return result.rowcount or 0
