"""Background loops for folder liveness.

``ConnectionPoller`` runs on the guest side, re-fetching the folder record on
a fixed interval and recomputing its status. ``ConnectionKeepalive`` runs on
the owner side and keeps re-asserting the connection while the cached handle still works.
Both are explicit handles; ``stop()`` cancels everything they started.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from sharebox.client.handle_cache import HandleCache
from sharebox.client.liveness import ConnectionStatus, check_connection
from sharebox.config import settings
from sharebox.schemas.files import FileOut, FolderOut

logger = logging.getLogger(__name__)

FetchRecord = Callable[[str], Awaitable["FileOut | FolderOut"]]
StatusCallback = Callable[[ConnectionStatus, FolderOut], None]
AssertConnected = Callable[[str, str], Awaitable[object]]


async def _cancel(task: asyncio.Task | None) -> None:
    if task is None or task.done():
        return
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass


class ConnectionPoller:
    """Polls a shared folder's record for a guest viewer.

    One fetch is outstanding at most: a tick that finds the previous fetch
    still running is skipped, not queued. Fetch failures leave the last
    status in place.
    """

    def __init__(
        self,
        folder_id: str,
        fetch: FetchRecord,
        cache: HandleCache,
        interval: float | None = None,
        on_change: Optional[StatusCallback] = None,
        initial_status: ConnectionStatus = ConnectionStatus.UNKNOWN,
    ):
        self._folder_id = folder_id
        self._fetch = fetch
        self._cache = cache
        self._interval = interval if interval is not None else settings.poll_interval_seconds
        self._on_change = on_change
        self._status = initial_status
        self._record: FolderOut | None = None
        self._task: asyncio.Task | None = None
        self._inflight: asyncio.Task | None = None
        self._running = False
        self.ticks = 0
        self.skipped = 0

    @property
    def status(self) -> ConnectionStatus:
        return self._status

    @property
    def record(self) -> FolderOut | None:
        return self._record

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        if self._task is not None:
            return
        self._running = True
        self._task = asyncio.create_task(self._run_loop())
        logger.info("Started polling folder %s every %.1fs", self._folder_id, self._interval)

    async def stop(self) -> None:
        """Stop polling. No fetch is issued after this returns."""
        self._running = False
        await _cancel(self._task)
        await _cancel(self._inflight)
        self._task = None
        self._inflight = None
        logger.info("Stopped polling folder %s", self._folder_id)

    async def check_once(self) -> ConnectionStatus:
        """Fetch the record and recompute status; errors keep the last status."""
        try:
            record = await self._fetch(self._folder_id)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning("Polling folder %s failed: %s", self._folder_id, e)
            return self._status

        if not isinstance(record, FolderOut):
            logger.warning("Record %s is not a folder, ignoring", self._folder_id)
            return self._status

        status = await check_connection(record, viewer_is_owner=False, cache=self._cache)
        self._record = record
        if status != self._status:
            logger.info("Folder %s: %s -> %s", self._folder_id, self._status.value, status.value)
            self._status = status
            if self._on_change:
                try:
                    self._on_change(status, record)
                except Exception as e:
                    logger.error("Status callback for folder %s failed: %s", self._folder_id, e)
        return status

    def _tick(self) -> None:
        self.ticks += 1
        if self._inflight is not None and not self._inflight.done():
            self.skipped += 1
            logger.debug("Folder %s: previous poll still running, skipping tick", self._folder_id)
            return
        self._inflight = asyncio.create_task(self.check_once())

    async def _run_loop(self) -> None:
        while self._running:
            self._tick()
            try:
                await asyncio.sleep(self._interval)
            except asyncio.CancelledError:
                break


def start_polling(
    record: FileOut | FolderOut,
    viewer_id: str,
    fetch: FetchRecord,
    cache: HandleCache,
    interval: float | None = None,
    on_change: Optional[StatusCallback] = None,
) -> ConnectionPoller | None:
    """Start polling for a guest. Returns ``None`` for owners and plain files."""
    if not isinstance(record, FolderOut):
        return None
    if record.owner_id == viewer_id:
        logger.debug("Not polling folder %s: viewer is the owner", record.id)
        return None

    poller = ConnectionPoller(record.id, fetch, cache, interval=interval, on_change=on_change)
    poller.start()
    return poller


class ConnectionKeepalive:
    """Refreshes ``last_connected`` while the owner's handle stays usable."""

    def __init__(
        self,
        folder_id: str,
        user_id: str,
        cache: HandleCache,
        assert_connected: AssertConnected,
        interval: float | None = None,
        on_lost: Optional[Callable[[str], None]] = None,
    ):
        self._folder_id = folder_id
        self._user_id = user_id
        self._cache = cache
        self._assert = assert_connected
        self._interval = interval if interval is not None else settings.keepalive_interval_seconds
        self._on_lost = on_lost
        self._task: asyncio.Task | None = None
        self._running = False
        self.assertions = 0

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        if self._task is not None:
            return
        self._running = True
        self._task = asyncio.create_task(self._run_loop())
        logger.info("Keepalive started for folder %s", self._folder_id)

    async def stop(self) -> None:
        self._running = False
        await _cancel(self._task)
        self._task = None
        logger.info("Keepalive stopped for folder %s", self._folder_id)

    async def beat(self) -> bool:
        """One keepalive step. Returns False once the handle is gone."""
        handle = self._cache.get(self._folder_id)
        if handle is None or not await handle.is_accessible():
            self._cache.evict(self._folder_id)
            logger.warning("Folder %s lost its handle, no longer asserting", self._folder_id)
            if self._on_lost:
                try:
                    self._on_lost(self._folder_id)
                except Exception as e:
                    logger.error("Lost-handle callback for folder %s failed: %s", self._folder_id, e)
            return False

        try:
            await self._assert(self._folder_id, self._user_id)
            self.assertions += 1
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error("Keepalive for folder %s failed: %s", self._folder_id, e)
        return True

    async def _run_loop(self) -> None:
        while self._running:
            try:
                await asyncio.sleep(self._interval)
            except asyncio.CancelledError:
                break
            if not await self.beat():
                self._running = False
                break
