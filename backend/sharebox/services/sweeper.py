"""APScheduler job that clears stale ``is_connected`` flags on folders."""

from __future__ import annotations

import logging
from datetime import timedelta

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from sharebox.config import settings
from sharebox.services.connection_service import clear_stale_flags

logger = logging.getLogger(__name__)


class ConnectionSweeper:
    """Periodically resets the advisory flag on folders nobody has asserted lately."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        interval_seconds: int | None = None,
        window_seconds: int | None = None,
    ):
        self._session_factory = session_factory
        self._interval = interval_seconds if interval_seconds is not None else settings.sweep_interval_seconds
        self._window = timedelta(
            seconds=window_seconds if window_seconds is not None else settings.freshness_window_seconds
        )
        self._scheduler = AsyncIOScheduler(
            job_defaults={"coalesce": True, "max_instances": 1}
        )

    @property
    def running(self) -> bool:
        return self._scheduler.running

    def start(self) -> None:
        if self._interval <= 0:
            logger.info("Connection sweeper disabled (interval=%s)", self._interval)
            return

        self._scheduler.add_job(
            self.sweep,
            "interval",
            seconds=self._interval,
            id="sweep_stale_connections",
            name="Clear stale folder connection flags",
        )
        self._scheduler.start()
        logger.info("Connection sweeper started, every %ds, window %s", self._interval, self._window)

    async def stop(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            logger.info("Connection sweeper stopped")

    async def sweep(self) -> int:
        """Run one sweep. Errors are logged, never raised into the scheduler."""
        try:
            async with self._session_factory() as db:
                count = await clear_stale_flags(db, self._window)
                if count:
                    logger.info("Cleared stale connection flag on %d folder(s)", count)
                return count
        except Exception as e:
            logger.error("Connection sweep failed: %s", e)
            return 0
