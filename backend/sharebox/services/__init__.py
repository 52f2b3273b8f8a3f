"""Business logic services: background job registry."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sharebox.services.sweeper import ConnectionSweeper

logger = logging.getLogger(__name__)

_sweeper: ConnectionSweeper | None = None


async def init_services() -> None:
    """Create and start background services."""
    global _sweeper

    from sharebox.database import async_session
    from sharebox.services.sweeper import ConnectionSweeper

    _sweeper = ConnectionSweeper(async_session)
    _sweeper.start()
    logger.info("Services initialized (connection sweeper)")


async def shutdown_services() -> None:
    """Stop background services."""
    global _sweeper
    if _sweeper:
        await _sweeper.stop()
        _sweeper = None


def get_sweeper() -> ConnectionSweeper:
    if _sweeper is None:
        raise RuntimeError("Services not initialized, call init_services() first")
    return _sweeper
