"""
divzero.worker.scheduler — Periodic Sync Loop
===============================================

Runs the full sync on a ``discord.ext.tasks`` loop every
``refresh_hours``.  The loop does not need a gateway connection; it only
needs a running event loop.

Each tick ships the synchronous pipeline to a thread via ``run_db()``.  A
failed run is logged and the loop keeps going; the next tick retries.
"""

from __future__ import annotations

import logging

from discord.ext import tasks
from sqlalchemy import Engine

from divzero.config import FeedConfig
from divzero.database.engine import run_db
from divzero.services.sync_service import refresh

logger = logging.getLogger(__name__)


class SyncScheduler:
    """Owns the refresh loop for one engine/config pair."""

    def __init__(self, engine: Engine, cfg: FeedConfig) -> None:
        self.engine = engine
        self.cfg = cfg
        self.last_summary: dict | None = None

    def start(self) -> None:
        """Start the loop; the first run happens immediately."""
        self.refresh_loop.change_interval(hours=self.cfg.refresh_hours)
        self.refresh_loop.start()
        logger.info("Sync loop started (every %s h)", self.cfg.refresh_hours)

    def stop(self) -> None:
        self.refresh_loop.cancel()

    async def run_once(self) -> dict | None:
        """Run one sync.  Returns the summary, or ``None`` if it failed."""
        try:
            summary = await run_db(refresh, self.engine, self.cfg)
        except Exception:
            # refresh() already logged the traceback
            logger.warning("Scheduled sync failed, retrying next tick", extra={"task": "sync"})
            return None
        self.last_summary = summary
        logger.info(
            "Scheduled sync complete: %d projects at %s",
            summary["total_projects"], summary["timestamp"],
        )
        return summary

    @tasks.loop(hours=1)
    async def refresh_loop(self):
        await self.run_once()
