"""
divzero.services.sync_service — Full Sync Pipeline
===================================================

Runs the four stages in order, each depending on the previous stage's
committed writes to ``projects``:

    rotate view slots → score + rank → build feed → publish snapshot

Rotation and per-project score writes degrade gracefully.  A failed feed
fetch or a failed publish aborts the run; the last published document stays
live either way.

Overlapping runs (timer + manual ``/sync``) are not serialised: the last one
to publish wins.  Also exposes the read side used by the HTTP layer.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from sqlalchemy import Engine

from divzero.config import FeedConfig
from divzero.constants import CAROUSEL_KEYS
from divzero.services.feed_service import build_feed
from divzero.services.rotation_service import rotate_view_slots
from divzero.services.scoring_service import calculate_trending_ranks
from divzero.services.snapshot_service import (
    get_current_feed,
    get_last_sync,
    get_previous_feed,
    publish,
)

logger = logging.getLogger(__name__)

__all__ = [
    "full_sync",
    "get_current_feed",
    "get_previous_feed",
    "get_status",
    "refresh",
]


def full_sync(engine: Engine, cfg: FeedConfig) -> dict:
    """Run the whole pipeline once and return a run summary.

    Raises whatever the feed fetch or the publish raised; nothing is
    published in that case.
    """
    started = datetime.now(UTC)
    logger.info("Starting full sync…")

    rotated = rotate_view_slots(engine)
    scoring = calculate_trending_ranks(engine, cfg)
    document = build_feed(engine, cfg)
    published_at = publish(engine, document)

    elapsed = (datetime.now(UTC) - started).total_seconds()
    logger.info(
        "Sync complete in %.2fs — %d projects, %d ranked, %d failed writes",
        elapsed, document["totalProjects"], scoring["ranked"], scoring["failed"],
    )
    return {
        "timestamp": published_at,
        "total_projects": document["totalProjects"],
        "rotated": rotated,
        "scored": scoring["scored"],
        "ranked": scoring["ranked"],
        "failed_writes": scoring["failed"],
    }


def refresh(engine: Engine, cfg: FeedConfig) -> dict:
    """Public entry point for the timer and the manual trigger."""
    try:
        return full_sync(engine, cfg)
    except Exception:
        logger.exception("Sync failed, previous feed stays live", extra={"task": "sync"})
        raise


def get_status(engine: Engine, cfg: FeedConfig) -> dict:
    """Last sync time, effective config and per-carousel counts."""
    current = get_current_feed(engine)
    stats: dict[str, int] = {}
    if current:
        stats = {key: len(current.get(key) or []) for key in CAROUSEL_KEYS}
        stats["categories"] = len(current.get("categories") or {})

    return {
        "last_sync": get_last_sync(engine) or "Never",
        "config": cfg.to_dict(),
        "stats": stats,
    }
