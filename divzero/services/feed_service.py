"""
divzero.services.feed_service — Feed Document Builder
======================================================

Re-reads every approved project (including the trending fields the scorer
just wrote) and runs the pure assembler.  A fetch failure is NOT swallowed:
it aborts the run so the previously published feed stays authoritative.
"""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import Engine

from divzero.config import FeedConfig
from divzero.engine.feed import assemble_feed
from divzero.services.project_store import fetch_approved_records

logger = logging.getLogger(__name__)


def build_feed(engine: Engine, cfg: FeedConfig, now: datetime | None = None) -> dict:
    """Fetch approved projects and return the assembled feed document."""
    records = fetch_approved_records(engine)
    document = assemble_feed(records, cfg, now=now)
    logger.info(
        "Built feed: %d promoted, %d trending, %d editors' pick, "
        "%d division zero, %d all-time, %d categories",
        len(document["promoted"]),
        len(document["trending"]),
        len(document["editorsPick"]),
        len(document["divisionZero"]),
        len(document["allTime"]),
        len(document["categories"]),
    )
    return document
