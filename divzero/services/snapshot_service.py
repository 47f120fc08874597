"""
divzero.services.snapshot_service — Published Feed Snapshots
=============================================================

Stores the feed document the website reads, plus exactly one rollback
copy, in the ``feed_snapshots`` key/value table:

- ``projects:current``  — the document being served
- ``projects:previous`` — the document it replaced (single generation)
- ``projects:lastSync`` — ISO timestamp of the last publish

:func:`publish` does the current → previous shuffle and the new write in
one transaction, so readers see either the old document or the new one.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime

from sqlalchemy import Engine
from sqlalchemy.orm import Session

from divzero.constants import CURRENT_FEED_KEY, LAST_SYNC_KEY, PREVIOUS_FEED_KEY
from divzero.database.engine import get_session
from divzero.database.models import FeedSnapshot

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _put(session: Session, key: str, value_json: str) -> None:
    row = session.get(FeedSnapshot, key)
    if row is None:
        session.add(FeedSnapshot(key=key, value_json=value_json))
    else:
        row.value_json = value_json


def _get(engine: Engine, key: str):
    with get_session(engine) as session:
        row = session.get(FeedSnapshot, key)
        if row is None:
            return None
        try:
            return json.loads(row.value_json)
        except (json.JSONDecodeError, TypeError):
            logger.error("Snapshot %s holds invalid JSON, ignoring it", key)
            return None


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------
def publish(engine: Engine, document: dict, now: datetime | None = None) -> str:
    """Make *document* the current feed and keep the old one as previous.

    Returns the publish timestamp (ISO-8601).  Any failure rolls the whole
    transaction back and propagates; the old current document stays live.
    """
    published_at = (now or datetime.now(UTC)).isoformat()
    payload = json.dumps(document, separators=(",", ":"))

    with get_session(engine) as session:
        current = session.get(FeedSnapshot, CURRENT_FEED_KEY)
        if current is not None:
            _put(session, PREVIOUS_FEED_KEY, current.value_json)
            current.value_json = payload
        else:
            session.add(FeedSnapshot(key=CURRENT_FEED_KEY, value_json=payload))
        _put(session, LAST_SYNC_KEY, json.dumps(published_at))

    logger.info("Published feed snapshot (%d bytes) at %s", len(payload), published_at)
    return published_at


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------
def get_current_feed(engine: Engine) -> dict | None:
    """The live feed document, or ``None`` if nothing was published yet."""
    return _get(engine, CURRENT_FEED_KEY)


def get_previous_feed(engine: Engine) -> dict | None:
    """The rollback document, or ``None`` if fewer than two publishes ran."""
    return _get(engine, PREVIOUS_FEED_KEY)


def get_last_sync(engine: Engine) -> str | None:
    return _get(engine, LAST_SYNC_KEY)
