"""
divzero.services.scoring_service — Trending Score Write-Back
=============================================================

Fetches counters for all approved projects, ranks them with
:func:`divzero.engine.scoring.rank_candidates`, and writes score + rank
back one project at a time.

Partial-failure policy: each write has its own transaction.  A failed write
is logged and skipped; that project keeps last run's score/rank until the
next successful run.
"""

from __future__ import annotations

import logging

from sqlalchemy import Engine
from sqlalchemy.exc import SQLAlchemyError

from divzero.config import FeedConfig
from divzero.database.engine import get_session
from divzero.engine.scoring import rank_candidates
from divzero.services.project_store import fetch_counter_rows, set_trending_fields

logger = logging.getLogger(__name__)


def calculate_trending_ranks(engine: Engine, cfg: FeedConfig) -> dict[str, int]:
    """Score every approved project and persist score + top-K rank.

    Returns ``{"scored": N, "ranked": R, "failed": F}``.  If the counter
    fetch itself fails, nothing is written and all three are zero.
    """
    try:
        rows = fetch_counter_rows(engine)
    except SQLAlchemyError:
        logger.exception(
            "Trending fetch failed, keeping previous ranks",
            extra={"task": "score"},
        )
        return {"scored": 0, "ranked": 0, "failed": 0}

    candidates = rank_candidates(rows, cfg.trending_top)

    failed = 0
    for candidate in candidates:
        try:
            with get_session(engine) as session:
                set_trending_fields(
                    session,
                    candidate.project_id,
                    candidate.stored_score,
                    candidate.rank,
                )
        except SQLAlchemyError:
            failed += 1
            logger.exception(
                "Trending write failed for project %s",
                candidate.project_id,
                extra={"task": "score", "project_id": candidate.project_id},
            )

    ranked = sum(1 for c in candidates if c.rank is not None)
    logger.info(
        "Updated %d projects with trending ranks (%d ranked, %d failed)",
        len(candidates) - failed, ranked, failed,
    )
    return {"scored": len(candidates), "ranked": ranked, "failed": failed}
