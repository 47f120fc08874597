"""
divzero.services.project_store — Signal Store Access
=====================================================

Every query the sync pipeline runs against ``projects`` lives here, so the
write surface of the engine stays auditable:

- reads of approved projects (counters only, or full records)
- :func:`set_trending_fields` — the ONLY write to ``trending_score`` /
  ``trending_rank``.  Nothing else in the codebase touches those columns.
"""

from __future__ import annotations

import logging

from sqlalchemy import Engine, Row, select, update
from sqlalchemy.orm import Session

from divzero.database.engine import get_session
from divzero.database.models import Project, ProjectStatus
from divzero.engine.feed import ProjectRecord

logger = logging.getLogger(__name__)

_COUNTER_COLUMNS = (
    Project.id,
    Project.views_6h_slot1,
    Project.views_6h_slot2,
    Project.views_6h_slot3,
    Project.views_6h_slot4,
    Project.views_3day,
    Project.clicks,
    Project.saves,
)


def _approved():
    return Project.status == ProjectStatus.APPROVED.value


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------
def fetch_counter_rows(engine: Engine) -> list[Row]:
    """Id + scoring counters for every approved project, ordered by id."""
    with get_session(engine) as session:
        return list(
            session.execute(
                select(*_COUNTER_COLUMNS).where(_approved()).order_by(Project.id)
            ).all()
        )


def fetch_approved_records(engine: Engine) -> list[ProjectRecord]:
    """Every approved project as a detached :class:`ProjectRecord`.

    Ordered by id so assembly is reproducible between runs.
    """
    with get_session(engine) as session:
        rows = session.scalars(
            select(Project).where(_approved()).order_by(Project.id)
        ).all()
        records = [ProjectRecord.from_project(p) for p in rows]
    logger.info("Fetched %d approved projects", len(records))
    return records


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------
def set_trending_fields(
    session: Session, project_id: str, score: int, rank: int | None
) -> bool:
    """Overwrite one project's derived trending columns.

    Returns ``False`` if no row matched *project_id* (deleted mid-run).
    """
    result = session.execute(
        update(Project)
        .where(Project.id == project_id)
        .values(trending_score=score, trending_rank=rank)
    )
    return bool(result.rowcount)
