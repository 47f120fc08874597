"""
divzero.services.rotation_service — Rolling View Slot Rotation
===============================================================

Ages the four 6-hour view buckets by one period::

    slot4 ← slot3,  slot3 ← slot2,  slot2 ← slot1,  slot1 ← 0

One bulk ``UPDATE`` over every row; the right-hand sides read the pre-update
values, so the shift happens in a single statement.

Rotation is best-effort.  A failure is logged and swallowed: skipping one
period only delays decay until the next run.
"""

from __future__ import annotations

import logging

from sqlalchemy import Engine, update
from sqlalchemy.exc import SQLAlchemyError

from divzero.database.engine import get_session
from divzero.database.models import Project

logger = logging.getLogger(__name__)


def rotate_view_slots(engine: Engine) -> bool:
    """Shift every project's view slots one period toward "oldest".

    Returns ``True`` if the rotation committed, ``False`` if it was skipped.
    """
    try:
        with get_session(engine) as session:
            result = session.execute(
                update(Project).values(
                    views_6h_slot4=Project.views_6h_slot3,
                    views_6h_slot3=Project.views_6h_slot2,
                    views_6h_slot2=Project.views_6h_slot1,
                    views_6h_slot1=0,
                )
            )
            rotated = result.rowcount
    except SQLAlchemyError:
        logger.warning(
            "View slot rotation failed, skipping this period",
            exc_info=True,
            extra={"task": "rotate"},
        )
        return False

    logger.info("Rotated view slots for %d projects", rotated)
    return True
