"""
divzero.engine.scoring — Trending Score & Rank Assignment
==========================================================

Pure calculation: no DB I/O.  The service layer fetches counter rows,
hands them to :func:`rank_candidates`, and writes the results back.

Score::

    4*slot1 + 3*slot2 + 2*slot3 + 1*slot4     (slot1 = newest 6h bucket)
    + 0.5*views_3day + 2*clicks + 5*saves
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol

from divzero.constants import (
    CLICK_WEIGHT,
    SAVE_WEIGHT,
    SLOT_WEIGHTS,
    THREE_DAY_WEIGHT,
)

__all__ = [
    "CounterRow",
    "ScoredCandidate",
    "rank_candidates",
    "round_score",
    "trending_score",
]


class CounterRow(Protocol):
    """Anything carrying the counters the score reads (ORM row or record)."""

    id: str
    views_6h_slot1: int | None
    views_6h_slot2: int | None
    views_6h_slot3: int | None
    views_6h_slot4: int | None
    views_3day: int | None
    clicks: int | None
    saves: int | None


@dataclass(frozen=True, slots=True)
class ScoredCandidate:
    """One project's score for the current run, plus its rank (or None)."""

    project_id: str
    score: float
    rank: int | None = None

    @property
    def stored_score(self) -> int:
        return round_score(self.score)


def trending_score(row: CounterRow) -> float:
    """Weighted, recency-decayed interest score for one project.

    Missing counters count as zero.
    """
    slots = (
        row.views_6h_slot1 or 0,
        row.views_6h_slot2 or 0,
        row.views_6h_slot3 or 0,
        row.views_6h_slot4 or 0,
    )
    recent = sum(weight * views for weight, views in zip(SLOT_WEIGHTS, slots))
    return (
        recent
        + (row.views_3day or 0) * THREE_DAY_WEIGHT
        + (row.clicks or 0) * CLICK_WEIGHT
        + (row.saves or 0) * SAVE_WEIGHT
    )


def round_score(score: float) -> int:
    """Round half up, as the website's original scorer did (``x.5`` → up)."""
    return math.floor(score + 0.5)


def rank_candidates(rows: Iterable[CounterRow], top_k: int) -> list[ScoredCandidate]:
    """Score every row and assign ranks 1..K to the best *top_k*.

    Sorted by score descending.  Equal scores keep the input order, so
    callers that fetch ordered by id get a deterministic tie-break.
    Rows past the top K get ``rank=None``.
    """
    scored = [(row.id, trending_score(row)) for row in rows]
    scored.sort(key=lambda pair: pair[1], reverse=True)
    return [
        ScoredCandidate(
            project_id=project_id,
            score=score,
            rank=position + 1 if position < top_k else None,
        )
        for position, (project_id, score) in enumerate(scored)
    ]
