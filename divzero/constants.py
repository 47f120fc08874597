"""
divzero.constants — Shared Constants & Helpers
================================================

Single source of truth for the trending weights, snapshot keys and the
category-key formula.  Import from here instead of duplicating in the
engine, services, and API.
"""

from __future__ import annotations

import re

# ---------------------------------------------------------------------------
# Trending score weights
# ---------------------------------------------------------------------------
SLOT_WEIGHTS: tuple[int, int, int, int] = (4, 3, 2, 1)  # newest → oldest
THREE_DAY_WEIGHT: float = 0.5
CLICK_WEIGHT: int = 2
SAVE_WEIGHT: int = 5

# Sort position for curated items without an explicit order
DEFAULT_CURATED_ORDER: int = 99


# ---------------------------------------------------------------------------
# Snapshot store keys
# ---------------------------------------------------------------------------
CURRENT_FEED_KEY = "projects:current"
PREVIOUS_FEED_KEY = "projects:previous"
LAST_SYNC_KEY = "projects:lastSync"


# ---------------------------------------------------------------------------
# Feed document list names, in claim priority order
# ---------------------------------------------------------------------------
CAROUSEL_KEYS: tuple[str, ...] = (
    "promoted",
    "trending",
    "editorsPick",
    "divisionZero",
    "allTime",
)


_WHITESPACE = re.compile(r"\s+")


def category_key(category: str) -> str:
    """Key used for *category* in the feed's ``categories`` mapping.

    ``"Developer Tools"`` → ``"developertools"``.
    """
    return _WHITESPACE.sub("", category.lower())
