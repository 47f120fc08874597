"""
divzero.config — YAML Configuration Loader
===========================================

Reads ``config.yaml`` for the deployment-time tuning of the sync engine:
refresh period, carousel sizes, category mix and the category list.
None of it is changeable at runtime; edit the file and restart.

Secrets (``DATABASE_URL``, ``SYNC_SECRET``) come from the environment.

Usage::

    from divzero.config import load_config

    cfg = load_config()          # reads ./config.yaml by default
    print(cfg.trending_top)      # 10
    print(cfg.categories)        # ("Productivity", "Developer Tools", …)
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path

import yaml

DEFAULT_CATEGORIES: tuple[str, ...] = (
    "Productivity",
    "Developer Tools",
    "Games",
    "AI Agents",
    "Design",
)


# ---------------------------------------------------------------------------
# Typed settings object
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class FeedConfig:
    """Immutable sync configuration loaded from ``config.yaml``.

    Defaults reproduce the production worker's constants, so an empty
    YAML mapping is a valid configuration.
    """

    # Scheduling
    refresh_hours: float = 1

    # Top-level carousels
    trending_top: int = 10        # K: ranked items + trending carousel size
    editors_pick_max: int = 8
    promoted_max: int = 4
    division_zero_max: int = 4
    alltime_max: int = 10

    # Per-category mix: trending + most viewed + newest
    category_trending: int = 2
    category_views: int = 2
    category_new: int = 4
    categories: tuple[str, ...] = field(default=DEFAULT_CATEGORIES)

    # Redirect host used to build proxy URLs when a row has none
    proxy_domain: str = "divisionzero.dev"

    def to_dict(self) -> dict:
        """Plain-dict view for the ``/status`` endpoint."""
        data = asdict(self)
        data["categories"] = list(self.categories)
        return data


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def load_config(path: str | Path = "config.yaml") -> FeedConfig:
    """Read *path* and return a :class:`FeedConfig` instance.

    Parameters
    ----------
    path:
        Filesystem path to the YAML configuration file.
        Defaults to ``config.yaml`` in the current working directory.

    Raises
    ------
    FileNotFoundError
        If the YAML file doesn't exist.
    ValueError
        If a size is negative or the category list is empty.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path.resolve()}\n"
            "Hint: copy config.yaml.example → config.yaml and edit it."
        )

    with open(config_path, encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"{config_path}: top level must be a mapping")

    defaults = FeedConfig()
    sizes = {
        name: int(raw.get(name, getattr(defaults, name)))
        for name in (
            "trending_top",
            "editors_pick_max",
            "promoted_max",
            "division_zero_max",
            "alltime_max",
            "category_trending",
            "category_views",
            "category_new",
        )
    }
    negative = [name for name, value in sizes.items() if value < 0]
    if negative:
        raise ValueError(f"Carousel sizes must be >= 0: {', '.join(negative)}")

    refresh_hours = float(raw.get("refresh_hours", defaults.refresh_hours))
    if refresh_hours <= 0:
        raise ValueError(f"refresh_hours must be > 0, got {refresh_hours}")

    raw_categories = raw.get("categories")
    categories = tuple(
        defaults.categories if raw_categories is None else raw_categories
    )
    if not categories:
        raise ValueError("At least one category must be configured")

    return FeedConfig(
        refresh_hours=refresh_hours,
        categories=categories,
        proxy_domain=str(raw.get("proxy_domain", defaults.proxy_domain)),
        **sizes,
    )
