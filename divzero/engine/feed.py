"""
divzero.engine.feed — Carousel Assembly & Deduplication
========================================================

Pure assembly pipeline: no DB I/O.  Given a snapshot of approved projects
(with freshly written trending fields) it builds the single feed document
the website renders.

Stages:
  records → candidate carousels → claim pass (priority order)
          → per-category mix over unclaimed projects → document

Priority, highest first::

    promoted > trending > editorsPick > divisionZero > allTime > categories

A project id appears at most once in the whole document.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from divzero.constants import DEFAULT_CURATED_ORDER, category_key

if TYPE_CHECKING:
    from divzero.config import FeedConfig
    from divzero.database.models import Project

logger = logging.getLogger(__name__)

__all__ = [
    "ClaimSet",
    "ProjectRecord",
    "assemble_feed",
    "build_carousels",
    "format_project",
    "mix_category",
    "parse_array",
    "take_and_remove",
]


# ---------------------------------------------------------------------------
# ProjectRecord: detached snapshot of one approved row
# ---------------------------------------------------------------------------
def parse_array(value: Any) -> tuple[str, ...]:
    """Normalise a tools/tags column (JSON text or list) to a tuple.

    Anything unparseable becomes an empty tuple.
    """
    if not value:
        return ()
    if isinstance(value, (list, tuple)):
        return tuple(value)
    try:
        parsed = json.loads(value)
    except (json.JSONDecodeError, TypeError):
        return ()
    return tuple(parsed) if isinstance(parsed, list) else ()


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes even for timezone=True columns
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


@dataclass(frozen=True, slots=True)
class ProjectRecord:
    """Read-only copy of a ``projects`` row, safe to use outside a session."""

    id: str
    slug: str
    name: str
    category: str | None = None
    description: str | None = None
    tagline: str | None = None
    logo: str | None = None
    original_url: str | None = None
    proxy_url: str | None = None
    github_repo: str | None = None
    tools: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    pricing_model: str | None = None
    builder_name: str | None = None
    builder_discord: str | None = None
    builder_profile_url: str | None = None
    discord_thread: str | None = None
    is_promoted: bool = False
    promoted_order: int | None = None
    featured: bool = False
    featured_rank: int | None = None
    is_division_zero: bool = False
    views_total: int = 0
    clicks: int = 0
    saves: int = 0
    trending_score: int = 0
    trending_rank: int | None = None
    created_at: datetime | None = None
    approved_at: datetime | None = None

    @classmethod
    def from_project(cls, p: Project) -> ProjectRecord:
        return cls(
            id=p.id,
            slug=p.slug,
            name=p.name,
            category=p.category,
            description=p.description,
            tagline=p.tagline,
            logo=p.logo,
            original_url=p.original_url,
            proxy_url=p.proxy_url,
            github_repo=p.github_repo,
            tools=parse_array(p.tools),
            tags=parse_array(p.tags),
            pricing_model=p.pricing_model,
            builder_name=p.builder_name,
            builder_discord=p.builder_discord,
            builder_profile_url=p.builder_profile_url,
            discord_thread=p.discord_thread,
            is_promoted=bool(p.is_promoted),
            promoted_order=p.promoted_order,
            featured=bool(p.featured),
            featured_rank=p.featured_rank,
            is_division_zero=bool(p.is_division_zero),
            views_total=p.views_total or 0,
            clicks=p.clicks or 0,
            saves=p.saves or 0,
            trending_score=p.trending_score or 0,
            trending_rank=p.trending_rank,
            created_at=_as_utc(p.created_at),
            approved_at=_as_utc(p.approved_at),
        )


def format_project(record: ProjectRecord, proxy_domain: str) -> dict:
    """Render *record* in the camelCase shape the website's cards consume."""
    proxy_url = record.proxy_url or (
        f"https://{record.slug}.{proxy_domain}" if record.slug else record.original_url
    )
    return {
        "id": record.id,
        "name": record.name,
        "description": record.description,
        "tagline": record.tagline,
        "logo": record.logo,
        "originalUrl": record.original_url,
        "proxyUrl": proxy_url,
        "githubRepo": record.github_repo,
        "slug": record.slug,
        "category": record.category,
        "tools": list(record.tools),
        "tags": list(record.tags),
        "pricingModel": record.pricing_model or "free",
        "builder": {
            "name": record.builder_name,
            "discord": record.builder_discord,
            "profileUrl": record.builder_profile_url,
        },
        "featured": record.featured,
        "featuredRank": record.featured_rank,
        "isPromoted": record.is_promoted,
        "promotedOrder": record.promoted_order,
        "isDivisionZero": record.is_division_zero,
        "trendingRank": record.trending_rank,
        "trendingScore": record.trending_score,
        "views": record.views_total,
        "clicks": record.clicks,
        "saves": record.saves,
        "createdAt": record.created_at.isoformat() if record.created_at else None,
        "approvedAt": record.approved_at.isoformat() if record.approved_at else None,
        "discordThread": record.discord_thread,
    }


# ---------------------------------------------------------------------------
# Claims: the cross-carousel priority contract
# ---------------------------------------------------------------------------
class ClaimSet:
    """Ids already placed in a higher-priority carousel.

    Carousels must be claimed in priority order; each :meth:`claim` drops
    already-claimed projects and then claims the survivors.
    """

    def __init__(self) -> None:
        self._ids: set[str] = set()

    def __contains__(self, project_id: object) -> bool:
        return project_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def claim(self, records: Iterable[ProjectRecord]) -> list[ProjectRecord]:
        survivors: list[ProjectRecord] = []
        for record in records:
            if record.id in self._ids:
                continue
            self._ids.add(record.id)
            survivors.append(record)
        return survivors

    def unclaimed(self, records: Iterable[ProjectRecord]) -> list[ProjectRecord]:
        return [r for r in records if r.id not in self._ids]


# ---------------------------------------------------------------------------
# Stage 1: Candidate carousels (before dedup)
# ---------------------------------------------------------------------------
def _curated_order(order: int | None) -> int:
    return DEFAULT_CURATED_ORDER if order is None else order


def build_carousels(
    records: Sequence[ProjectRecord], cfg: FeedConfig
) -> dict[str, list[ProjectRecord]]:
    """Build the five top-level candidate lists, each already capped.

    Returned in claim-priority order; lists may overlap at this point.
    """
    promoted = sorted(
        (r for r in records if r.is_promoted),
        key=lambda r: _curated_order(r.promoted_order),
    )[: cfg.promoted_max]

    trending = sorted(
        (r for r in records if r.trending_rank is not None),
        key=lambda r: r.trending_rank,
    )[: cfg.trending_top]

    editors_pick = sorted(
        (r for r in records if r.featured),
        key=lambda r: _curated_order(r.featured_rank),
    )[: cfg.editors_pick_max]

    division_zero = [r for r in records if r.is_division_zero][: cfg.division_zero_max]

    all_time = sorted(records, key=lambda r: r.views_total, reverse=True)[: cfg.alltime_max]

    return {
        "promoted": promoted,
        "trending": trending,
        "editorsPick": editors_pick,
        "divisionZero": division_zero,
        "allTime": all_time,
    }


# ---------------------------------------------------------------------------
# Stage 2: Category mix over a shrinking pool
# ---------------------------------------------------------------------------
def _approved_key(record: ProjectRecord) -> tuple[int, float]:
    # Newest first; projects without an approval date go last
    if record.approved_at is None:
        return (1, 0.0)
    return (0, -record.approved_at.timestamp())


def take_and_remove(
    pool: list[ProjectRecord],
    count: int,
    key: Callable[[ProjectRecord], Any],
    *,
    reverse: bool = False,
) -> tuple[list[ProjectRecord], list[ProjectRecord]]:
    """Take the best *count* from *pool* under *key*.

    Returns ``(taken, remaining)``; *remaining* keeps the pool's order.
    """
    taken = sorted(pool, key=key, reverse=reverse)[:count]
    taken_ids = {r.id for r in taken}
    return taken, [r for r in pool if r.id not in taken_ids]


def mix_category(pool: list[ProjectRecord], cfg: FeedConfig) -> list[ProjectRecord]:
    """Trending slice, then most-viewed slice, then newest slice."""
    trending, pool = take_and_remove(
        pool, cfg.category_trending, key=lambda r: r.trending_score, reverse=True
    )
    most_viewed, pool = take_and_remove(
        pool, cfg.category_views, key=lambda r: r.views_total, reverse=True
    )
    newest, _ = take_and_remove(pool, cfg.category_new, key=_approved_key)
    return trending + most_viewed + newest


# ---------------------------------------------------------------------------
# Full assembly
# ---------------------------------------------------------------------------
def assemble_feed(
    records: Sequence[ProjectRecord],
    cfg: FeedConfig,
    now: datetime | None = None,
) -> dict:
    """Build the complete feed document from *records*.

    *records* should be in fetch order; the division-zero carousel and all
    tie-breaks follow it.  Deterministic for identical input and *now*.
    """
    now = now or datetime.now(UTC)
    carousels = build_carousels(records, cfg)

    claims = ClaimSet()
    for name, candidates in carousels.items():
        carousels[name] = claims.claim(candidates)

    unclaimed = claims.unclaimed(records)
    categories: dict[str, list[ProjectRecord]] = {}
    for category in cfg.categories:
        pool = [r for r in unclaimed if r.category == category]
        categories[category_key(category)] = mix_category(pool, cfg)

    logger.debug(
        "Assembled feed: %s, %d categories, %d claimed",
        {name: len(items) for name, items in carousels.items()},
        len(categories), len(claims),
    )

    def render(items: list[ProjectRecord]) -> list[dict]:
        return [format_project(r, cfg.proxy_domain) for r in items]

    return {
        **{name: render(items) for name, items in carousels.items()},
        "categories": {key: render(items) for key, items in categories.items()},
        "lastUpdated": now.isoformat(),
        "totalProjects": len(records),
    }
