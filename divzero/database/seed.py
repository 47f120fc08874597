"""
divzero.database.seed — Demo Project Seeder
=============================================

A handful of approved projects so a fresh dev database produces a
non-empty feed on the first sync.  Never run against production; the
real ``projects`` rows come from the moderation bot.

Idempotent — only inserts slugs that don't already exist.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime, timedelta

from sqlalchemy import Engine, select

from divzero.database.engine import get_session
from divzero.database.models import Project, ProjectStatus

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Demo catalogue
# ---------------------------------------------------------------------------
DEMO_PROJECTS: list[dict] = [
    {
        "slug": "taskflow", "name": "TaskFlow", "category": "Productivity",
        "tagline": "Kanban that plans your week", "is_promoted": True, "promoted_order": 1,
        "views_6h_slot1": 40, "views_3day": 300, "views_total": 2_400, "clicks": 55, "saves": 12,
        "tools": ["Cursor", "Supabase"], "tags": ["kanban", "planning"],
    },
    {
        "slug": "lintbot", "name": "LintBot", "category": "Developer Tools",
        "tagline": "Review comments before review", "featured": True, "featured_rank": 1,
        "views_6h_slot1": 12, "views_6h_slot2": 30, "views_total": 900, "clicks": 20, "saves": 9,
        "tools": ["Claude"], "tags": ["ci", "lint"],
    },
    {
        "slug": "pixel-quest", "name": "Pixel Quest", "category": "Games",
        "tagline": "A roguelike in 48 hours", "is_division_zero": True,
        "views_6h_slot3": 80, "views_total": 5_100, "clicks": 140, "saves": 31,
        "tools": ["Godot"], "tags": ["roguelike"],
    },
    {
        "slug": "agent-desk", "name": "Agent Desk", "category": "AI Agents",
        "tagline": "Support inbox run by agents",
        "views_6h_slot1": 5, "views_3day": 60, "views_total": 310, "clicks": 8, "saves": 2,
        "tools": ["LangGraph"], "tags": ["support"],
    },
    {
        "slug": "palette-pal", "name": "Palette Pal", "category": "Design",
        "tagline": "Accessible palettes from one colour",
        "views_6h_slot2": 18, "views_total": 700, "clicks": 15, "saves": 20,
        "tools": ["v0"], "tags": ["color", "a11y"],
    },
    {
        "slug": "focus-timer", "name": "Focus Timer", "category": "Productivity",
        "tagline": "Pomodoro with streaks",
        "views_total": 120, "clicks": 3,
        "tools": ["Bolt"], "tags": ["pomodoro"],
    },
]


# ---------------------------------------------------------------------------
# Seeder
# ---------------------------------------------------------------------------
def seed_demo_projects(engine: Engine) -> int:
    """Insert demo projects whose slug is not taken yet.

    Returns the number of rows inserted.
    """
    now = datetime.now(UTC)
    inserted = 0
    with get_session(engine) as session:
        existing = set(session.scalars(select(Project.slug)).all())
        for offset, demo in enumerate(DEMO_PROJECTS):
            if demo["slug"] in existing:
                continue
            fields = dict(demo)
            fields["tools"] = json.dumps(fields.get("tools", []))
            fields["tags"] = json.dumps(fields.get("tags", []))
            session.add(Project(
                status=ProjectStatus.APPROVED.value,
                original_url=f"https://example.com/{demo['slug']}",
                approved_at=now - timedelta(days=offset),
                **fields,
            ))
            inserted += 1

    if inserted:
        logger.info("Seeded %d demo projects.", inserted)
    return inserted
