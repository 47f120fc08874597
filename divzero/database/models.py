"""
divzero.database.models — SQLAlchemy 2.0 Data Models
=====================================================

Tables:
- projects        — Approved/pending showcase submissions (the signal store)
- feed_snapshots  — Key/value store for the published feed documents

The ``projects`` table is created and mutated by the moderation workflow.
This engine only ever writes the rolling view slots (rotation) and the two
derived trending columns.
"""

from __future__ import annotations

import enum
import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """Shared base for all Division Zero ORM models."""


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class ProjectStatus(enum.StrEnum):
    """Moderation state of a submission."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


def _new_id() -> str:
    return str(uuid.uuid4())


# ---------------------------------------------------------------------------
# Projects: one row per submission
# ---------------------------------------------------------------------------
class Project(Base):
    """A showcase submission plus its engagement counters.

    ``views_6h_slot1`` is the newest rolling bucket and ``views_6h_slot4``
    the oldest.  ``trending_score`` / ``trending_rank`` are owned by the
    sync engine and rewritten on every run.
    """
    __tablename__ = "projects"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    slug: Mapped[str] = mapped_column(String(120), nullable=False, unique=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ProjectStatus.PENDING.value
    )

    # Content
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    tagline: Mapped[str | None] = mapped_column(String(300), default=None)
    category: Mapped[str | None] = mapped_column(String(50), default=None)
    logo: Mapped[str | None] = mapped_column(String(500), default=None)
    original_url: Mapped[str | None] = mapped_column(String(500), default=None)
    proxy_url: Mapped[str | None] = mapped_column(String(500), default=None)
    github_repo: Mapped[str | None] = mapped_column(String(500), default=None)
    tools: Mapped[str | None] = mapped_column(Text, default=None)  # JSON array
    tags: Mapped[str | None] = mapped_column(Text, default=None)   # JSON array
    pricing_model: Mapped[str | None] = mapped_column(String(30), default=None)

    # Builder
    builder_name: Mapped[str | None] = mapped_column(String(100), default=None)
    builder_discord: Mapped[str | None] = mapped_column(String(100), default=None)
    builder_profile_url: Mapped[str | None] = mapped_column(String(500), default=None)
    discord_thread: Mapped[str | None] = mapped_column(String(500), default=None)

    # Curation flags
    is_promoted: Mapped[bool] = mapped_column(Boolean, default=False)
    promoted_order: Mapped[int | None] = mapped_column(Integer, default=None)
    featured: Mapped[bool] = mapped_column(Boolean, default=False)
    featured_rank: Mapped[int | None] = mapped_column(Integer, default=None)
    is_division_zero: Mapped[bool] = mapped_column(Boolean, default=False)

    # Counters (maintained by the redirect service)
    views_6h_slot1: Mapped[int] = mapped_column(Integer, default=0)
    views_6h_slot2: Mapped[int] = mapped_column(Integer, default=0)
    views_6h_slot3: Mapped[int] = mapped_column(Integer, default=0)
    views_6h_slot4: Mapped[int] = mapped_column(Integer, default=0)
    views_3day: Mapped[int] = mapped_column(Integer, default=0)
    views_total: Mapped[int] = mapped_column(Integer, default=0)
    clicks: Mapped[int] = mapped_column(Integer, default=0)
    saves: Mapped[int] = mapped_column(Integer, default=0)

    # Derived: written only by the scorer
    trending_score: Mapped[int] = mapped_column(Integer, default=0)
    trending_rank: Mapped[int | None] = mapped_column(Integer, default=None)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    approved_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), default=None
    )

    __table_args__ = (
        Index("ix_projects_status", "status"),
        Index("ix_projects_category", "category"),
    )

    def __repr__(self) -> str:
        return f"<Project id={self.id} slug={self.slug!r} rank={self.trending_rank}>"


# ---------------------------------------------------------------------------
# FeedSnapshot: published feed documents
# ---------------------------------------------------------------------------
class FeedSnapshot(Base):
    """Key/value store for the feed the website reads.

    Three keys are used: the current document, the single rollback copy,
    and the last publish timestamp.  Values are JSON strings.
    """
    __tablename__ = "feed_snapshots"

    key: Mapped[str] = mapped_column(String(50), primary_key=True)
    value_json: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<FeedSnapshot key={self.key!r}>"
