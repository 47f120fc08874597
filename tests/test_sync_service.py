"""
tests/test_sync_service.py — Sync Pipeline Integration Tests
==============================================================

Runs rotation, scoring, feed building and publishing against the in-memory
SQLite schema from conftest, with failures injected via ``unittest.mock``.
"""

from __future__ import annotations

from datetime import UTC, datetime
from unittest.mock import patch

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from divzero.config import FeedConfig
from divzero.database.models import Project, ProjectStatus
from divzero.database.seed import DEMO_PROJECTS, seed_demo_projects
from divzero.services import scoring_service, sync_service
from divzero.services.feed_service import build_feed
from divzero.services.rotation_service import rotate_view_slots
from divzero.services.scoring_service import calculate_trending_ranks
from divzero.services.snapshot_service import (
    get_current_feed,
    get_last_sync,
    get_previous_feed,
    publish,
)


def _db_down(*args, **kwargs):
    raise OperationalError("SELECT 1", {}, Exception("connection refused"))


def _get(engine, project_id: str) -> Project:
    with Session(engine) as session:
        project = session.get(Project, project_id)
        session.expunge(project)
        return project


# ===========================================================================
# Slot rotation
# ===========================================================================
class TestRotateViewSlots:
    def test_shifts_toward_oldest(self, db_engine, add_project):
        pid = add_project(
            views_6h_slot1=1, views_6h_slot2=2, views_6h_slot3=3, views_6h_slot4=4,
        )
        assert rotate_view_slots(db_engine) is True

        p = _get(db_engine, pid)
        assert (p.views_6h_slot1, p.views_6h_slot2, p.views_6h_slot3, p.views_6h_slot4) == (
            0, 1, 2, 3,
        )

    def test_other_counters_untouched(self, db_engine, add_project):
        pid = add_project(views_6h_slot1=9, views_3day=30, views_total=100, clicks=4, saves=2)
        rotate_view_slots(db_engine)

        p = _get(db_engine, pid)
        assert (p.views_3day, p.views_total, p.clicks, p.saves) == (30, 100, 4, 2)

    def test_empty_table_is_noop(self, db_engine):
        assert rotate_view_slots(db_engine) is True

    def test_failure_is_swallowed(self, db_engine, caplog):
        with patch("divzero.services.rotation_service.get_session", side_effect=_db_down):
            assert rotate_view_slots(db_engine) is False
        assert "rotation failed" in caplog.text


# ===========================================================================
# Trending scores + ranks
# ===========================================================================
class TestCalculateTrendingRanks:
    def test_writes_scores_and_top_k_ranks(self, db_engine, add_project):
        a = add_project(saves=10)               # 50
        b = add_project(views_6h_slot1=20)      # 80
        c = add_project(views_3day=3)           # 1.5 → 2
        d = add_project(clicks=1)               # 2

        result = calculate_trending_ranks(db_engine, FeedConfig(trending_top=2))

        assert result == {"scored": 4, "ranked": 2, "failed": 0}
        assert _get(db_engine, b).trending_rank == 1
        assert _get(db_engine, a).trending_rank == 2
        assert _get(db_engine, c).trending_rank is None
        assert _get(db_engine, d).trending_rank is None
        assert _get(db_engine, c).trending_score == 2
        assert _get(db_engine, b).trending_score == 80

    def test_clears_stale_ranks(self, db_engine, add_project):
        was_first = add_project(trending_rank=1, trending_score=500)
        add_project(saves=5)
        add_project(saves=6)

        calculate_trending_ranks(db_engine, FeedConfig(trending_top=2))

        stale = _get(db_engine, was_first)
        assert stale.trending_rank is None
        assert stale.trending_score == 0

    def test_ranks_are_dense(self, db_engine, add_project):
        for i in range(7):
            add_project(clicks=i % 3)
        calculate_trending_ranks(db_engine, FeedConfig(trending_top=5))

        with Session(db_engine) as session:
            ranks = sorted(
                r for r in session.scalars(select(Project.trending_rank)).all() if r is not None
            )
        assert ranks == [1, 2, 3, 4, 5]

    def test_ignores_unapproved(self, db_engine, add_project):
        pending = add_project(status=ProjectStatus.PENDING.value, saves=100)
        add_project(saves=1)

        result = calculate_trending_ranks(db_engine, FeedConfig())

        assert result["scored"] == 1
        assert _get(db_engine, pending).trending_rank is None

    def test_one_failed_write_does_not_stop_the_rest(self, db_engine, add_project):
        keep = add_project(saves=1, trending_rank=7, trending_score=77)
        other = add_project(saves=2)
        real_write = scoring_service.set_trending_fields

        def flaky(session, project_id, score, rank):
            if project_id == keep:
                _db_down()
            return real_write(session, project_id, score, rank)

        with patch.object(scoring_service, "set_trending_fields", side_effect=flaky):
            result = calculate_trending_ranks(db_engine, FeedConfig())

        assert result["failed"] == 1
        kept = _get(db_engine, keep)
        assert (kept.trending_rank, kept.trending_score) == (7, 77)
        assert _get(db_engine, other).trending_rank == 1

    def test_fetch_failure_skips_scoring(self, db_engine, add_project):
        pid = add_project(saves=3, trending_rank=4)
        with patch.object(scoring_service, "fetch_counter_rows", side_effect=_db_down):
            result = calculate_trending_ranks(db_engine, FeedConfig())

        assert result == {"scored": 0, "ranked": 0, "failed": 0}
        assert _get(db_engine, pid).trending_rank == 4


# ===========================================================================
# Snapshot store
# ===========================================================================
class TestSnapshotStore:
    def test_nothing_published_yet(self, db_engine):
        assert get_current_feed(db_engine) is None
        assert get_previous_feed(db_engine) is None
        assert get_last_sync(db_engine) is None

    def test_first_publish_has_no_previous(self, db_engine):
        publish(db_engine, {"promoted": [], "n": 1})
        assert get_current_feed(db_engine) == {"promoted": [], "n": 1}
        assert get_previous_feed(db_engine) is None
        assert get_last_sync(db_engine) is not None

    def test_keeps_exactly_one_generation(self, db_engine):
        publish(db_engine, {"n": 1})
        publish(db_engine, {"n": 2})
        publish(db_engine, {"n": 3})
        assert get_current_feed(db_engine) == {"n": 3}
        assert get_previous_feed(db_engine) == {"n": 2}

    def test_list_order_preserved(self, db_engine):
        doc = {"trending": [{"id": "z"}, {"id": "a"}, {"id": "m"}]}
        publish(db_engine, doc)
        assert get_current_feed(db_engine) == doc


# ===========================================================================
# Full pipeline
# ===========================================================================
class TestRefresh:
    @pytest.fixture
    def cfg(self):
        return FeedConfig(trending_top=3)

    def test_end_to_end(self, db_engine, add_project, cfg):
        promo = add_project(is_promoted=True, promoted_order=1, views_6h_slot1=100)
        hot = add_project(views_6h_slot1=50, category="Design")
        add_project(views_6h_slot1=10, category="Design")
        add_project(category="Games", views_total=5)

        summary = sync_service.refresh(db_engine, cfg)

        assert summary["total_projects"] == 4
        assert summary["rotated"] is True
        assert summary["failed_writes"] == 0

        doc = get_current_feed(db_engine)
        assert [p["id"] for p in doc["promoted"]] == [promo]
        # rotation zeroed slot1 before scoring; slot2 now carries the views
        assert doc["trending"][0]["id"] == hot
        assert doc["trending"][0]["trendingScore"] == 150
        assert doc["totalProjects"] == 4

    def test_rollback_holds_first_document(self, db_engine, add_project, cfg):
        add_project(views_total=3)
        sync_service.refresh(db_engine, cfg)
        first = get_current_feed(db_engine)

        add_project(views_total=8)
        sync_service.refresh(db_engine, cfg)

        assert get_previous_feed(db_engine) == first
        assert get_current_feed(db_engine)["totalProjects"] == 2

    def test_fetch_failure_keeps_published_feed(self, db_engine, add_project, cfg):
        add_project()
        sync_service.refresh(db_engine, cfg)
        before = get_current_feed(db_engine)

        with patch(
            "divzero.services.feed_service.fetch_approved_records", side_effect=_db_down
        ):
            with pytest.raises(OperationalError):
                sync_service.refresh(db_engine, cfg)

        assert get_current_feed(db_engine) == before

    def test_publish_failure_propagates(self, db_engine, add_project, cfg):
        add_project()
        with patch("divzero.services.sync_service.publish", side_effect=_db_down):
            with pytest.raises(OperationalError):
                sync_service.refresh(db_engine, cfg)
        assert get_current_feed(db_engine) is None

    def test_rotation_failure_does_not_abort(self, db_engine, add_project, cfg):
        add_project()
        with patch("divzero.services.rotation_service.get_session", side_effect=_db_down):
            summary = sync_service.refresh(db_engine, cfg)
        assert summary["rotated"] is False
        assert get_current_feed(db_engine) is not None

    def test_build_feed_idempotent_without_rescoring(self, db_engine, add_project, cfg):
        for i in range(6):
            add_project(views_total=i * 10, trending_score=i, category="Games")
        fixed = datetime(2026, 5, 1, tzinfo=UTC)
        assert build_feed(db_engine, cfg, now=fixed) == build_feed(db_engine, cfg, now=fixed)


class TestGetStatus:
    def test_before_first_sync(self, db_engine):
        status = sync_service.get_status(db_engine, FeedConfig())
        assert status["last_sync"] == "Never"
        assert status["stats"] == {}
        assert status["config"]["trending_top"] == 10

    def test_counts_after_sync(self, db_engine, add_project):
        add_project(is_promoted=True)
        add_project(featured=True)
        add_project(views_total=4)
        sync_service.refresh(db_engine, FeedConfig())

        status = sync_service.get_status(db_engine, FeedConfig())
        assert status["last_sync"] != "Never"
        assert status["stats"]["promoted"] == 1
        assert status["stats"]["categories"] == 5
        assert sum(
            status["stats"][k] for k in ("promoted", "trending", "editorsPick", "divisionZero", "allTime")
        ) == 3


# ===========================================================================
# Demo seeder
# ===========================================================================
class TestSeedDemoProjects:
    def test_seed_is_idempotent(self, db_engine):
        assert seed_demo_projects(db_engine) == len(DEMO_PROJECTS)
        assert seed_demo_projects(db_engine) == 0

    def test_seeded_database_syncs(self, db_engine):
        seed_demo_projects(db_engine)
        summary = sync_service.refresh(db_engine, FeedConfig())
        assert summary["total_projects"] == len(DEMO_PROJECTS)

    def test_failed_seed_inserts_nothing(self, db_engine):
        clash = [DEMO_PROJECTS[0], dict(DEMO_PROJECTS[0])]
        with patch("divzero.database.seed.DEMO_PROJECTS", clash):
            with pytest.raises(IntegrityError):
                seed_demo_projects(db_engine)

        with Session(db_engine) as session:
            assert session.scalars(select(Project.id)).all() == []
