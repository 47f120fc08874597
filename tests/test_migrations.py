"""
tests/test_migrations.py — Alembic Migration Tests
====================================================

Runs the migration chain against a throwaway SQLite file and checks the
resulting schema matches the ORM models the services rely on.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

from divzero.database.models import Base

ROOT = Path(__file__).resolve().parents[1]


@pytest.fixture
def alembic_cfg(tmp_path, monkeypatch):
    url = f"sqlite:///{tmp_path / 'migrations.db'}"
    monkeypatch.setenv("DATABASE_URL", url)
    cfg = Config(str(ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(ROOT / "alembic"))
    cfg.attributes["configure_logger"] = False
    return cfg, url


def test_upgrade_creates_model_tables(alembic_cfg):
    cfg, url = alembic_cfg
    command.upgrade(cfg, "head")

    inspector = inspect(create_engine(url))
    assert {"projects", "feed_snapshots"} <= set(inspector.get_table_names())
    for table in Base.metadata.sorted_tables:
        migrated = {c["name"] for c in inspector.get_columns(table.name)}
        assert migrated == set(table.columns.keys()), table.name

    index_names = {i["name"] for i in inspector.get_indexes("projects")}
    assert {"ix_projects_status", "ix_projects_category"} <= index_names


def test_downgrade_drops_tables(alembic_cfg):
    cfg, url = alembic_cfg
    command.upgrade(cfg, "head")
    command.downgrade(cfg, "base")

    tables = set(inspect(create_engine(url)).get_table_names())
    assert not tables & {"projects", "feed_snapshots"}
