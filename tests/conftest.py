"""
tests/conftest.py — Shared Test Fixtures
=========================================
"""

from __future__ import annotations

import itertools
import json
from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from divzero.database.models import Base, Project, ProjectStatus

APPROVED_AT_BASE = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def db_engine() -> Engine:
    """Create an in-memory SQLite engine with all tables.

    Uses StaticPool so all threads share the same in-memory database
    (required by ``asyncio.to_thread`` used by ``run_db``).
    """
    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def db_session(db_engine: Engine):
    """Provide a session that rolls back after each test."""
    with Session(db_engine) as session:
        yield session
        session.rollback()


@pytest.fixture
def add_project(db_engine: Engine):
    """Factory: insert an approved project and return its id.

    Ids are zero-padded (``p-001``…) so fetch order equals insert order.
    """
    counter = itertools.count(1)

    def _add(**fields) -> str:
        n = next(counter)
        fields.setdefault("id", f"p-{n:03d}")
        fields.setdefault("slug", f"project-{n}")
        fields.setdefault("name", f"Project {n}")
        fields.setdefault("status", ProjectStatus.APPROVED.value)
        fields.setdefault("category", "Productivity")
        fields.setdefault("approved_at", APPROVED_AT_BASE + timedelta(hours=n))
        for key in ("tools", "tags"):
            if isinstance(fields.get(key), list):
                fields[key] = json.dumps(fields[key])
        with Session(db_engine) as session:
            session.add(Project(**fields))
            session.commit()
        return fields["id"]

    return _add


@pytest.fixture
def client(db_engine):
    """FastAPI TestClient wired to the in-memory database."""
    from fastapi.testclient import TestClient

    from divzero.api.deps import get_config, get_engine
    from divzero.api.main import app
    from divzero.config import FeedConfig

    app.dependency_overrides[get_engine] = lambda: db_engine
    app.dependency_overrides[get_config] = lambda: FeedConfig()
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()
