"""
divzero.database.engine — Database Connection & Async Helper
=============================================================

The sync pipeline is plain synchronous SQLAlchemy.  The HTTP layer and the
timer loop both live on an ``asyncio`` event loop, so they hand pipeline
work to a thread with :func:`run_db` instead of blocking the loop:

    1. The timer fires (or ``/sync`` is requested).
    2. The caller does ``await run_db(refresh, engine, cfg)``.
    3. ``run_db`` ships the synchronous function to the default thread pool
       via ``asyncio.to_thread()``.
    4. The result is awaited back on the loop.

Usage::

    from divzero.database.engine import create_db_engine, init_db, run_db

    engine = create_db_engine()          # reads DATABASE_URL from .env
    init_db(engine)                      # CREATE TABLE IF NOT EXISTS …

    summary = await run_db(refresh, engine, cfg)
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Callable
from contextlib import contextmanager
from typing import ParamSpec, TypeVar

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session

from divzero.database.models import Base

logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")


# ---------------------------------------------------------------------------
# Engine creation
# ---------------------------------------------------------------------------
def create_db_engine() -> Engine:
    """Build a SQLAlchemy :class:`Engine` from the ``DATABASE_URL`` env var.

    The pool is small: one sync run at a time plus a handful of feed reads.

    Raises
    ------
    RuntimeError
        If ``DATABASE_URL`` is not set.
    """
    url = os.getenv("DATABASE_URL")
    if not url:
        raise RuntimeError(
            "DATABASE_URL is not set.  "
            "Copy .env.example → .env and set a valid PostgreSQL URL."
        )

    engine = create_engine(
        url,
        echo=False,
        pool_size=5,
        max_overflow=5,
        pool_pre_ping=True,   # Reconnect stale connections automatically
        pool_timeout=10,
        pool_recycle=3600,
    )
    logger.info("Database engine created → %s", engine.url.host)
    return engine


# ---------------------------------------------------------------------------
# Schema initialization
# ---------------------------------------------------------------------------
def init_db(engine: Engine) -> None:
    """Create all tables defined in :mod:`divzero.database.models`.

    Safe to call on every startup.  In production the ``projects`` table is
    owned by the moderation workflow and ``feed_snapshots`` by Alembic;
    ``create_all`` only fills the gaps for dev/test databases.
    """
    Base.metadata.create_all(engine)
    logger.info("Database tables verified / created.")


# ---------------------------------------------------------------------------
# Session helper
# ---------------------------------------------------------------------------
@contextmanager
def get_session(engine: Engine):
    """Yield a :class:`Session` that auto-commits on success and rolls back
    on exception.

    Usage::

        with get_session(engine) as session:
            session.add(Project(slug="taskflow", name="TaskFlow"))
    """
    session = Session(engine)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


# ---------------------------------------------------------------------------
# Async bridge
# ---------------------------------------------------------------------------
async def run_db(func: Callable[P, T], *args: P.args, **kwargs: P.kwargs) -> T:
    """Run a **synchronous** database function on a background thread.

    Thin wrapper over :func:`asyncio.to_thread` so the event loop serving
    HTTP requests (or the refresh timer) is never blocked by the pipeline.
    """
    return await asyncio.to_thread(func, *args, **kwargs)
