"""
divzero.worker.__main__ — Entry point for ``python -m divzero.worker``
=======================================================================

Wiring:
1. Parse command-line flags.
2. Load .env (secrets).
3. Load config.yaml (tuning).
4. Create the SQLAlchemy engine and ensure tables exist.
5. Start the refresh loop and block until Ctrl+C / SIGTERM.

Run with::

    uv run python -m divzero.worker
    uv run python -m divzero.worker --once     # single sync, then exit
    uv run python -m divzero.worker --seed-demo --once   # dev database
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys

from dotenv import load_dotenv

from divzero.config import load_config
from divzero.database.engine import create_db_engine, init_db
from divzero.database.seed import seed_demo_projects
from divzero.services.sync_service import refresh
from divzero.worker.scheduler import SyncScheduler

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("divzero")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="divzero-worker",
        description="Rotate view slots, rank trending projects and publish the feed.",
    )
    parser.add_argument(
        "--once", action="store_true", help="run a single sync and exit",
    )
    parser.add_argument(
        "--seed-demo", action="store_true",
        help="insert demo projects before syncing (dev databases only)",
    )
    return parser.parse_args(argv)


async def _serve(scheduler: SyncScheduler) -> None:
    scheduler.start()
    try:
        await asyncio.Event().wait()
    finally:
        scheduler.stop()


def main(argv: list[str] | None = None) -> None:
    """Bootstrap and run the sync worker."""

    # 1. Flags (unknown ones exit with a usage error).
    args = parse_args(argv)

    # 2. Environment variables (secrets).
    load_dotenv()

    # 3. Tuning.
    cfg = load_config(os.getenv("DIVZERO_CONFIG", "config.yaml"))
    logger.info(
        "Config loaded: top %d trending, %d categories",
        cfg.trending_top, len(cfg.categories),
    )

    # 4. Database.
    engine = create_db_engine()
    init_db(engine)

    if args.seed_demo:
        seed_demo_projects(engine)

    if args.once:
        try:
            summary = refresh(engine, cfg)
        except Exception:
            sys.exit(1)
        logger.info("One-shot sync done: %s", summary)
        return

    # 5. Loop (blocks until Ctrl+C or SIGTERM).
    logger.info("Starting Division Zero sync worker…")
    try:
        asyncio.run(_serve(SyncScheduler(engine, cfg)))
    except KeyboardInterrupt:
        logger.info("Shutting down gracefully…")


if __name__ == "__main__":
    main()
