"""
divzero.api.main — FastAPI application entry point
=====================================================

Run with::

    uvicorn divzero.api.main:app --port 8000
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

load_dotenv()

from divzero.api.deps import get_engine  # noqa: E402
from divzero.api.routes.feed import router as feed_router  # noqa: E402
from divzero.api.routes.sync import router as sync_router  # noqa: E402

logger = logging.getLogger(__name__)


def _cors_origins() -> list[str]:
    """Allowed CORS origins: ``CORS_ALLOW_ORIGINS`` (comma-separated) or ``*``.

    The feed is public and read by the static site from any host.
    """
    raw = os.getenv("CORS_ALLOW_ORIGINS", "").strip()
    if raw:
        return [origin.strip().rstrip("/") for origin in raw.split(",") if origin.strip()]
    return ["*"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle — warm the DB engine."""
    engine = get_engine()
    logger.info("Division Zero feed API started — engine ready (%s)", engine.url.database)
    yield
    logger.info("Division Zero feed API shutting down")


app = FastAPI(
    title="Division Zero Feed API",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)

app.include_router(feed_router, prefix="/api")
app.include_router(sync_router, prefix="/api")


@app.get("/api/health")
def health():
    return {"status": "ok"}
