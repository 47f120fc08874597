"""
divzero.api.routes.feed — Read-only feed endpoints
=====================================================

The website fetches ``/projects`` once per page load; the document is
served verbatim from the snapshot store.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import Engine

from divzero.api.deps import get_config, get_engine
from divzero.config import FeedConfig
from divzero.services import sync_service

router = APIRouter(tags=["feed"])


# ---------------------------------------------------------------------------
# GET /projects
# ---------------------------------------------------------------------------
@router.get("/projects")
@router.get("/")
def current_feed(engine: Engine = Depends(get_engine)):
    """The live feed document with every carousel."""
    document = sync_service.get_current_feed(engine)
    if document is None:
        return JSONResponse(
            {"error": "No data yet. Run /sync first."}, status_code=404
        )
    return document


# ---------------------------------------------------------------------------
# GET /previous
# ---------------------------------------------------------------------------
@router.get("/previous")
def previous_feed(engine: Engine = Depends(get_engine)):
    """The rollback copy of the feed."""
    document = sync_service.get_previous_feed(engine)
    if document is None:
        return JSONResponse({"error": "No backup available"}, status_code=404)
    return document


# ---------------------------------------------------------------------------
# GET /status
# ---------------------------------------------------------------------------
@router.get("/status")
def status(
    engine: Engine = Depends(get_engine),
    cfg: FeedConfig = Depends(get_config),
):
    """Last sync time and per-carousel counts."""
    return sync_service.get_status(engine, cfg)
