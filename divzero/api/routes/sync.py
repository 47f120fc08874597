"""
divzero.api.routes.sync — Manual sync trigger
================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import Engine

from divzero.api.deps import check_sync_key, get_config, get_engine
from divzero.config import FeedConfig
from divzero.database.engine import run_db
from divzero.services import sync_service

router = APIRouter(tags=["sync"], dependencies=[Depends(check_sync_key)])


@router.api_route("/sync", methods=["GET", "POST"])
async def trigger_sync(
    engine: Engine = Depends(get_engine),
    cfg: FeedConfig = Depends(get_config),
):
    """Run the full pipeline now and report the summary."""
    try:
        summary = await run_db(sync_service.refresh, engine, cfg)
    except Exception as exc:
        return JSONResponse(
            {"success": False, "error": str(exc)}, status_code=500
        )
    return {"success": True, "message": "Sync complete!", **summary}
