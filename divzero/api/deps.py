"""
divzero.api.deps — FastAPI dependency injection
=================================================
"""

from __future__ import annotations

import os
import secrets
from functools import lru_cache
from typing import Annotated

from fastapi import HTTPException, Query, status
from sqlalchemy import Engine

from divzero.config import FeedConfig, load_config
from divzero.database.engine import create_db_engine


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    return create_db_engine()


@lru_cache(maxsize=1)
def get_config() -> FeedConfig:
    return load_config(os.getenv("DIVZERO_CONFIG", "config.yaml"))


def check_sync_key(key: Annotated[str | None, Query()] = None) -> None:
    """Gate the manual sync trigger behind ``SYNC_SECRET`` when it is set."""
    expected = os.getenv("SYNC_SECRET", "")
    if not expected:
        return
    if key is None or not secrets.compare_digest(key.encode(), expected.encode()):
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Unauthorized")
