"""
divzero — Division Zero Feed Sync Engine
==========================================
Periodic ranking and feed assembly for the Division Zero project showcase.
Rotates rolling view counters, scores every approved project, builds the
deduplicated carousel feed the website renders, and publishes it with a
one-generation rollback copy.

Package layout::

    divzero/
    ├── config.py          # YAML → typed FeedConfig
    ├── constants.py       # Scoring weights, snapshot keys, helpers
    ├── database/
    │   ├── engine.py      # SQLAlchemy engine + async helper
    │   ├── models.py      # Project + FeedSnapshot ORM models
    │   └── seed.py        # Demo project seeder (dev only)
    ├── engine/
    │   ├── scoring.py     # Pure trending score + rank assignment
    │   └── feed.py        # Pure carousel assembly + dedup
    ├── services/
    │   ├── project_store.py     # Reads/writes against the projects table
    │   ├── rotation_service.py  # View-slot rotation
    │   ├── scoring_service.py   # Score + rank write-back
    │   ├── feed_service.py      # Fetch + assemble
    │   ├── snapshot_service.py  # current/previous feed documents
    │   └── sync_service.py      # Full pipeline + read API
    ├── worker/
    │   └── __main__.py    # Timer-driven refresh loop
    └── api/
        ├── main.py        # FastAPI app
        └── routes/        # Feed + sync endpoints
"""

__version__ = "0.1.0"
