"""
Full Rebuild Pipeline.

Responsibilities:
- Recompute the recentchanges table from revisions and logs.
- Run the passes in their fixed order, committing after each one.
- Purge cached feed timestamps once the table is rebuilt.

Non-Responsibilities:
- No incremental updates; every run starts from an empty table.
- No retries. A failed run is re-run from the start.

Invariant:
A full rebuild is reproducible: the same source tables, config and `now`
give the same table.
"""

import time
from datetime import datetime
from typing import Dict, Optional

from sqlalchemy.exc import SQLAlchemyError

from .cache import cache_for_config, purge_feeds
from .config import RebuildConfig
from .logger import get_logger
from .passes import PASSES


def run_pass(session, name: str, func, config: RebuildConfig, now: datetime, logger) -> int:
    """Run one pass in its own transaction."""
    started = time.monotonic()
    try:
        rows = func(session, config, now, logger)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.record_pass_failure(name)
        logger.error(f"Pass {name} failed", error=str(e))
        raise

    logger.record_rows(name, rows)
    logger.record_pass_success(name, time.monotonic() - started)
    logger.debug(f"Pass {name} committed", rows=rows)
    return rows


def rebuild_feed(
    session,
    config: RebuildConfig,
    cache=None,
    now: Optional[datetime] = None,
    logger=None,
) -> Dict[str, int]:
    """
    Rebuild recentchanges and purge feed caches.

    Args:
        session: SQLAlchemy session on the wiki database
        config: Run configuration
        cache: Feed cache exposing delete(key); chosen from config if None
        now: Reference time for the lookback window (default: now)
        logger: StructuredLogger (default: global logger)

    Returns:
        Rows affected per pass name
    """
    logger = logger or get_logger()
    now = now or datetime.now()
    cache = cache if cache is not None else cache_for_config(config)

    results = {}
    for name, func in PASSES:
        results[name] = run_pass(session, name, func, config, now, logger)

    purge_feeds(cache, config, logger)
    logger.info("Done.")
    return results
