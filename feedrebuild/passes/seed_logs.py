"""
Pass 3: seed feed entries from the action log.

Responsibilities:
- Insert one entry per log record inside the lookback window whose type
  is shown in the feed, newest first, up to the batch limit.

Non-Responsibilities:
- Does not touch revision-derived entries.

Invariant:
Log entries never carry revision linkage: current and previous revision
ids are 0 until pass 5 assigns an associated revision.
"""

from datetime import datetime

from sqlalchemy import and_, false, func, insert, literal, select, true

from ..config import RebuildConfig
from ..database import ChangeSource, ChangeType, FeedEntry, LogRecord, Page
from .seed_revisions import cutoff_for

COLUMNS = [
    "timestamp",
    "actor_id",
    "actor_name",
    "namespace",
    "title",
    "comment",
    "is_minor",
    "is_bot",
    "is_patrolled",
    "is_new",
    "current_revision_id",
    "previous_revision_id",
    "change_type",
    "change_source",
    "subject_id",
    "log_type",
    "log_action",
    "log_id",
    "log_params",
    "visibility_mask",
]


def log_select(config: RebuildConfig, now: datetime, log_types):
    """SELECT producing one feed row per recent log record of `log_types`."""
    return (
        select(
            LogRecord.timestamp,
            LogRecord.user_id,
            LogRecord.user_text,
            LogRecord.namespace,
            LogRecord.title,
            LogRecord.comment,
            false(),
            false(),
            true(),
            false(),
            literal(0),
            literal(0),
            literal(ChangeType.LOG),
            literal(ChangeSource.LOG),
            # No page row (deleted or never existed): subject 0.
            func.coalesce(Page.page_id, 0),
            LogRecord.log_type,
            LogRecord.log_action,
            LogRecord.log_id,
            LogRecord.params,
            LogRecord.deleted,
        )
        .select_from(LogRecord)
        .outerjoin(
            Page,
            and_(Page.namespace == LogRecord.namespace, Page.title == LogRecord.title),
        )
        .where(LogRecord.timestamp > cutoff_for(config, now))
        .where(LogRecord.log_type.in_(log_types))
        .order_by(LogRecord.timestamp.desc(), LogRecord.log_id.desc())
        .limit(config.batch_limit)
    )


def seed_logs(session, config: RebuildConfig, now: datetime, logger) -> int:
    """
    Load log-derived entries into recentchanges.

    Returns:
        Number of entries inserted
    """
    logger.info("Loading from user, page, and logging tables...")

    log_types = config.seedable_log_types
    if not log_types:
        logger.info("No log types eligible for the feed, skipping")
        return 0

    stmt = insert(FeedEntry.__table__).from_select(COLUMNS, log_select(config, now, log_types))
    result = session.execute(stmt)
    return result.rowcount
