"""
Pass 1: seed feed entries from page revisions.

Responsibilities:
- Wipe the recentchanges table.
- Insert one entry per revision inside the lookback window, newest first,
  up to the batch limit.

Non-Responsibilities:
- No previous-revision linkage or sizes (pass 2).
- No bot flags (pass 4).

Invariant:
The table is truncated exactly once, before the insert.
"""

from datetime import datetime, timedelta

from sqlalchemy import case, delete, false, insert, literal, select

from ..config import RebuildConfig
from ..database import ChangeSource, ChangeType, FeedEntry, Page, Revision

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
    "subject_id",
    "current_revision_id",
    "previous_revision_id",
    "log_id",
    "change_type",
    "change_source",
    "visibility_mask",
]


def cutoff_for(config: RebuildConfig, now: datetime) -> datetime:
    """Oldest timestamp (exclusive) eligible for seeding."""
    return now - timedelta(seconds=config.max_age)


def describe_max_age(config: RebuildConfig) -> str:
    days = config.max_age_days
    if int(days) == days:
        return f"max_age={config.max_age} ({int(days)} days)"
    return f"max_age={config.max_age} (approx. {int(days)} days)"


def revision_select(config: RebuildConfig, now: datetime):
    """SELECT producing one feed row per recent revision."""
    return (
        select(
            Revision.timestamp,
            Revision.user_id,
            Revision.user_text,
            Page.namespace,
            Page.title,
            Revision.comment,
            Revision.is_minor,
            false(),
            false(),
            Revision.is_new,
            Page.page_id,
            Revision.rev_id,
            literal(0),
            literal(0),
            case((Revision.is_new, ChangeType.NEW), else_=ChangeType.EDIT),
            case((Revision.is_new, ChangeSource.NEW), else_=ChangeSource.EDIT),
            Revision.deleted,
        )
        .join(Page, Page.page_id == Revision.page_id)
        .where(Revision.timestamp > cutoff_for(config, now))
        .order_by(Revision.timestamp.desc(), Revision.rev_id.desc())
        .limit(config.batch_limit)
    )


def seed_revisions(session, config: RebuildConfig, now: datetime, logger) -> int:
    """
    Truncate recentchanges and load it from the revision table.

    Returns:
        Number of entries inserted
    """
    session.execute(delete(FeedEntry))

    logger.info("Loading from page and revision tables...")
    logger.info(describe_max_age(config))

    stmt = insert(FeedEntry.__table__).from_select(COLUMNS, revision_select(config, now))
    result = session.execute(stmt)
    return result.rowcount
