"""
Pass 5: remove entries that double-count one action.

An upload writes both a revision (the file description page) and a log
record. Both were seeded by passes 1 and 3; the log record names the
revision through its associated_rev_id search field.

Responsibilities:
- Give the log-derived entry the associated revision id.
- Delete the revision-derived entry for that revision.

Invariant:
Afterwards exactly one entry represents the action: the log-derived one,
carrying the revision id.
"""

from typing import List, Tuple

from ..config import RebuildConfig
from ..database import FeedEntry, LogRecord, LogSearch


def associated_revisions(session, config: RebuildConfig) -> List[Tuple[str, int]]:
    """(revision id as stored, log id) pairs for logs of the duplicated type."""
    return (
        session.query(LogSearch.value, LogSearch.log_id)
        .join(LogRecord, LogRecord.log_id == LogSearch.log_id)
        .filter(LogSearch.field == config.associated_rev_field)
        .filter(LogRecord.log_type == config.duplicate_log_type)
        .order_by(LogSearch.log_id)
        .all()
    )


def resolve_duplicates(session, config: RebuildConfig, now, logger) -> int:
    """
    Merge revision/log entry pairs for the same upload.

    Returns:
        Number of revision-derived entries deleted
    """
    logger.info("Removing duplicate revision and logging entries...")

    deleted = 0
    for value, log_id in associated_revisions(session, config):
        try:
            rev_id = int(value)
        except (TypeError, ValueError):
            logger.warning("Ignoring malformed associated revision", log_id=log_id, value=value)
            logger.record_anomaly("malformed_associated_rev_id")
            continue

        session.query(FeedEntry).filter(FeedEntry.log_id == log_id).update(
            {FeedEntry.current_revision_id: rev_id}, synchronize_session=False
        )
        deleted += (
            session.query(FeedEntry)
            .filter(FeedEntry.current_revision_id == rev_id, FeedEntry.log_id == 0)
            .delete(synchronize_session=False)
        )
    return deleted
