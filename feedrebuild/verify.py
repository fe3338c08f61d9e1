"""
Consistency checks for a rebuilt recentchanges table.

Each check returns a list of human-readable problems; an empty list
means the table is consistent.
"""

from typing import List

from .config import RebuildConfig
from .database import ChangeSource, ChangeType, FeedEntry
from .passes.link_revisions import find_previous_revision
from .passes.resolve_duplicates import associated_revisions

SOURCE_FOR_TYPE = {
    ChangeType.EDIT: ChangeSource.EDIT,
    ChangeType.NEW: ChangeSource.NEW,
    ChangeType.LOG: ChangeSource.LOG,
}


def check_change_sources(session) -> List[str]:
    """Every entry's change_source must match its change_type."""
    problems = []
    for entry in session.query(FeedEntry).order_by(FeedEntry.id):
        expected = SOURCE_FOR_TYPE.get(entry.change_type)
        if expected != entry.change_source:
            problems.append(
                f"entry {entry.id}: change_type {entry.change_type} "
                f"with change_source {entry.change_source!r}"
            )
    return problems


def check_linkage(session) -> List[str]:
    """Revision entries must point at the revision right before them."""
    problems = []
    entries = (
        session.query(FeedEntry)
        .filter(FeedEntry.change_source.in_([ChangeSource.EDIT, ChangeSource.NEW]))
        .order_by(FeedEntry.subject_id, FeedEntry.timestamp, FeedEntry.current_revision_id)
        .all()
    )
    for entry in entries:
        if entry.subject_id == 0:
            continue
        prior = find_previous_revision(
            session, entry.subject_id, entry.timestamp, entry.current_revision_id
        )
        expected_id = prior.rev_id if prior else 0
        expected_size = prior.size if prior else None

        if entry.previous_revision_id != expected_id:
            problems.append(
                f"entry {entry.id} (rev {entry.current_revision_id}): "
                f"previous revision {entry.previous_revision_id}, expected {expected_id}"
            )
        if entry.old_size != expected_size:
            problems.append(
                f"entry {entry.id} (rev {entry.current_revision_id}): "
                f"old size {entry.old_size}, expected {expected_size}"
            )
        if entry.is_new != (prior is None):
            problems.append(
                f"entry {entry.id} (rev {entry.current_revision_id}): "
                f"is_new={entry.is_new} but prior revision {'missing' if prior is None else 'exists'}"
            )
    return problems


def check_duplicates(session, config: RebuildConfig) -> List[str]:
    """Each associated upload must be represented once, by its log entry."""
    problems = []
    for value, log_id in associated_revisions(session, config):
        try:
            rev_id = int(value)
        except (TypeError, ValueError):
            continue

        log_entries = session.query(FeedEntry).filter(FeedEntry.log_id == log_id).all()
        if not log_entries:
            # Log record outside the lookback window or batch.
            continue

        mismatched = [e.id for e in log_entries if e.current_revision_id != rev_id]
        if mismatched:
            problems.append(f"log {log_id}: entries {mismatched} not linked to revision {rev_id}")

        leftovers = (
            session.query(FeedEntry.id)
            .filter(FeedEntry.current_revision_id == rev_id, FeedEntry.log_id == 0)
            .count()
        )
        if leftovers:
            problems.append(f"log {log_id}: {leftovers} revision entries left for revision {rev_id}")
    return problems


def verify_feed(session, config: RebuildConfig) -> List[str]:
    """Run every check."""
    return (
        check_change_sources(session)
        + check_linkage(session)
        + check_duplicates(session, config)
    )
