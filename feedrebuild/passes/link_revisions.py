"""
Pass 2: link revision entries to the revision before them.

Responsibilities:
- Fill previous_revision_id, old_size and new_size for every
  revision-derived entry.
- Mark an entry new only when its page has no earlier revision.

Non-Responsibilities:
- Log-derived entries are left alone.

Invariant:
Entries are visited once, ordered by (subject_id, timestamp, revision id).
The revision before an entry is carried forward from the previous entry of
the same subject; the revision table is only consulted on a subject change.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Iterable, Iterator, NamedTuple, Optional, Tuple

from sqlalchemy import and_, bindparam, or_, update

from ..database import ChangeSource, ChangeType, FeedEntry, Revision


class LinkState(NamedTuple):
    """Carried between entries: the subject being walked and its last revision."""

    subject_id: int
    previous_revision_id: int
    previous_size: Optional[int]


EMPTY_STATE = LinkState(0, 0, None)


class EntryKey(NamedTuple):
    id: int
    subject_id: int
    current_revision_id: int
    timestamp: datetime


@dataclass
class LinkUpdate:
    entry_id: int
    previous_revision_id: int
    old_size: Optional[int]
    new_size: Optional[int]
    is_new: bool

    @property
    def change_type(self) -> int:
        return ChangeType.NEW if self.is_new else ChangeType.EDIT

    @property
    def change_source(self) -> str:
        return ChangeSource.NEW if self.is_new else ChangeSource.EDIT


PriorLookup = Callable[[int, datetime, int], Optional[Tuple[int, Optional[int]]]]
SizeLookup = Callable[[int], Optional[int]]


def link_step(
    state: LinkState,
    entry: EntryKey,
    previous_revision: PriorLookup,
    revision_size: SizeLookup,
) -> Tuple[LinkState, Optional[LinkUpdate]]:
    """
    Advance the fold by one entry.

    Returns the next state and the update for `entry`, or None when the
    entry has no subject and must be skipped.
    """
    is_new = False
    if entry.subject_id != state.subject_id:
        prior = previous_revision(entry.subject_id, entry.timestamp, entry.current_revision_id)
        if prior is not None:
            state = LinkState(entry.subject_id, prior[0], prior[1])
        else:
            state = LinkState(entry.subject_id, 0, None)
            is_new = True

    if state.subject_id == 0:
        return state, None

    size = revision_size(entry.current_revision_id)
    link = LinkUpdate(
        entry_id=entry.id,
        previous_revision_id=state.previous_revision_id,
        old_size=state.previous_size,
        new_size=size,
        is_new=is_new,
    )
    return LinkState(state.subject_id, entry.current_revision_id, size), link


def plan_linkage(
    entries: Iterable[EntryKey],
    previous_revision: PriorLookup,
    revision_size: SizeLookup,
    on_skip: Optional[Callable[[EntryKey], None]] = None,
) -> Iterator[LinkUpdate]:
    """Fold over entries sorted by (subject_id, timestamp, revision id)."""
    state = EMPTY_STATE
    for entry in entries:
        state, link = link_step(state, entry, previous_revision, revision_size)
        if link is None:
            if on_skip:
                on_skip(entry)
            continue
        yield link


def find_previous_revision(session, subject_id: int, timestamp: datetime, revision_id: int):
    """
    The revision of `subject_id` right before (timestamp, revision_id).

    Same-timestamp revisions order by id, matching the entry scan.
    Returns a (rev_id, size) row or None.
    """
    return (
        session.query(Revision.rev_id, Revision.size)
        .filter(Revision.page_id == subject_id)
        .filter(
            or_(
                Revision.timestamp < timestamp,
                and_(Revision.timestamp == timestamp, Revision.rev_id < revision_id),
            )
        )
        .order_by(Revision.timestamp.desc(), Revision.rev_id.desc())
        .first()
    )


def _previous_revision_lookup(session) -> PriorLookup:
    def lookup(subject_id, timestamp, revision_id):
        row = find_previous_revision(session, subject_id, timestamp, revision_id)
        if row is None:
            return None
        return row.rev_id, row.size

    return lookup


def _revision_size_lookup(session) -> SizeLookup:
    def lookup(revision_id):
        return session.query(Revision.size).filter(Revision.rev_id == revision_id).scalar()

    return lookup


def link_revisions(session, config, now, logger) -> int:
    """
    Fill in previous-revision links and size differences.

    Returns:
        Number of entries updated
    """
    logger.info("Updating links and size differences...")

    rows = (
        session.query(
            FeedEntry.id,
            FeedEntry.subject_id,
            FeedEntry.current_revision_id,
            FeedEntry.timestamp,
        )
        .filter(FeedEntry.change_source.in_([ChangeSource.EDIT, ChangeSource.NEW]))
        .order_by(FeedEntry.subject_id, FeedEntry.timestamp, FeedEntry.current_revision_id)
        .all()
    )
    entries = [EntryKey(*row) for row in rows]

    def skip(entry):
        logger.warning(
            "Uhhh, something wrong? No subject id",
            entry_id=entry.id,
            revision_id=entry.current_revision_id,
        )
        logger.record_anomaly("missing_subject_id")

    links = list(
        plan_linkage(
            entries,
            _previous_revision_lookup(session),
            _revision_size_lookup(session),
            on_skip=skip,
        )
    )
    if not links:
        return 0

    table = FeedEntry.__table__
    stmt = (
        update(table)
        .where(table.c.id == bindparam("b_id"))
        .values(
            previous_revision_id=bindparam("b_previous_revision_id"),
            old_size=bindparam("b_old_size"),
            new_size=bindparam("b_new_size"),
            is_new=bindparam("b_is_new"),
            change_type=bindparam("b_change_type"),
            change_source=bindparam("b_change_source"),
        )
    )
    session.execute(
        stmt,
        [
            {
                "b_id": link.entry_id,
                "b_previous_revision_id": link.previous_revision_id,
                "b_old_size": link.old_size,
                "b_new_size": link.new_size,
                "b_is_new": link.is_new,
                "b_change_type": link.change_type,
                "b_change_source": link.change_source,
            }
            for link in links
        ],
    )
    return len(links)
