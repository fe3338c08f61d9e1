"""
Database schema and connection management.

Maps the wiki tables the rebuild reads from (page, revision, logging,
log_search, user, user_groups) and the recentchanges table it rebuilds.
Uses SQLite with SQLAlchemy.
"""

from pathlib import Path
from sqlalchemy import (
    create_engine,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


class ChangeType:
    """Values stored in FeedEntry.change_type."""

    EDIT = 0
    NEW = 1
    LOG = 3


class ChangeSource:
    """Values stored in FeedEntry.change_source."""

    EDIT = "mw.edit"
    NEW = "mw.new"
    LOG = "mw.log"


class Page(Base):
    """A subject: the stable entity that revisions change."""

    __tablename__ = "page"

    page_id = Column(Integer, primary_key=True)
    namespace = Column(Integer, nullable=False, default=0)
    title = Column(String, nullable=False)

    __table_args__ = (Index("name_title", "namespace", "title", unique=True),)


class Revision(Base):
    """One historical version of a page."""

    __tablename__ = "revision"

    rev_id = Column(Integer, primary_key=True)
    page_id = Column(Integer, ForeignKey("page.page_id"), nullable=False)
    timestamp = Column(DateTime, nullable=False)
    user_id = Column(Integer, nullable=False, default=0)
    user_text = Column(String, nullable=False)
    comment = Column(Text, nullable=False, default="")
    is_minor = Column(Boolean, nullable=False, default=False)
    is_new = Column(Boolean, nullable=False, default=False)  # first revision of its page
    size = Column(Integer, nullable=True)  # bytes
    deleted = Column(Integer, nullable=False, default=0)  # visibility bits

    __table_args__ = (Index("page_timestamp", "page_id", "timestamp"),)


class User(Base):
    __tablename__ = "user"

    user_id = Column(Integer, primary_key=True)
    user_name = Column(String, nullable=False, unique=True)


class UserGroup(Base):
    __tablename__ = "user_groups"

    user_id = Column(Integer, ForeignKey("user.user_id"), primary_key=True)
    group = Column(String, primary_key=True)


class LogRecord(Base):
    """An administrative or automated action from the logging table."""

    __tablename__ = "logging"

    log_id = Column(Integer, primary_key=True)
    log_type = Column(String, nullable=False)
    log_action = Column(String, nullable=False)
    timestamp = Column(DateTime, nullable=False)
    user_id = Column(Integer, nullable=False, default=0)
    user_text = Column(String, nullable=False)
    namespace = Column(Integer, nullable=False, default=0)
    title = Column(String, nullable=False)
    comment = Column(Text, nullable=False, default="")
    params = Column(Text, nullable=False, default="")
    deleted = Column(Integer, nullable=False, default=0)


class LogSearch(Base):
    """Key-value associations attached to a log record."""

    __tablename__ = "log_search"

    field = Column(String, primary_key=True)  # e.g. associated_rev_id
    value = Column(String, primary_key=True)
    log_id = Column(Integer, ForeignKey("logging.log_id"), primary_key=True)


class FeedEntry(Base):
    """Recent changes row: one user-visible change event."""

    __tablename__ = "recentchanges"

    id = Column(Integer, primary_key=True, autoincrement=True)
    timestamp = Column(DateTime, nullable=False)
    actor_id = Column(Integer, nullable=False, default=0)
    actor_name = Column(String, nullable=False)
    namespace = Column(Integer, nullable=False, default=0)
    title = Column(String, nullable=False)
    comment = Column(Text, nullable=False, default="")
    is_minor = Column(Boolean, nullable=False, default=False)
    is_bot = Column(Boolean, nullable=False, default=False)
    is_patrolled = Column(Boolean, nullable=False, default=False)
    is_new = Column(Boolean, nullable=False, default=False)
    change_type = Column(Integer, nullable=False, default=ChangeType.EDIT)
    change_source = Column(String, nullable=False, default=ChangeSource.EDIT)
    subject_id = Column(Integer, nullable=False, default=0)  # page_id, 0 if none
    current_revision_id = Column(Integer, nullable=False, default=0)
    previous_revision_id = Column(Integer, nullable=False, default=0)
    old_size = Column(Integer, nullable=True)
    new_size = Column(Integer, nullable=True)
    log_id = Column(Integer, nullable=False, default=0)
    log_type = Column(String, nullable=True)
    log_action = Column(String, nullable=True)
    log_params = Column(Text, nullable=True)
    visibility_mask = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        Index("rc_cur_id_timestamp", "subject_id", "timestamp"),
        Index("rc_this_oldid", "current_revision_id"),
        Index("rc_actor_name", "actor_name"),
    )


def init_database(db_path: Path) -> None:
    """
    Initialize database and create tables.

    Args:
        db_path: Path to SQLite database file
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(engine)


def get_session(db_path: Path):
    """
    Get database session.

    Args:
        db_path: Path to SQLite database file

    Returns:
        SQLAlchemy session
    """
    engine = create_engine(f"sqlite:///{db_path}")
    Session = sessionmaker(bind=engine)
    return Session()
