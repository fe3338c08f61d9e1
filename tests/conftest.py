"""
Pytest configuration and shared fixtures.
"""

import os
import pytest
from datetime import datetime, timedelta
from typing import List, Optional

from feedrebuild.config import RebuildConfig
from feedrebuild.database import (
    LogRecord,
    LogSearch,
    Page,
    Revision,
    User,
    UserGroup,
    init_database,
    get_session,
)
from feedrebuild.logger import StructuredLogger, reset_logger

NOW = datetime(2026, 10, 1, 12, 0, 0)


def days_ago(days: float) -> datetime:
    return NOW - timedelta(days=days)


class WikiBuilder:
    """Writes source rows (pages, revisions, logs, users) for a test."""

    def __init__(self, session):
        self.session = session
        self._next_rev_id = 100
        self._next_log_id = 500
        self._next_user_id = 1

    def page(self, title: str, namespace: int = 0) -> int:
        page = Page(namespace=namespace, title=title)
        self.session.add(page)
        self.session.commit()
        return page.page_id

    def revision(
        self,
        page_id: int,
        timestamp: datetime,
        size: Optional[int] = 100,
        user: str = "Alice",
        user_id: int = 1,
        is_new: Optional[bool] = None,
        is_minor: bool = False,
        deleted: int = 0,
        rev_id: Optional[int] = None,
    ) -> int:
        if is_new is None:
            is_new = self.session.query(Revision).filter_by(page_id=page_id).count() == 0
        if rev_id is None:
            rev_id = self._next_rev_id
            self._next_rev_id += 1
        self.session.add(Revision(
            rev_id=rev_id,
            page_id=page_id,
            timestamp=timestamp,
            user_id=user_id,
            user_text=user,
            comment=f"edit {rev_id}",
            is_minor=is_minor,
            is_new=is_new,
            size=size,
            deleted=deleted,
        ))
        self.session.commit()
        return rev_id

    def log(
        self,
        log_type: str,
        action: str,
        timestamp: datetime,
        title: str,
        namespace: int = 0,
        user: str = "Alice",
        user_id: int = 1,
        params: str = "",
        deleted: int = 0,
    ) -> int:
        log_id = self._next_log_id
        self._next_log_id += 1
        self.session.add(LogRecord(
            log_id=log_id,
            log_type=log_type,
            log_action=action,
            timestamp=timestamp,
            user_id=user_id,
            user_text=user,
            namespace=namespace,
            title=title,
            comment=f"{log_type}/{action}",
            params=params,
            deleted=deleted,
        ))
        self.session.commit()
        return log_id

    def associate(self, log_id: int, rev_id, field: str = "associated_rev_id") -> None:
        self.session.add(LogSearch(field=field, value=str(rev_id), log_id=log_id))
        self.session.commit()

    def user(self, name: str, groups: List[str] = ()) -> int:
        user_id = self._next_user_id
        self._next_user_id += 1
        self.session.add(User(user_id=user_id, user_name=name))
        for group in groups:
            self.session.add(UserGroup(user_id=user_id, group=group))
        self.session.commit()
        return user_id


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """No FEEDREBUILD_* variables and no .env in the working directory."""
    for key in list(os.environ):
        if key.startswith("FEEDREBUILD_") or key == "REDIS_URL":
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    yield monkeypatch
    # load_dotenv writes straight to os.environ
    for key in list(os.environ):
        if key.startswith("FEEDREBUILD_"):
            del os.environ[key]


@pytest.fixture(autouse=True)
def _fresh_global_logger():
    reset_logger()
    yield
    reset_logger()


@pytest.fixture
def db_path(tmp_path):
    path = tmp_path / "wiki.db"
    init_database(path)
    return path


@pytest.fixture
def db_session(db_path):
    """Session on an empty wiki database."""
    session = get_session(db_path)
    yield session
    session.close()


@pytest.fixture
def wiki(db_session) -> WikiBuilder:
    return WikiBuilder(db_session)


@pytest.fixture
def config() -> RebuildConfig:
    return RebuildConfig()


@pytest.fixture
def quiet_logger() -> StructuredLogger:
    """Logger that records metrics without writing anywhere."""
    return StructuredLogger(
        name="feedrebuild.test",
        level="DEBUG",
        enable_file=False,
        enable_console=False,
    )
