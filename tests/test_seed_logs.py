"""
Tests for pass 3 - seeding entries from the action log.
"""

from conftest import NOW, days_ago
from feedrebuild.config import RebuildConfig
from feedrebuild.database import ChangeSource, ChangeType, FeedEntry
from feedrebuild.passes.seed_logs import seed_logs


def seed(session, config, logger):
    inserted = seed_logs(session, config, NOW, logger)
    session.commit()
    return inserted


class TestSeedLogs:
    """Test loading recentchanges from the logging table."""

    def test_field_mapping(self, db_session, wiki, config, quiet_logger):
        page = wiki.page("Vandalised", namespace=0)
        log_id = wiki.log(
            "protect",
            "protect",
            days_ago(1),
            title="Vandalised",
            user="Admin",
            user_id=3,
            params='{"expiry": "infinite"}',
            deleted=1,
        )

        assert seed(db_session, config, quiet_logger) == 1

        entry = db_session.query(FeedEntry).one()
        assert entry.log_id == log_id
        assert entry.log_type == "protect"
        assert entry.log_action == "protect"
        assert entry.log_params == '{"expiry": "infinite"}'
        assert entry.subject_id == page
        assert entry.actor_id == 3
        assert entry.actor_name == "Admin"
        assert entry.change_type == ChangeType.LOG
        assert entry.change_source == ChangeSource.LOG
        assert entry.is_patrolled is True
        assert entry.is_minor is False
        assert entry.is_bot is False
        assert entry.is_new is False
        assert entry.current_revision_id == 0
        assert entry.previous_revision_id == 0
        assert entry.visibility_mask == 1

    def test_missing_page_gets_subject_zero(self, db_session, wiki, config, quiet_logger):
        """Logs about deleted pages still seed, with subject id 0."""
        wiki.log("delete", "delete", days_ago(1), title="Deleted_Page")

        seed(db_session, config, quiet_logger)

        assert db_session.query(FeedEntry).one().subject_id == 0

    def test_page_matched_by_namespace_and_title(self, db_session, wiki, config, quiet_logger):
        wiki.page("Same", namespace=0)
        talk = wiki.page("Same", namespace=1)
        wiki.log("move", "move", days_ago(1), title="Same", namespace=1)

        seed(db_session, config, quiet_logger)

        assert db_session.query(FeedEntry).one().subject_id == talk

    def test_restricted_and_unknown_types_excluded(self, db_session, wiki, config, quiet_logger):
        wiki.log("suppress", "event", days_ago(1), title="Secret")
        wiki.log("customlog", "thing", days_ago(1), title="Unknown")
        kept = wiki.log("block", "block", days_ago(1), title="User:Troll", namespace=2)

        assert seed(db_session, config, quiet_logger) == 1
        assert db_session.query(FeedEntry).one().log_id == kept

    def test_outside_window_excluded(self, db_session, wiki, config, quiet_logger):
        wiki.log("block", "block", days_ago(91), title="User:Old", namespace=2)
        recent = wiki.log("block", "block", days_ago(89), title="User:New", namespace=2)

        seed(db_session, config, quiet_logger)

        assert [l for (l,) in db_session.query(FeedEntry.log_id)] == [recent]

    def test_no_eligible_types_is_noop(self, db_session, wiki, quiet_logger):
        config = RebuildConfig(log_types=["suppress"])
        wiki.log("suppress", "event", days_ago(1), title="Secret")

        assert seed(db_session, config, quiet_logger) == 0
        assert db_session.query(FeedEntry).count() == 0

    def test_batch_limit_keeps_newest(self, db_session, wiki, quiet_logger):
        config = RebuildConfig(batch_limit=1)
        wiki.log("block", "block", days_ago(2), title="User:A", namespace=2)
        newest = wiki.log("block", "unblock", days_ago(1), title="User:A", namespace=2)

        assert seed(db_session, config, quiet_logger) == 1
        assert db_session.query(FeedEntry).one().log_id == newest

    def test_keeps_revision_entries(self, db_session, wiki, config, quiet_logger):
        """Log seeding appends; it never truncates."""
        db_session.add(FeedEntry(timestamp=days_ago(1), actor_name="Alice", title="Kept"))
        db_session.commit()
        wiki.log("block", "block", days_ago(1), title="User:B", namespace=2)

        seed(db_session, config, quiet_logger)

        assert db_session.query(FeedEntry).count() == 2
