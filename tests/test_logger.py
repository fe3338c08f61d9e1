"""
Tests for logger functionality.
"""

from feedrebuild.logger import StructuredLogger, get_logger, reset_logger


class TestStructuredLogger:
    """Test structured logging functionality."""

    def test_logger_creation(self, tmp_path):
        """Logger should be created with default settings."""
        logger = StructuredLogger(
            name="test",
            level="INFO",
            log_dir=tmp_path,
            enable_console=False,
        )

        assert logger.logger.name == "test"
        assert logger.metrics["passes_completed"] == 0

    def test_log_methods(self, tmp_path):
        """All log level methods should work."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )

        logger.debug("Debug message")
        logger.info("Info message")
        logger.warning("Warning message")
        logger.error("Error message")
        logger.critical("Critical message")

    def test_context_written_to_file(self, tmp_path):
        """Keyword context is appended as JSON."""
        logger = StructuredLogger(
            name="test.file",
            log_dir=tmp_path,
            enable_console=False,
        )

        logger.warning("Skipped row", entry_id=12, revision_id=340)

        log_files = list(tmp_path.glob("feedrebuild_*.log"))
        assert len(log_files) == 1
        content = log_files[0].read_text(encoding="utf-8")
        assert 'Skipped row | Context: {"entry_id": 12, "revision_id": 340}' in content

    def test_console_goes_to_stdout(self, capsys):
        logger = StructuredLogger(name="test.console", enable_file=False)

        logger.info("Updating links and size differences...")

        assert "Updating links and size differences..." in capsys.readouterr().out

    def test_metrics_tracking(self):
        """Metrics should be tracked correctly."""
        logger = StructuredLogger(name="test", enable_file=False, enable_console=False)

        logger.record_rows("seed_revisions", 10)
        logger.record_rows("seed_revisions", 5)
        logger.record_rows("seed_logs", -1)  # unknown rowcount
        logger.record_pass_success("seed_revisions", 0.25)
        logger.record_pass_failure("seed_logs")
        logger.record_anomaly("missing_subject_id")
        logger.record_anomaly("missing_subject_id")

        metrics = logger.get_metrics()

        assert metrics["rows_by_pass"] == {"seed_revisions": 15, "seed_logs": 0}
        assert metrics["total_rows"] == 15
        assert metrics["passes_completed"] == 1
        assert metrics["passes_failed"] == 1
        assert metrics["seconds_by_pass"] == {"seed_revisions": 0.25}
        assert metrics["anomalies_by_kind"] == {"missing_subject_id": 2}
        assert metrics["total_anomalies"] == 2

    def test_metrics_summary(self, capsys):
        logger = StructuredLogger(name="test.summary", enable_file=False)
        logger.record_rows("seed_revisions", 3)
        logger.record_pass_success("seed_revisions", 1.5)
        logger.record_anomaly("malformed_associated_rev_id")

        logger.log_metrics_summary()

        out = capsys.readouterr().out
        assert "=== Rebuild Metrics ===" in out
        assert "seed_revisions: 3 in 1.50s" in out
        assert "malformed_associated_rev_id: 1" in out


class TestGlobalLogger:
    """Test global logger singleton."""

    def test_get_logger_singleton(self, tmp_path):
        """get_logger should return same instance."""
        logger1 = get_logger(log_dir=tmp_path, enable_console=False)
        logger2 = get_logger()

        assert logger1 is logger2

    def test_reset_logger(self, tmp_path):
        """reset_logger should clear global instance."""
        logger1 = get_logger(log_dir=tmp_path, enable_console=False)
        reset_logger()
        logger2 = get_logger(log_dir=tmp_path, enable_console=False)

        assert logger1 is not logger2
