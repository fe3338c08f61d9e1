"""
Structured logging system for feedrebuild.

Provides centralized logging with console and file outputs, plus
per-run metrics (rows written per pass, anomalies, pass timings).
"""

import logging
import sys
from pathlib import Path
from typing import Optional
from datetime import datetime
import json


class StructuredLogger:
    """
    Centralized logger with support for console and file outputs.
    Tracks metrics for a rebuild run.
    """

    def __init__(
        self,
        name: str = "feedrebuild",
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_file: bool = True,
        enable_console: bool = True,
    ):
        """
        Initialize the structured logger.

        Args:
            name: Logger name
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: Directory for log files (default: logs/)
            enable_file: Write logs to file
            enable_console: Output logs to console (stdout)
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))
        self.logger.handlers.clear()  # Remove existing handlers
        self.logger.propagate = False

        self.metrics = {
            "rows_by_pass": {},
            "seconds_by_pass": {},
            "anomalies_by_kind": {},
            "passes_completed": 0,
            "passes_failed": 0,
        }

        if enable_console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(getattr(logging, level.upper()))
            console_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            console_handler.setFormatter(console_formatter)
            self.logger.addHandler(console_handler)

        if enable_file:
            if log_dir is None:
                log_dir = Path("logs")
            log_dir.mkdir(parents=True, exist_ok=True)

            log_file = log_dir / f"feedrebuild_{datetime.now().strftime('%Y%m%d')}.log"
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)  # Always log everything to file
            file_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            file_handler.setFormatter(file_formatter)
            self.logger.addHandler(file_handler)

    def debug(self, message: str, **kwargs):
        """Log debug message with optional context."""
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs):
        """Log info message with optional context."""
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message with optional context."""
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs):
        """Log error message with optional context."""
        self._log(logging.ERROR, message, kwargs)

    def critical(self, message: str, **kwargs):
        """Log critical message with optional context."""
        self._log(logging.CRITICAL, message, kwargs)

    def _log(self, level: int, message: str, context: dict):
        """Internal logging method with context."""
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str)}"
        self.logger.log(level, message)

    # Metric tracking methods

    def record_rows(self, pass_name: str, rows: int):
        """Add to the row count written by a pass."""
        by_pass = self.metrics["rows_by_pass"]
        by_pass[pass_name] = by_pass.get(pass_name, 0) + max(rows, 0)

    def record_pass_success(self, pass_name: str, seconds: float):
        """Record a pass that committed."""
        self.metrics["passes_completed"] += 1
        self.metrics["seconds_by_pass"][pass_name] = round(seconds, 3)

    def record_pass_failure(self, pass_name: str):
        self.metrics["passes_failed"] += 1

    def record_anomaly(self, kind: str):
        """Count a skipped row by anomaly kind."""
        if kind not in self.metrics["anomalies_by_kind"]:
            self.metrics["anomalies_by_kind"][kind] = 0
        self.metrics["anomalies_by_kind"][kind] += 1

    def get_metrics(self) -> dict:
        """Return current metrics."""
        metrics_copy = self.metrics.copy()
        metrics_copy["total_rows"] = sum(self.metrics["rows_by_pass"].values())
        metrics_copy["total_anomalies"] = sum(self.metrics["anomalies_by_kind"].values())
        return metrics_copy

    def log_metrics_summary(self):
        """Log a summary of current metrics."""
        metrics = self.get_metrics()

        self.info("=== Rebuild Metrics ===")
        self.info(
            f"Passes: {metrics['passes_completed']} completed, "
            f"{metrics['passes_failed']} failed"
        )

        if metrics["rows_by_pass"]:
            self.info("Rows by pass:")
            for pass_name, rows in metrics["rows_by_pass"].items():
                seconds = metrics["seconds_by_pass"].get(pass_name)
                timing = f" in {seconds:.2f}s" if seconds is not None else ""
                self.info(f"  {pass_name}: {rows}{timing}")

        if metrics["anomalies_by_kind"]:
            self.info("Skipped rows:")
            for kind, count in metrics["anomalies_by_kind"].items():
                self.info(f"  {kind}: {count}")


# Global logger instance
_global_logger: Optional[StructuredLogger] = None


def get_logger(
    name: str = "feedrebuild",
    level: str = "INFO",
    **kwargs
) -> StructuredLogger:
    """
    Get or create the global logger instance.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        **kwargs: Additional arguments passed to StructuredLogger

    Returns:
        StructuredLogger instance
    """
    global _global_logger

    if _global_logger is None:
        _global_logger = StructuredLogger(name=name, level=level, **kwargs)

    return _global_logger


def reset_logger():
    """Reset the global logger (useful for testing)."""
    global _global_logger
    _global_logger = None
