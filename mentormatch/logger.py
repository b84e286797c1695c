"""
Structured logging for MentorMatch.

Every module logs through one StructuredLogger. Context passed as keyword
arguments is appended to the message as JSON, and the logger keeps running
counters for matching passes and store calls that the CLI can summarize.
"""

import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _level(name: str) -> int:
    return getattr(logging, name.upper())


def _console_handler(level: str) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(_level(level))
    handler.setFormatter(logging.Formatter(fmt=CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    return handler


def _file_handler(log_dir: Path) -> logging.Handler:
    """One file per day; the file gets everything down to DEBUG."""
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"mentormatch_{datetime.now().strftime('%Y%m%d')}.log"
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(fmt=FILE_FORMAT, datefmt=DATE_FORMAT))
    return handler


def _empty_metrics() -> Dict[str, Any]:
    return {
        "match_runs": 0,
        "mentors_scored": 0,
        "matches_returned": 0,
        "store_calls": 0,
        "store_failures": 0,
        "errors_by_type": {},
        "store_success_rate": {},
    }


class StructuredLogger:
    """
    Thin wrapper over a stdlib logger with JSON context and metrics.

    Modules keep a reference from get_logger() at import time, so
    configure() swaps handlers on the same instance instead of creating a
    new one.
    """

    def __init__(
        self,
        name: str = "mentormatch",
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_file: bool = False,
        enable_console: bool = True,
    ):
        """
        Args:
            name: Logger name
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: Directory for daily log files (default: logs/)
            enable_file: Write logs to a file under log_dir
            enable_console: Write logs to stderr
        """
        self.logger = logging.getLogger(name)
        self.metrics: Dict[str, Any] = _empty_metrics()
        self.configure(level=level, log_dir=log_dir, enable_file=enable_file, enable_console=enable_console)

    def configure(
        self,
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_file: bool = False,
        enable_console: bool = True,
    ):
        self.logger.setLevel(_level(level))
        self.logger.propagate = False
        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)
            handler.close()

        if enable_console:
            self.logger.addHandler(_console_handler(level))
        if enable_file:
            self.logger.addHandler(_file_handler(log_dir or Path("logs")))

    def debug(self, message: str, **context):
        self._log(logging.DEBUG, message, context)

    def info(self, message: str, **context):
        self._log(logging.INFO, message, context)

    def warning(self, message: str, **context):
        self._log(logging.WARNING, message, context)

    def error(self, message: str, **context):
        self._log(logging.ERROR, message, context)

    def critical(self, message: str, **context):
        self._log(logging.CRITICAL, message, context)

    def _log(self, level: int, message: str, context: Dict[str, Any]):
        if not self.logger.isEnabledFor(level):
            return
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str)}"
        self.logger.log(level, message)

    # Metrics

    def reset_metrics(self):
        self.metrics = _empty_metrics()

    def record_match_run(self, mentors_scored: int, matches_returned: int):
        """Count one scorer pass over a mentor pool."""
        self.metrics["match_runs"] += 1
        self.metrics["mentors_scored"] += mentors_scored
        self.metrics["matches_returned"] += matches_returned

    def _store_stats(self, operation: str) -> Dict[str, int]:
        return self.metrics["store_success_rate"].setdefault(operation, {"attempts": 0, "successes": 0})

    def record_store_call(self, operation: str):
        self.metrics["store_calls"] += 1
        self._store_stats(operation)["attempts"] += 1

    def record_store_success(self, operation: str):
        self._store_stats(operation)["successes"] += 1

    def record_store_failure(self, operation: str, error_type: str):
        self.metrics["store_failures"] += 1
        errors = self.metrics["errors_by_type"]
        errors[error_type] = errors.get(error_type, 0) + 1

    def get_metrics(self) -> Dict[str, Any]:
        """Current counters, with a success_rate added per store operation."""
        for stats in self.metrics["store_success_rate"].values():
            if stats["attempts"]:
                stats["success_rate"] = round(stats["successes"] / stats["attempts"], 3)
        return dict(self.metrics)

    def log_metrics_summary(self):
        metrics = self.get_metrics()
        runs = metrics["match_runs"]
        per_run = round(metrics["matches_returned"] / runs, 1) if runs else 0

        self.info("=== Matching Session Metrics ===")
        self.info(f"Match runs: {runs} ({metrics['mentors_scored']} mentors scored, {per_run} matches/run)")
        self.info(f"Store calls: {metrics['store_calls']} ({metrics['store_failures']} failed)")

        if metrics["store_success_rate"]:
            self.info("Store Success Rates:")
            for operation, stats in metrics["store_success_rate"].items():
                rate = stats.get("success_rate", 0) * 100
                self.info(f"  {operation}: {stats['successes']}/{stats['attempts']} ({rate:.1f}%)")

        if metrics["errors_by_type"]:
            self.info("Error Types:")
            for error_type, count in metrics["errors_by_type"].items():
                self.info(f"  {error_type}: {count}")


_global_logger: Optional[StructuredLogger] = None


def get_logger(name: str = "mentormatch", level: str = "INFO", **kwargs) -> StructuredLogger:
    """Return the process-wide logger, creating it on first use."""
    global _global_logger
    if _global_logger is None:
        _global_logger = StructuredLogger(name=name, level=level, **kwargs)
    return _global_logger


def reset_logger():
    """Drop the process-wide logger (used by tests)."""
    global _global_logger
    _global_logger = None
