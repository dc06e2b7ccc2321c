"""
Logging and Error Tracking

Configures the ``javawatch`` logger for a run (rotating log files plus
console output) and provides ErrorTracker, which tags the failures and
warnings of one run with an ID and the pipeline stage they came from.
"""

import logging
import logging.handlers
import os
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional


DETAILED_FORMAT = '%(asctime)s | %(name)s | %(levelname)s | %(funcName)s:%(lineno)d | %(message)s'
CONSOLE_FORMAT = '%(asctime)s | %(levelname)s | %(message)s'


class JavaWatchLogger:
    """
    Owns the handlers of the ``javawatch`` logger.

    Every module logs through ``logging.getLogger(__name__)``; records
    propagate up to the package logger configured here.
    """

    def __init__(self, log_dir: str = "logs", app_name: str = "javawatch"):
        self.log_dir = Path(log_dir)
        self.app_name = app_name
        self.log_dir.mkdir(parents=True, exist_ok=True)

    def setup_logger(self, level: int = logging.INFO) -> logging.Logger:
        """
        Attach the run log, the error log and the console handler.

        Handlers left by an earlier setup are closed first, so a second call
        moves logging to the new directory instead of duplicating output.

        Args:
            level: Console level; the files always get DEBUG / ERROR
        """
        logger = logging.getLogger(self.app_name)
        logger.setLevel(logging.DEBUG)

        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

        console = logging.StreamHandler(sys.stdout)
        console.setLevel(level)
        console.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt='%H:%M:%S'))

        logger.addHandler(self._rotating_handler(f"{self.app_name}.log", logging.DEBUG,
                                                 max_bytes=10*1024*1024, backups=5))
        logger.addHandler(console)
        logger.addHandler(self._rotating_handler(f"{self.app_name}_errors.log", logging.ERROR,
                                                 max_bytes=5*1024*1024, backups=3))

        # Playwright's own logger is chatty at INFO
        logging.getLogger("playwright").setLevel(logging.WARNING)
        return logger

    def _rotating_handler(self, filename: str, level: int, max_bytes: int, backups: int):
        handler = logging.handlers.RotatingFileHandler(
            self.log_dir / filename,
            maxBytes=max_bytes,
            backupCount=backups,
            encoding='utf-8'
        )
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(DETAILED_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
        return handler

    def log_run_environment(self):
        logger = logging.getLogger(f"{self.app_name}.system")
        logger.debug(f"Python {sys.version.split()[0]} on {sys.platform}, cwd={os.getcwd()}")
        logger.debug(f"Logs written to {self.log_dir.absolute()}")


class ErrorTracker:
    """
    Collects the errors and warnings raised during one run.

    Each entry gets an ID (``ERR_<time>_<n>`` / ``WARN_<time>_<n>``) that is
    also written to the log, so an operator can match summary and log lines.
    """

    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self.errors: List[Dict[str, Any]] = []
        self.warnings: List[Dict[str, Any]] = []

    def _next_id(self, prefix: str, count: int) -> str:
        return f"{prefix}_{datetime.now().strftime('%Y%m%d_%H%M%S')}_{count:03d}"

    def log_error(self, error: Exception, stage: str, url: Optional[str] = None,
                  details: Optional[Dict[str, Any]] = None) -> str:
        """
        Record a failure of a pipeline stage (fetch, extraction, write).

        Returns:
            The error ID
        """
        error_id = self._next_id("ERR", len(self.errors))
        self.errors.append({
            'id': error_id,
            'stage': stage,
            'type': type(error).__name__,
            'message': str(error),
            'url': url,
            'details': details or {},
        })

        where = f" at {url}" if url else ""
        self.logger.error(f"[{error_id}] {stage} failed{where}: {type(error).__name__}: {error}")
        self.logger.debug(f"[{error_id}] Traceback:\n"
                          + ''.join(traceback.format_exception(type(error), error, error.__traceback__)))
        return error_id

    def log_warning(self, message: str, stage: str) -> str:
        """Record a problem the run recovered from."""
        warning_id = self._next_id("WARN", len(self.warnings))
        self.warnings.append({'id': warning_id, 'stage': stage, 'message': message})
        self.logger.warning(f"[{warning_id}] {stage}: {message}")
        return warning_id

    def summary(self) -> Dict[str, Any]:
        """Counts of recorded errors (by exception type) and warnings."""
        by_type: Dict[str, int] = {}
        for error in self.errors:
            by_type[error['type']] = by_type.get(error['type'], 0) + 1
        return {
            'errors': len(self.errors),
            'warnings': len(self.warnings),
            'by_type': by_type,
        }


def get_logger(name: str = None) -> logging.Logger:
    """Get ``javawatch`` or one of its children; never creates log files."""
    return logging.getLogger(f"javawatch.{name}" if name else "javawatch")


def initialize_logging(log_dir: str = "logs", level: int = logging.INFO) -> JavaWatchLogger:
    """
    Configure logging for a run.

    Args:
        log_dir: Directory for log files
        level: Console logging level
    """
    run_logger = JavaWatchLogger(log_dir)
    run_logger.setup_logger(level)
    run_logger.log_run_environment()
    return run_logger
